import logging

import cloudinary
import cloudinary.uploader

from config.env import (
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
)
from utils.errors import AppError

logger = logging.getLogger(__name__)

cloudinary.config(
    cloud_name=CLOUDINARY_CLOUD_NAME,
    api_key=CLOUDINARY_API_KEY,
    api_secret=CLOUDINARY_API_SECRET,
    secure=True,
)

PRODUCT_IMAGE_FOLDER = "gomart/products"
MAX_IMAGE_WIDTH = 1600


def product_image_folder(vendor_id) -> str:
    return f"{PRODUCT_IMAGE_FOLDER}/{vendor_id}"


def upload_image(file, folder: str) -> str:
    """
    Upload an image scaled down to at most 1600px wide and return its
    https URL. Blocking; call it from a worker thread.
    """
    result = cloudinary.uploader.upload(
        file,
        folder=folder,
        resource_type="image",
        transformation=[{"width": MAX_IMAGE_WIDTH, "crop": "limit"}],
    )

    url = (result or {}).get("secure_url")
    if not url:
        logger.error("IMAGE_UPLOAD_NO_URL folder=%s", folder)
        raise AppError("Product image upload failed")

    return url
