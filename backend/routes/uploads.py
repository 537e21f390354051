# backend/routes/uploads.py

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, UploadFile, File

from database import get_db
from utils.cloudinary import product_image_folder, upload_image
from utils.errors import BadRequest
from utils.ownership import load_owned
from utils.responses import success
from utils.security import require_vendor

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])
logger = logging.getLogger(__name__)


# =========================
# UPLOAD PRODUCT IMAGE
# =========================
@router.post("/products/{product_id}/image")
async def upload_product_image(
    product_id: str,
    file: UploadFile = File(...),
    vendor=Depends(require_vendor),
    db=Depends(get_db),
):
    product = await load_owned(
        db.products,
        product_id,
        owner_field="vendor_id",
        owner_id=vendor["_id"],
        name="Product",
        action="update",
    )

    # validate file type
    if not file.content_type or not file.content_type.startswith("image/"):
        raise BadRequest("Only image files are allowed")

    image_url = await asyncio.to_thread(
        upload_image,
        file.file,
        folder=product_image_folder(vendor["_id"]),
    )

    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"image_url": image_url, "updated_at": datetime.utcnow()}},
    )

    logger.info("PRODUCT_IMAGE_UPLOADED product=%s vendor=%s", product["_id"], vendor["_id"])

    return success(
        {"productId": str(product["_id"]), "imageURL": image_url},
        message="Product image uploaded",
    )
