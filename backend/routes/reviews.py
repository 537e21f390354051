from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

from pymongo.errors import DuplicateKeyError

from config.constants import MAX_RATING, MIN_RATING
from database import get_db
from utils.errors import BadRequest, Conflict, NotFound
from utils.guards import parse_object_id
from utils.ownership import load_owned
from utils.products import average_rating, lookup_by_id
from utils.responses import success
from utils.security import require_customer
from utils.serializers import serialize_review

router = APIRouter(
    prefix="/api/reviews",
    tags=["Reviews"]
)

# -------------------------------------------------
# SCHEMA
# -------------------------------------------------

class CreateReview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(None, alias="productId")
    rating: Optional[int] = None
    comment: Optional[str] = None


class UpdateReview(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


def check_rating(rating: int):
    if rating < MIN_RATING or rating > MAX_RATING:
        raise BadRequest(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


# -------------------------------------------------
# CREATE REVIEW (CUSTOMER)
# -------------------------------------------------

@router.post("", status_code=201)
async def create_review(
    data: CreateReview,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    if not data.product_id or data.rating is None:
        raise BadRequest("Product ID and rating are required")

    check_rating(data.rating)

    product = await db.products.find_one({"_id": parse_object_id(data.product_id, "product id")})
    if not product:
        raise NotFound("Product not found")

    # one review per (customer, product)
    existing = await db.reviews.find_one({
        "customer_id": customer["_id"],
        "product_id": product["_id"],
    })
    if existing:
        raise Conflict("You have already reviewed this product")

    now = datetime.utcnow()
    review = {
        "customer_id": customer["_id"],
        "product_id": product["_id"],
        "vendor_id": product.get("vendor_id"),
        "rating": data.rating,
        "comment": data.comment,
        "created_at": now,
        "updated_at": now,
    }

    try:
        await db.reviews.insert_one(review)
    except DuplicateKeyError:
        raise Conflict("You have already reviewed this product")

    return success(
        {"review": serialize_review(review, customer)},
        message="Review created successfully",
        status_code=201,
    )


# -------------------------------------------------
# PUBLIC: GET PRODUCT REVIEWS
# -------------------------------------------------

@router.get("/product/{product_id}")
async def get_product_reviews(product_id: str, db=Depends(get_db)):
    pid = parse_object_id(product_id, "product id")

    if not await db.products.find_one({"_id": pid}, {"_id": 1}):
        raise NotFound("Product not found")

    cursor = db.reviews.find({"product_id": pid}).sort([("created_at", -1), ("_id", -1)])
    reviews = [r async for r in cursor]

    customers = await lookup_by_id(
        db.customers,
        [r["customer_id"] for r in reviews],
        {"first_name": 1, "last_name": 1},
    )

    return success({
        "reviews": [serialize_review(r, customers.get(r["customer_id"])) for r in reviews],
        "averageRating": average_rating([r["rating"] for r in reviews]),
        "reviewCount": len(reviews),
    })


# -------------------------------------------------
# UPDATE / DELETE OWN REVIEW
# -------------------------------------------------

@router.put("/{review_id}")
async def update_review(
    review_id: str,
    data: UpdateReview,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    review = await load_owned(
        db.reviews,
        review_id,
        owner_field="customer_id",
        owner_id=customer["_id"],
        name="Review",
        action="update",
    )

    update = {}
    if data.rating is not None:
        check_rating(data.rating)
        update["rating"] = data.rating
    if data.comment is not None:
        update["comment"] = data.comment

    if update:
        update["updated_at"] = datetime.utcnow()
        await db.reviews.update_one({"_id": review["_id"]}, {"$set": update})

    updated = await db.reviews.find_one({"_id": review["_id"]})

    return success(
        {"review": serialize_review(updated, customer)},
        message="Review updated successfully",
    )


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    review = await load_owned(
        db.reviews,
        review_id,
        owner_field="customer_id",
        owner_id=customer["_id"],
        name="Review",
        action="delete",
    )

    await db.reviews.delete_one({"_id": review["_id"]})

    return success(message="Review deleted successfully")
