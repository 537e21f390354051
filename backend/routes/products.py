from fastapi import APIRouter, Depends, Query
from typing import Optional
from datetime import datetime
import logging
import math
import re

from config.constants import PRODUCT_SORT_FIELDS, PRODUCTS_PAGE_DEFAULT, PRODUCTS_PAGE_MAX
from database import get_db
from models.product import ProductCreate, ProductUpdate
from utils.errors import BadRequest, NotFound
from utils.guards import parse_object_id
from utils.ownership import load_owned
from utils.products import build_product_card, lookup_by_id, rating_summary
from utils.responses import success
from utils.security import optional_customer, require_vendor
from utils.serializers import serialize_review

router = APIRouter(prefix="/api/products", tags=["Products"])
logger = logging.getLogger(__name__)


async def _category_or_400(db, category_id: str) -> dict:
    try:
        oid = parse_object_id(category_id, "category id")
    except BadRequest:
        raise BadRequest("Invalid category ID")

    category = await db.categories.find_one({"_id": oid})
    if not category:
        raise BadRequest("Invalid category ID")
    return category


async def _product_card(db, product: dict) -> dict:
    vendor = await db.vendors.find_one({"_id": product["vendor_id"]})
    category = await db.categories.find_one({"_id": product["category_id"]})
    ratings = await rating_summary(db, [product["_id"]])
    return build_product_card(product, vendor, category, ratings.get(product["_id"]))


# =========================
# LIST PRODUCTS (PUBLIC)
# =========================

@router.get("")
async def list_products(
    page: int = 1,
    limit: int = PRODUCTS_PAGE_DEFAULT,
    category: Optional[str] = None,
    vendor: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    search: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    customer=Depends(optional_customer),
    db=Depends(get_db),
):
    # ---- pagination ----
    page = max(page, 1)
    limit = min(max(limit, 1), PRODUCTS_PAGE_MAX)
    skip = (page - 1) * limit

    query: dict = {"is_active": True}

    # ---- filters ----
    if category:
        query["category_id"] = parse_object_id(category, "category id")

    if vendor:
        query["vendor_id"] = parse_object_id(vendor, "vendor id")

    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = min_price
        if max_price is not None:
            query["price"]["$lte"] = max_price

    # ---- text search ----
    if search:
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"product_name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]

    # ---- sorting (ties broken by _id so pages are stable) ----
    sort_field = PRODUCT_SORT_FIELDS.get(sort_by)
    if not sort_field:
        raise BadRequest(f"Invalid sortBy. Allowed: {', '.join(sorted(PRODUCT_SORT_FIELDS))}")
    if sort_order not in ("asc", "desc"):
        raise BadRequest("Invalid sortOrder. Allowed: asc, desc")
    direction = 1 if sort_order == "asc" else -1

    cursor = (
        db.products
        .find(query)
        .sort([(sort_field, direction), ("_id", direction)])
        .skip(skip)
        .limit(limit)
    )
    products = [p async for p in cursor]

    vendors = await lookup_by_id(db.vendors, [p["vendor_id"] for p in products])
    categories = await lookup_by_id(db.categories, [p["category_id"] for p in products])
    ratings = await rating_summary(db, [p["_id"] for p in products])

    cards = [
        build_product_card(
            p,
            vendors.get(p["vendor_id"]),
            categories.get(p["category_id"]),
            ratings.get(p["_id"]),
        )
        for p in products
    ]

    total = await db.products.count_documents(query)

    return success({
        "products": cards,
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit),
            "totalProducts": total,
            "hasNext": skip + limit < total,
            "hasPrev": page > 1,
        },
    })


# =========================
# PRODUCT DETAIL (PUBLIC)
# =========================

@router.get("/{product_id}")
async def product_detail(
    product_id: str,
    customer=Depends(optional_customer),
    db=Depends(get_db),
):
    product = await db.products.find_one({"_id": parse_object_id(product_id, "product id")})
    if not product:
        raise NotFound("Product not found")

    card = await _product_card(db, product)

    reviews = [r async for r in db.reviews.find({"product_id": product["_id"]}).sort("created_at", -1)]
    reviewers = await lookup_by_id(
        db.customers,
        [r["customer_id"] for r in reviews],
        {"first_name": 1, "last_name": 1},
    )
    card["reviews"] = [serialize_review(r, reviewers.get(r["customer_id"])) for r in reviews]

    if customer:
        card["reviewedByMe"] = any(r["customer_id"] == customer["_id"] for r in reviews)

    return success({"product": card})


# =========================
# VENDOR CREATE PRODUCT
# =========================

@router.post("", status_code=201)
async def create_product(
    data: ProductCreate,
    vendor=Depends(require_vendor),
    db=Depends(get_db),
):
    category = await _category_or_400(db, data.category_id)

    now = datetime.utcnow()
    product = {
        "product_name": data.product_name.strip(),
        "description": data.description,
        "price": data.price,
        "stock_quantity": data.stock_quantity,
        "category_id": category["_id"],
        "vendor_id": vendor["_id"],
        "image_url": data.image_url,
        "sku": data.sku,
        "brand": data.brand,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }

    await db.products.insert_one(product)
    logger.info("PRODUCT_CREATED product=%s vendor=%s", product["_id"], vendor["_id"])

    return success(
        {"product": build_product_card(product, vendor, category)},
        message="Product created successfully",
        status_code=201,
    )


# =========================
# VENDOR UPDATE PRODUCT
# =========================

@router.put("/{product_id}")
async def update_product(
    product_id: str,
    data: ProductUpdate,
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

    update = {}
    if data.product_name:
        update["product_name"] = data.product_name.strip()
    if data.description:
        update["description"] = data.description
    if data.price is not None:
        update["price"] = data.price
    if data.stock_quantity is not None:
        update["stock_quantity"] = data.stock_quantity
    if data.category_id:
        update["category_id"] = (await _category_or_400(db, data.category_id))["_id"]
    if data.image_url:
        update["image_url"] = data.image_url
    if data.sku is not None:
        update["sku"] = data.sku
    if data.brand is not None:
        update["brand"] = data.brand
    if data.is_active is not None:
        update["is_active"] = data.is_active

    if update:
        update["updated_at"] = datetime.utcnow()
        await db.products.update_one({"_id": product["_id"]}, {"$set": update})

    updated = await db.products.find_one({"_id": product["_id"]})

    return success(
        {"product": await _product_card(db, updated)},
        message="Product updated successfully",
    )


# =========================
# VENDOR DELETE PRODUCT
# =========================

@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    vendor=Depends(require_vendor),
    db=Depends(get_db),
):
    product = await load_owned(
        db.products,
        product_id,
        owner_field="vendor_id",
        owner_id=vendor["_id"],
        name="Product",
        action="delete",
    )

    await db.products.delete_one({"_id": product["_id"]})
    logger.info("PRODUCT_DELETED product=%s vendor=%s", product["_id"], vendor["_id"])

    return success(message="Product deleted successfully")
