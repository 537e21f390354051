from fastapi import APIRouter, Depends

from config.constants import CATEGORY_PREVIEW_PRODUCTS
from database import get_db
from utils.errors import NotFound
from utils.guards import parse_object_id
from utils.products import lookup_by_id
from utils.responses import success
from utils.serializers import serialize_category, serialize_product

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("")
async def list_categories(db=Depends(get_db)):
    categories = [c async for c in db.categories.find({}).sort([("category_name", 1), ("_id", 1)])]

    counts = {c["_id"]: 0 for c in categories}
    cursor = db.products.find(
        {"category_id": {"$in": list(counts)}, "is_active": True},
        {"category_id": 1},
    )
    async for p in cursor:
        counts[p["category_id"]] = counts.get(p["category_id"], 0) + 1

    result = []
    for c in categories:
        item = serialize_category(c)
        item["productCount"] = counts.get(c["_id"], 0)
        result.append(item)

    return success({"categories": result})


@router.get("/{category_id}")
async def category_detail(category_id: str, db=Depends(get_db)):
    oid = parse_object_id(category_id, "category id")

    category = await db.categories.find_one({"_id": oid})
    if not category:
        raise NotFound("Category not found")

    query = {"category_id": oid, "is_active": True}
    cursor = db.products.find(query).sort([("created_at", -1), ("_id", -1)]).limit(CATEGORY_PREVIEW_PRODUCTS)
    products = [p async for p in cursor]

    vendors = await lookup_by_id(
        db.vendors,
        [p["vendor_id"] for p in products],
        {"vendor_name": 1, "is_verified": 1},
    )

    items = []
    for p in products:
        card = serialize_product(p)
        vendor = vendors.get(p["vendor_id"])
        card["vendor"] = (
            {"vendorName": vendor.get("vendor_name"), "isVerified": vendor.get("is_verified", False)}
            if vendor else None
        )
        items.append(card)

    data = serialize_category(category)
    data["products"] = items
    data["productCount"] = await db.products.count_documents(query)

    return success({"category": data})
