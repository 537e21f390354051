from utils.serializers import serialize_product


def average_rating(ratings: list[int]) -> float:
    if not ratings:
        return 0
    return round(sum(ratings) / len(ratings), 1)


async def rating_summary(db, product_ids: list) -> dict:
    """
    {product_id: {"averageRating": float, "reviewCount": int}} for the given ids.
    """
    grouped = {pid: [] for pid in product_ids}

    cursor = db.reviews.find(
        {"product_id": {"$in": list(product_ids)}},
        {"product_id": 1, "rating": 1},
    )
    async for r in cursor:
        grouped.setdefault(r["product_id"], []).append(r["rating"])

    return {
        pid: {
            "averageRating": average_rating(ratings),
            "reviewCount": len(ratings),
        }
        for pid, ratings in grouped.items()
    }


async def lookup_by_id(collection, ids, projection: dict | None = None) -> dict:
    ids = list({i for i in ids if i is not None})
    if not ids:
        return {}

    found = {}
    async for doc in collection.find({"_id": {"$in": ids}}, projection):
        found[doc["_id"]] = doc
    return found


def build_product_card(product: dict, vendor: dict | None, category: dict | None, rating: dict | None = None):
    card = serialize_product(product)

    card["category"] = (
        {
            "id": str(category["_id"]),
            "categoryName": category.get("category_name"),
        }
        if category else None
    )
    card["vendor"] = (
        {
            "id": str(vendor["_id"]),
            "vendorName": vendor.get("vendor_name"),
            "region": vendor.get("region"),
            "city": vendor.get("city"),
            "isVerified": vendor.get("is_verified", False),
        }
        if vendor else None
    )

    rating = rating or {}
    card["averageRating"] = rating.get("averageRating", 0)
    card["reviewCount"] = rating.get("reviewCount", 0)

    return card
