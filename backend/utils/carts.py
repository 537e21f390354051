from datetime import datetime

from pymongo import ReturnDocument

from utils.products import lookup_by_id


async def get_or_create_cart(db, customer_id) -> dict:
    """
    A customer has exactly one cart; the first access creates it.
    """
    now = datetime.utcnow()
    return await db.carts.find_one_and_update(
        {"customer_id": customer_id},
        {"$setOnInsert": {"items": [], "created_at": now, "updated_at": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )


async def cart_lines(db, cart: dict) -> list[dict]:
    """
    Cart items joined with their products. Items whose product no longer
    exists are skipped.
    """
    items = cart.get("items", [])
    products = await lookup_by_id(db.products, [i["product_id"] for i in items])

    lines = []
    for item in items:
        product = products.get(item["product_id"])
        if not product:
            continue
        lines.append({"item": item, "product": product})
    return lines


def cart_summary(cart: dict, lines: list[dict]) -> dict:
    items = []
    total_items = 0
    total_amount = 0

    for line in lines:
        product = line["product"]
        qty = int(line["item"].get("quantity", 1))
        unit_price = float(product.get("price", 0))

        total_items += qty
        total_amount += unit_price * qty

        items.append({
            "productId": str(product["_id"]),
            "quantity": qty,
            "product": {
                "id": str(product["_id"]),
                "productName": product.get("product_name"),
                "price": unit_price,
                "imageURL": product.get("image_url"),
                "stockQuantity": product.get("stock_quantity", 0),
                "isActive": product.get("is_active", False),
            },
            "lineTotal": round(unit_price * qty, 2),
        })

    return {
        "id": str(cart["_id"]),
        "customerId": str(cart["customer_id"]),
        "cartItems": items,
        "totalItems": total_items,
        "totalAmount": round(total_amount, 2),
    }
