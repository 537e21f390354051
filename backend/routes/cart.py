from datetime import datetime
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from database import get_db
from utils.carts import cart_lines, cart_summary, get_or_create_cart
from utils.errors import BadRequest, NotFound
from utils.guards import parse_object_id
from utils.responses import success
from utils.security import require_customer

router = APIRouter(prefix="/api/cart", tags=["Cart"])


class CartAddItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., min_length=1, alias="productId")
    quantity: int = Field(1, gt=0)


class CartUpdateItem(BaseModel):
    quantity: int = Field(..., gt=0)


async def _purchasable_product(db, product_id, quantity: int) -> dict:
    product = await db.products.find_one({"_id": product_id, "is_active": True})
    if not product:
        raise NotFound("Product not found")

    if quantity > product.get("stock_quantity", 0):
        raise BadRequest("Quantity exceeds available stock")

    return product


async def _cart_response(db, customer_id, message: str | None = None):
    cart = await get_or_create_cart(db, customer_id)
    lines = await cart_lines(db, cart)
    return success({"cart": cart_summary(cart, lines)}, message=message)


@router.get("")
async def get_cart(
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    return await _cart_response(db, customer["_id"])


@router.post("/items")
async def add_to_cart(
    data: CartAddItem,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    product_id = parse_object_id(data.product_id, "product id")
    await _purchasable_product(db, product_id, data.quantity)

    cart = await get_or_create_cart(db, customer["_id"])
    now = datetime.utcnow()

    # existing line: set quantity
    result = await db.carts.update_one(
        {"_id": cart["_id"], "items.product_id": product_id},
        {"$set": {"items.$.quantity": data.quantity, "items.$.updated_at": now, "updated_at": now}},
    )

    if result.matched_count == 0:
        await db.carts.update_one(
            {"_id": cart["_id"]},
            {
                "$push": {"items": {
                    "product_id": product_id,
                    "quantity": data.quantity,
                    "added_at": now,
                    "updated_at": now,
                }},
                "$set": {"updated_at": now},
            },
        )

    return await _cart_response(db, customer["_id"], message="Cart updated")


@router.put("/items/{product_id}")
async def update_cart_item(
    product_id: str,
    data: CartUpdateItem,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    pid = parse_object_id(product_id, "product id")
    cart = await get_or_create_cart(db, customer["_id"])

    if not any(item["product_id"] == pid for item in cart.get("items", [])):
        raise NotFound("Item not found in cart")

    await _purchasable_product(db, pid, data.quantity)

    now = datetime.utcnow()
    await db.carts.update_one(
        {"_id": cart["_id"], "items.product_id": pid},
        {"$set": {"items.$.quantity": data.quantity, "items.$.updated_at": now, "updated_at": now}},
    )

    return await _cart_response(db, customer["_id"], message="Cart item updated")


@router.delete("/items/{product_id}")
async def remove_cart_item(
    product_id: str,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    pid = parse_object_id(product_id, "product id")
    cart = await get_or_create_cart(db, customer["_id"])

    if not any(item["product_id"] == pid for item in cart.get("items", [])):
        raise NotFound("Item not found in cart")

    await db.carts.update_one(
        {"_id": cart["_id"]},
        {"$pull": {"items": {"product_id": pid}}, "$set": {"updated_at": datetime.utcnow()}},
    )

    return await _cart_response(db, customer["_id"], message="Item removed")


@router.delete("")
async def clear_cart(
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    await db.carts.update_one(
        {"customer_id": customer["_id"]},
        {"$set": {"items": [], "updated_at": datetime.utcnow()}},
    )
    return await _cart_response(db, customer["_id"], message="Cart cleared")
