from fastapi import APIRouter, Depends
from datetime import datetime
from typing import Optional
import logging

from pydantic import BaseModel, ConfigDict, Field

from config.constants import ORDER_PENDING, SHIPPING_PENDING
from database import get_db
from utils.carts import cart_lines, get_or_create_cart
from utils.errors import BadRequest
from utils.ownership import load_for_owner
from utils.products import lookup_by_id
from utils.responses import success
from utils.security import require_customer
from utils.serializers import serialize_order

router = APIRouter(prefix="/api/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


class Checkout(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shipping_address: Optional[str] = Field(None, alias="shippingAddress")
    region: Optional[str] = None
    city: Optional[str] = None


async def _with_payment_and_shipping(db, orders: list[dict]) -> list[dict]:
    order_ids = [o["_id"] for o in orders]

    payments = {p["order_id"]: p async for p in db.payments.find({"order_id": {"$in": order_ids}})}
    shipping = {s["order_id"]: s async for s in db.shipping.find({"order_id": {"$in": order_ids}})}

    return [
        serialize_order(o, payments.get(o["_id"]), shipping.get(o["_id"]))
        for o in orders
    ]


# ======================================================
# LIST MY ORDERS
# ======================================================

@router.get("")
async def list_orders(
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    cursor = db.orders.find({"customer_id": customer["_id"]}).sort([("order_date", -1), ("_id", -1)])
    orders = [o async for o in cursor]

    return success({"orders": await _with_payment_and_shipping(db, orders)})


# ======================================================
# ORDER DETAIL
# ======================================================

@router.get("/{order_id}")
async def order_detail(
    order_id: str,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    order = await load_for_owner(
        db.orders,
        order_id,
        owner_field="customer_id",
        owner_id=customer["_id"],
        name="Order",
    )

    serialized = await _with_payment_and_shipping(db, [order])
    return success({"order": serialized[0]})


# ======================================================
# CHECKOUT (CART -> ORDER)
# ======================================================

@router.post("", status_code=201)
async def checkout(
    data: Checkout | None = None,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    """
    Turn the customer's cart into a pending order.

    Prices are captured per line at this moment and the order total is
    stored; payments later charge exactly that total. Stock levels are
    checked but not decremented.
    """
    data = data or Checkout()

    cart = await get_or_create_cart(db, customer["_id"])
    if not cart.get("items"):
        raise BadRequest("Cart is empty")

    lines = await cart_lines(db, cart)
    if len(lines) != len(cart["items"]):
        raise BadRequest("Some products in your cart are no longer available")

    items = []
    total = 0
    for line in lines:
        product = line["product"]
        qty = int(line["item"]["quantity"])

        if not product.get("is_active", False):
            raise BadRequest(f"{product.get('product_name')} is no longer available")
        if qty > product.get("stock_quantity", 0):
            raise BadRequest(f"Insufficient stock for {product.get('product_name')}")

        unit_price = float(product["price"])
        line_total = round(unit_price * qty, 2)
        total += line_total

        items.append({
            "product_id": product["_id"],
            "vendor_id": product["vendor_id"],
            "product_name": product.get("product_name"),
            "image_url": product.get("image_url"),
            "quantity": qty,
            "unit_price": unit_price,
            "line_total": line_total,
        })

    # inactive vendors cannot sell even if a product row was left active
    vendors = await lookup_by_id(db.vendors, [i["vendor_id"] for i in items], {"is_active": 1})
    for item in items:
        vendor = vendors.get(item["vendor_id"])
        if not vendor or not vendor.get("is_active", False):
            raise BadRequest(f"{item['product_name']} is no longer available")

    now = datetime.utcnow()
    order = {
        "customer_id": customer["_id"],
        "items": items,
        "total_amount": round(total, 2),
        "status": ORDER_PENDING,
        "order_date": now,
        "updated_at": now,
    }
    await db.orders.insert_one(order)

    shipping = {
        "order_id": order["_id"],
        "shipping_address": data.shipping_address or customer.get("address", ""),
        "region": data.region or customer.get("region"),
        "city": data.city or customer.get("city"),
        "status": SHIPPING_PENDING,
        "courier": None,
        "tracking_number": None,
        "created_at": now,
    }
    await db.shipping.insert_one(shipping)

    await db.carts.update_one(
        {"_id": cart["_id"]},
        {"$set": {"items": [], "updated_at": now}},
    )

    logger.info(
        "ORDER_CREATED order=%s customer=%s total=%s",
        order["_id"],
        customer["_id"],
        order["total_amount"],
    )

    return success(
        {"order": serialize_order(order, None, shipping)},
        message="Order created successfully",
        status_code=201,
    )
