import logging
import secrets
from datetime import datetime

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from config.constants import (
    ALLOWED_PAYMENT_METHODS,
    PAYMENT_PENDING,
    PAYMENT_TERMINAL_STATES,
)
from utils.audit import log_audit
from utils.errors import BadRequest, Conflict, NotFound
from utils.ownership import load_for_owner

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "GM-"


def generate_reference() -> str:
    return REFERENCE_PREFIX + secrets.token_hex(10).upper()


def normalize_payment_method(payment_method: str) -> str:
    method = (payment_method or "").strip().upper().replace(" ", "_").replace("-", "_")
    if method not in ALLOWED_PAYMENT_METHODS:
        raise BadRequest(
            f"Invalid payment method. Allowed: {', '.join(sorted(ALLOWED_PAYMENT_METHODS))}"
        )
    return method


# ======================================================
# INITIATE (CUSTOMER)
# ======================================================

async def initiate_payment(
    db,
    *,
    order_id: str | None,
    payment_method: str | None,
    transaction_reference: str | None,
    customer: dict,
) -> dict:
    """
    Open a pending payment for one of the customer's orders.

    The amount always comes from the stored order total, never from the
    request. Orders that belong to someone else are reported as missing.
    Order status, stock and cart are left untouched.
    """
    if not order_id or not payment_method:
        raise BadRequest("Order ID and payment method are required")

    method = normalize_payment_method(payment_method)

    order = await load_for_owner(
        db.orders,
        order_id,
        owner_field="customer_id",
        owner_id=customer["_id"],
        name="Order",
    )

    if await db.payments.find_one({"order_id": order["_id"]}, {"_id": 1}):
        raise Conflict("Payment already initiated for this order")

    now = datetime.utcnow()
    payment = {
        "order_id": order["_id"],
        "customer_id": customer["_id"],
        "amount": order["total_amount"],
        "payment_method": method,
        # callbacks locate payments by reference
        "transaction_reference": (transaction_reference or "").strip() or generate_reference(),
        "status": PAYMENT_PENDING,
        "payment_date": now,
        "updated_at": now,
    }

    try:
        await db.payments.insert_one(payment)
    except DuplicateKeyError:
        raise Conflict("Payment already initiated for this order or reference")

    logger.info(
        "PAYMENT_INITIATED payment=%s order=%s method=%s",
        payment["_id"],
        order["_id"],
        method,
    )
    return payment


# ======================================================
# GATEWAY CALLBACK
# ======================================================

async def apply_payment_callback(db, *, transaction_reference: str | None, status: str | None):
    """
    Move a pending payment to completed/failed.

    First write wins: only a pending payment is ever updated, so a
    repeated or contradicting callback leaves the terminal state alone.
    Returns (payment, applied).
    """
    reference = (transaction_reference or "").strip()
    status = (status or "").strip().lower()

    if not reference or not status:
        raise BadRequest("Transaction reference and status are required")

    if status not in PAYMENT_TERMINAL_STATES:
        raise BadRequest(
            f"Invalid payment status. Allowed: {', '.join(sorted(PAYMENT_TERMINAL_STATES))}"
        )

    now = datetime.utcnow()
    updated = await db.payments.find_one_and_update(
        {"transaction_reference": reference, "status": PAYMENT_PENDING},
        {"$set": {"status": status, "settled_at": now, "updated_at": now}},
        return_document=ReturnDocument.AFTER,
    )

    if updated:
        await log_audit(
            db,
            actor_id=None,
            actor_role="system",
            action="PAYMENT_CALLBACK_APPLIED",
            metadata={"payment_id": str(updated["_id"]), "status": status},
        )
        logger.info("PAYMENT_CALLBACK_APPLIED payment=%s status=%s", updated["_id"], status)
        return updated, True

    payment = await db.payments.find_one({"transaction_reference": reference})
    if not payment:
        raise NotFound("Payment not found")

    if payment.get("status") != status:
        logger.warning(
            "PAYMENT_CALLBACK_IGNORED payment=%s current=%s received=%s",
            payment["_id"],
            payment.get("status"),
            status,
        )

    return payment, False
