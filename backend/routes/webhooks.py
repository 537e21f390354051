from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import Optional
import hmac
import hashlib
import re

from config.env import PAYMENT_WEBHOOK_SECRET
from database import get_db
from utils.errors import AppError, BadRequest, Unauthorized
from utils.payment_service import apply_payment_callback
from utils.responses import success
from utils.serializers import serialize_payment

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

# hex encoded HMAC-SHA256
SIGNATURE_REGEX = re.compile(r"^[0-9a-fA-F]{64}$")


class PaymentCallback(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_reference: Optional[str] = Field(None, alias="transactionReference")
    status: Optional[str] = None


# =========================================================
# SIGNATURE VERIFICATION
# =========================================================

def verify_signature(raw_body: bytes, received_signature: str):
    if not PAYMENT_WEBHOOK_SECRET:
        raise AppError("Webhook secret not configured")

    if not SIGNATURE_REGEX.fullmatch(received_signature):
        raise Unauthorized("Invalid webhook signature")

    computed = hmac.new(
        PAYMENT_WEBHOOK_SECRET.encode(),
        raw_body,
        hashlib.sha256
    ).hexdigest()

    if not hmac.compare_digest(computed.encode(), received_signature.lower().encode()):
        raise Unauthorized("Invalid webhook signature")


# =========================================================
# PAYMENT GATEWAY CALLBACK (IDEMPOTENT, FIRST WRITE WINS)
# =========================================================

@router.post("/payments")
async def payment_callback(request: Request, db=Depends(get_db)):
    """
    Payment gateway status callback.

    Guarantees:
    - Signature verified
    - Only a pending payment changes state
    - Retries and contradicting callbacks never overwrite a final state
    - No order, stock or cart side effects
    """

    signature = request.headers.get("X-Payment-Signature")
    if not signature:
        raise Unauthorized("Missing signature")

    raw_body = await request.body()
    verify_signature(raw_body, signature)

    try:
        payload = PaymentCallback.model_validate_json(raw_body)
    except ValidationError:
        raise BadRequest("Invalid JSON payload")

    payment, applied = await apply_payment_callback(
        db,
        transaction_reference=payload.transaction_reference,
        status=payload.status,
    )

    return success(
        {"payment": serialize_payment(payment), "applied": applied},
        message="Payment status updated" if applied else "Payment already finalized",
    )
