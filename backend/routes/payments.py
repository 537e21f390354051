from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from database import get_db
from utils.errors import NotFound
from utils.ownership import load_for_owner
from utils.payment_service import initiate_payment
from utils.responses import success
from utils.security import require_customer
from utils.serializers import serialize_payment

router = APIRouter(prefix="/api/payments", tags=["Payments"])


class ProcessPayment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # no amount field, payments always charge the stored order total
    order_id: Optional[str] = Field(None, alias="orderId")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    transaction_reference: Optional[str] = Field(None, alias="transactionReference")


@router.post("/process")
async def process_payment(
    data: ProcessPayment,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    payment = await initiate_payment(
        db,
        order_id=data.order_id,
        payment_method=data.payment_method,
        transaction_reference=data.transaction_reference,
        customer=customer,
    )

    return success(
        {"payment": serialize_payment(payment)},
        message="Payment initiated successfully",
    )


@router.get("/order/{order_id}")
async def order_payment(
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

    payment = await db.payments.find_one({"order_id": order["_id"]})
    if not payment:
        raise NotFound("Payment not found")

    return success({"payment": serialize_payment(payment)})
