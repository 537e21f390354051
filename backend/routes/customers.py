from fastapi import APIRouter, Depends
from datetime import datetime

from config.constants import ROLE_CUSTOMER
from config.env import DEFAULT_CITY, DEFAULT_REGION, LOGIN_RATE_LIMIT, LOGIN_RATE_WINDOW_SECONDS
from database import get_db
from models.customer import CustomerProfileUpdate, CustomerRegister, Login, PasswordChange
from utils.carts import get_or_create_cart
from utils.credentials import authenticate, change_password, ensure_contact_available, issue_token, register_identity
from utils.rate_limit import rate_limit
from utils.responses import success
from utils.security import require_customer
from utils.serializers import serialize_customer
from utils.validators import normalize_email, normalize_phone

router = APIRouter(prefix="/api/customers", tags=["Customers"])


# ======================
# Register
# ======================

@router.post("/register", status_code=201)
async def register_customer(data: CustomerRegister, db=Depends(get_db)):
    fields = {
        "first_name": data.first_name.strip(),
        "last_name": data.last_name.strip(),
        "email": data.email,
        "phone_number": data.phone_number,
        "region": data.region or DEFAULT_REGION,
        "city": data.city or DEFAULT_CITY,
        "address": data.address or "",
        "date_joined": datetime.utcnow(),
    }

    customer = await register_identity(db, ROLE_CUSTOMER, fields, data.password)
    await get_or_create_cart(db, customer["_id"])

    return success(
        {
            "customer": serialize_customer(customer),
            "token": issue_token(customer, ROLE_CUSTOMER),
        },
        message="Customer registered successfully",
        status_code=201,
    )


# ======================
# Login
# ======================

@router.post("/login")
async def login_customer(data: Login, db=Depends(get_db)):
    await rate_limit(
        db=db,
        key=f"login:customer:{normalize_email(data.email)}",
        max_requests=LOGIN_RATE_LIMIT,
        window_seconds=LOGIN_RATE_WINDOW_SECONDS,
    )

    customer = await authenticate(db, ROLE_CUSTOMER, data.email, data.password)

    return success(
        {
            "customer": serialize_customer(customer),
            "token": issue_token(customer, ROLE_CUSTOMER),
        },
        message="Login successful",
    )


# ======================
# Profile
# ======================

@router.get("/profile")
async def get_profile(customer=Depends(require_customer)):
    return success({"customer": serialize_customer(customer)})


@router.put("/profile")
async def update_profile(
    data: CustomerProfileUpdate,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    update = {}
    if data.first_name:
        update["first_name"] = data.first_name.strip()
    if data.last_name:
        update["last_name"] = data.last_name.strip()
    if data.region:
        update["region"] = data.region
    if data.city:
        update["city"] = data.city
    if data.address:
        update["address"] = data.address

    if data.phone_number:
        phone = normalize_phone(data.phone_number)
        await ensure_contact_available(
            db,
            ROLE_CUSTOMER,
            phone_number=phone,
            exclude_id=customer["_id"],
        )
        update["phone_number"] = phone

    if update:
        update["updated_at"] = datetime.utcnow()
        await db.customers.update_one({"_id": customer["_id"]}, {"$set": update})

    updated = await db.customers.find_one({"_id": customer["_id"]})

    return success(
        {"customer": serialize_customer(updated)},
        message="Profile updated successfully",
    )


@router.put("/change-password")
async def update_password(
    data: PasswordChange,
    customer=Depends(require_customer),
    db=Depends(get_db),
):
    await change_password(db, ROLE_CUSTOMER, customer, data.current_password, data.new_password)
    return success(message="Password changed successfully")
