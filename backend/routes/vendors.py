from fastapi import APIRouter, Depends, Query
from datetime import datetime
from typing import Optional

from config.constants import ROLE_VENDOR, VENDOR_PREVIEW_PRODUCTS
from config.env import DEFAULT_CITY, DEFAULT_REGION, LOGIN_RATE_LIMIT, LOGIN_RATE_WINDOW_SECONDS
from database import get_db, get_store
from models.customer import Login
from models.vendor import VendorProfileUpdate, VendorRegister
from utils.credentials import authenticate, ensure_contact_available, issue_token, register_identity
from utils.errors import NotFound
from utils.guards import parse_object_id
from utils.rate_limit import rate_limit
from utils.responses import success
from utils.security import require_vendor
from utils.serializers import serialize_product, serialize_vendor
from utils.validators import normalize_email, normalize_phone
from utils.vendor_service import deactivate_vendor

router = APIRouter(prefix="/api/vendors", tags=["Vendors"])


async def _product_counts(db, vendor_ids: list) -> dict:
    counts = {vid: 0 for vid in vendor_ids}
    cursor = db.products.find({"vendor_id": {"$in": vendor_ids}, "is_active": True}, {"vendor_id": 1})
    async for p in cursor:
        counts[p["vendor_id"]] = counts.get(p["vendor_id"], 0) + 1
    return counts


# ======================================================
# REGISTER / LOGIN
# ======================================================

@router.post("/register", status_code=201)
async def register_vendor(data: VendorRegister, db=Depends(get_db)):
    now = datetime.utcnow()
    fields = {
        "vendor_name": data.vendor_name.strip(),
        "email": data.email,
        "phone_number": data.phone_number,
        "business_address": data.business_address,
        "region": data.region or DEFAULT_REGION,
        "city": data.city or DEFAULT_CITY,
        "business_license": data.business_license,
        "tax_id": data.tax_id,
        "is_verified": False,
        "rating": 0,
        "joined_date": now,
    }

    vendor = await register_identity(db, ROLE_VENDOR, fields, data.password)

    return success(
        {
            "vendor": serialize_vendor(vendor, private=True),
            "token": issue_token(vendor, ROLE_VENDOR),
        },
        message="Vendor registered successfully",
        status_code=201,
    )


@router.post("/login")
async def login_vendor(data: Login, db=Depends(get_db)):
    await rate_limit(
        db=db,
        key=f"login:vendor:{normalize_email(data.email)}",
        max_requests=LOGIN_RATE_LIMIT,
        window_seconds=LOGIN_RATE_WINDOW_SECONDS,
    )

    # unverified vendors may sign in; the vendor gate holds them back
    vendor = await authenticate(db, ROLE_VENDOR, data.email, data.password)

    return success(
        {
            "vendor": serialize_vendor(vendor, private=True),
            "token": issue_token(vendor, ROLE_VENDOR),
        },
        message="Login successful",
    )


# ======================================================
# SELF SERVICE
# ======================================================

@router.get("/me")
async def vendor_profile(vendor=Depends(require_vendor)):
    return success({"vendor": serialize_vendor(vendor, private=True)})


@router.put("/me")
async def update_vendor_profile(
    data: VendorProfileUpdate,
    vendor=Depends(require_vendor),
    db=Depends(get_db),
):
    update = {}
    if data.vendor_name:
        update["vendor_name"] = data.vendor_name.strip()
    if data.business_address:
        update["business_address"] = data.business_address
    if data.region:
        update["region"] = data.region
    if data.city:
        update["city"] = data.city
    if data.business_license is not None:
        update["business_license"] = data.business_license
    if data.tax_id is not None:
        update["tax_id"] = data.tax_id

    if data.phone_number:
        phone = normalize_phone(data.phone_number)
        await ensure_contact_available(
            db,
            ROLE_VENDOR,
            phone_number=phone,
            exclude_id=vendor["_id"],
        )
        update["phone_number"] = phone

    if update:
        update["updated_at"] = datetime.utcnow()
        await db.vendors.update_one({"_id": vendor["_id"]}, {"$set": update})

    updated = await db.vendors.find_one({"_id": vendor["_id"]})

    return success(
        {"vendor": serialize_vendor(updated, private=True)},
        message="Vendor updated successfully",
    )


@router.delete("/me")
async def deactivate_own_account(
    vendor=Depends(require_vendor),
    store=Depends(get_store),
):
    products = await deactivate_vendor(
        store,
        vendor["_id"],
        actor_id=str(vendor["_id"]),
        actor_role=ROLE_VENDOR,
    )
    return success(
        {"productsDeactivated": products},
        message="Vendor deactivated successfully",
    )


# ======================================================
# PUBLIC
# ======================================================

@router.get("")
async def list_vendors(
    is_verified: Optional[bool] = Query(True, alias="isVerified"),
    region: Optional[str] = None,
    db=Depends(get_db),
):
    query = {"is_active": True}
    if is_verified is not None:
        query["is_verified"] = is_verified
    if region:
        query["region"] = region

    vendors = [v async for v in db.vendors.find(query).sort([("vendor_name", 1), ("_id", 1)])]
    counts = await _product_counts(db, [v["_id"] for v in vendors])

    result = []
    for v in vendors:
        item = serialize_vendor(v)
        item["productCount"] = counts.get(v["_id"], 0)
        result.append(item)

    return success({"vendors": result})


@router.get("/{vendor_id}")
async def vendor_detail(vendor_id: str, db=Depends(get_db)):
    oid = parse_object_id(vendor_id, "vendor id")

    vendor = await db.vendors.find_one({"_id": oid})
    if not vendor:
        raise NotFound("Vendor not found")

    query = {"vendor_id": oid, "is_active": True}
    cursor = (
        db.products
        .find(query)
        .sort([("created_at", -1), ("_id", -1)])
        .limit(VENDOR_PREVIEW_PRODUCTS)
    )
    products = [serialize_product(p) async for p in cursor]

    data = serialize_vendor(vendor)
    data["products"] = products
    data["productCount"] = await db.products.count_documents(query)

    return success({"vendor": data})
