from fastapi import APIRouter, Depends
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import DuplicateKeyError

from database import get_db, get_store
from utils.audit import log_audit
from utils.errors import Conflict, NotFound
from utils.guards import parse_object_id
from utils.responses import success
from utils.security import require_admin
from utils.serializers import serialize_category, serialize_customer, serialize_vendor
from utils.vendor_service import activate_vendor, deactivate_vendor, set_vendor_verification


router = APIRouter(prefix="/api/admin", tags=["Admin"])


# =====================================================
# SCHEMAS
# =====================================================

class VendorVerification(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_verified: bool = Field(..., alias="isVerified")


class CustomerStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(..., alias="isActive")


class CategoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_name: str = Field(..., min_length=1, alias="categoryName")
    description: Optional[str] = None


# =========================
# VERIFY / UNVERIFY VENDOR
# =========================
@router.patch("/vendors/{vendor_id}/verification")
async def verify_vendor(
    vendor_id: str,
    data: VendorVerification,
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    vendor = await set_vendor_verification(
        db,
        vendor_id,
        data.is_verified,
        actor_id=None,
        actor_role=admin["role"],
    )
    return success(
        {"vendor": serialize_vendor(vendor, private=True)},
        message="Vendor verified" if data.is_verified else "Vendor verification revoked",
    )


# =========================
# DEACTIVATE / REACTIVATE VENDOR
# =========================
@router.delete("/vendors/{vendor_id}")
async def deactivate_vendor_account(
    vendor_id: str,
    admin=Depends(require_admin),
    store=Depends(get_store),
):
    products = await deactivate_vendor(
        store,
        vendor_id,
        actor_id=None,
        actor_role=admin["role"],
    )
    return success(
        {"productsDeactivated": products},
        message="Vendor deactivated successfully",
    )


@router.post("/vendors/{vendor_id}/activate")
async def activate_vendor_account(
    vendor_id: str,
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    vendor = await activate_vendor(db, vendor_id, actor_id=None, actor_role=admin["role"])
    return success(
        {"vendor": serialize_vendor(vendor, private=True)},
        message="Vendor activated successfully",
    )


# =========================
# CUSTOMER STATUS
# =========================
@router.patch("/customers/{customer_id}/status")
async def set_customer_status(
    customer_id: str,
    data: CustomerStatus,
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    oid = parse_object_id(customer_id, "customer id")

    result = await db.customers.update_one(
        {"_id": oid},
        {"$set": {"is_active": data.is_active, "updated_at": datetime.utcnow()}},
    )
    if result.matched_count == 0:
        raise NotFound("Customer not found")

    await log_audit(
        db,
        actor_id=None,
        actor_role=admin["role"],
        action="CUSTOMER_ACTIVATED" if data.is_active else "CUSTOMER_DEACTIVATED",
        metadata={"customer_id": customer_id},
    )

    customer = await db.customers.find_one({"_id": oid})
    return success({"customer": serialize_customer(customer)}, message="Customer status updated")


# =========================
# CATEGORIES
# =========================
@router.post("/categories", status_code=201)
async def create_category(
    data: CategoryCreate,
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    name = data.category_name.strip()

    if await db.categories.find_one({"category_name": name}, {"_id": 1}):
        raise Conflict("A category with this name already exists")

    now = datetime.utcnow()
    category = {
        "category_name": name,
        "description": data.description,
        "created_at": now,
        "updated_at": now,
    }
    try:
        await db.categories.insert_one(category)
    except DuplicateKeyError:
        raise Conflict("A category with this name already exists")

    return success(
        {"category": serialize_category(category)},
        message="Category created successfully",
        status_code=201,
    )
