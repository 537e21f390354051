import logging
from datetime import datetime

from config.constants import ROLE_VENDOR
from utils.audit import log_audit
from utils.errors import NotFound
from utils.guards import parse_object_id

logger = logging.getLogger(__name__)


async def _deactivate_vendor_record(db, vendor_id, now, session):
    await db.vendors.update_one(
        {"_id": vendor_id},
        {"$set": {"is_active": False, "deactivated_at": now, "updated_at": now}},
        session=session,
    )


async def _deactivate_vendor_products(db, vendor_id, now, session) -> int:
    result = await db.products.update_many(
        {"vendor_id": vendor_id},
        {"$set": {"is_active": False, "updated_at": now}},
        session=session,
    )
    return result.modified_count


async def deactivate_vendor(store, vendor_id, *, actor_id: str | None, actor_role: str = ROLE_VENDOR) -> int:
    """
    Soft delete: the vendor and every product it owns go inactive together.

    Both writes run in one transaction, so either the vendor and all of
    its products are deactivated or nothing changes. Returns the number
    of products that were switched off.
    """
    db = store.db
    vendor_id = parse_object_id(vendor_id, "vendor id")

    vendor = await db.vendors.find_one({"_id": vendor_id}, {"_id": 1})
    if not vendor:
        raise NotFound("Vendor not found")

    now = datetime.utcnow()
    async with store.transaction() as session:
        await _deactivate_vendor_record(db, vendor_id, now, session)
        products_deactivated = await _deactivate_vendor_products(db, vendor_id, now, session)
        await log_audit(
            db,
            actor_id=actor_id,
            actor_role=actor_role,
            action="VENDOR_DEACTIVATED",
            metadata={"vendor_id": str(vendor_id), "products_deactivated": products_deactivated},
            session=session,
        )

    logger.info(
        "VENDOR_DEACTIVATED vendor=%s products=%s actor=%s",
        vendor_id,
        products_deactivated,
        actor_role,
    )
    return products_deactivated


async def activate_vendor(db, vendor_id, *, actor_id: str | None, actor_role: str) -> dict:
    """
    Reactivates the vendor account only; its products stay inactive until
    the vendor switches them back on.
    """
    vendor_id = parse_object_id(vendor_id, "vendor id")

    result = await db.vendors.update_one(
        {"_id": vendor_id},
        {"$set": {"is_active": True, "updated_at": datetime.utcnow()}, "$unset": {"deactivated_at": ""}},
    )
    if result.matched_count == 0:
        raise NotFound("Vendor not found")

    await log_audit(
        db,
        actor_id=actor_id,
        actor_role=actor_role,
        action="VENDOR_ACTIVATED",
        metadata={"vendor_id": str(vendor_id)},
    )
    return await db.vendors.find_one({"_id": vendor_id})


async def set_vendor_verification(db, vendor_id, is_verified: bool, *, actor_id: str | None, actor_role: str) -> dict:
    vendor_id = parse_object_id(vendor_id, "vendor id")

    now = datetime.utcnow()
    result = await db.vendors.update_one(
        {"_id": vendor_id},
        {"$set": {
            "is_verified": is_verified,
            "verified_at": now if is_verified else None,
            "updated_at": now,
        }},
    )
    if result.matched_count == 0:
        raise NotFound("Vendor not found")

    await log_audit(
        db,
        actor_id=actor_id,
        actor_role=actor_role,
        action="VENDOR_VERIFIED" if is_verified else "VENDOR_UNVERIFIED",
        metadata={"vendor_id": str(vendor_id)},
    )
    logger.info("VENDOR_VERIFICATION vendor=%s verified=%s", vendor_id, is_verified)
    return await db.vendors.find_one({"_id": vendor_id})
