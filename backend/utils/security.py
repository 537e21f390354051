import hmac
import logging

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config.constants import ROLE_CUSTOMER, ROLE_VENDOR
from config.env import ADMIN_API_KEY
from database import get_db
from utils.errors import AppError, Forbidden, Unauthorized
from utils.jwt import decode_token

logger = logging.getLogger(__name__)

# Missing or non-bearer headers resolve to None so each policy can decide
security = HTTPBearer(auto_error=False)


def _token_identity(credentials: HTTPAuthorizationCredentials | None, role: str) -> ObjectId:
    if not credentials or not credentials.credentials:
        raise Unauthorized("Not authorized, no token provided")

    identity_id, token_role = decode_token(credentials.credentials)
    if token_role != role:
        raise Unauthorized("Not authorized, token failed")

    try:
        return ObjectId(identity_id)
    except InvalidId:
        raise Unauthorized("Not authorized, token failed")


async def _load_customer(db, credentials) -> dict:
    customer_id = _token_identity(credentials, ROLE_CUSTOMER)

    customer = await db.customers.find_one({"_id": customer_id})
    if not customer:
        raise Unauthorized("Not authorized, user not found")

    if not customer.get("is_active", False):
        raise Unauthorized("Account is inactive, please contact support")

    return customer


# =====================================================
# REQUIRED CUSTOMER
# =====================================================

async def require_customer(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db=Depends(get_db),
):
    return await _load_customer(db, credentials)


# =====================================================
# REQUIRED VENDOR
# =====================================================

async def require_vendor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db=Depends(get_db),
):
    vendor_id = _token_identity(credentials, ROLE_VENDOR)

    vendor = await db.vendors.find_one({"_id": vendor_id})
    if not vendor:
        raise Unauthorized("Not authorized, vendor not found")

    if not vendor.get("is_active", False):
        raise Unauthorized("Account is inactive, please contact support")

    # known account, not yet privileged
    if not vendor.get("is_verified", False):
        raise Forbidden("Vendor account not verified, please contact support")

    return vendor


# =====================================================
# OPTIONAL CUSTOMER
# =====================================================

async def optional_customer(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db=Depends(get_db),
):
    """
    Attach the customer when the token cleanly resolves to an active one.
    Never blocks the request.
    """
    if not credentials:
        return None

    try:
        return await _load_customer(db, credentials)
    except AppError as e:
        logger.warning("OPTIONAL_AUTH_IGNORED reason=%s", e.message)
        return None


# =====================================================
# ADMIN (API KEY)
# =====================================================

async def require_admin(x_admin_key: str | None = Header(None)):
    if not ADMIN_API_KEY:
        raise AppError("Admin API key is not configured")

    if not x_admin_key or not hmac.compare_digest(x_admin_key, ADMIN_API_KEY):
        raise Unauthorized("Not authorized, invalid admin key")

    return {"role": "admin"}
