import logging
from datetime import datetime

from pymongo.errors import DuplicateKeyError

from config.constants import ROLE_CUSTOMER, ROLE_VENDOR
from utils.errors import BadRequest, Conflict, Unauthorized
from utils.hash import hash_password, verify_password
from utils.jwt import create_access_token
from utils.validators import normalize_email, normalize_phone

logger = logging.getLogger(__name__)

IDENTITY_COLLECTIONS = {
    ROLE_CUSTOMER: "customers",
    ROLE_VENDOR: "vendors",
}

IDENTITY_LABELS = {
    ROLE_CUSTOMER: "Customer",
    ROLE_VENDOR: "Vendor",
}


def identity_collection(db, role: str):
    return db[IDENTITY_COLLECTIONS[role]]


# ==============================
# Uniqueness
# ==============================

async def ensure_contact_available(
    db,
    role: str,
    *,
    email: str | None = None,
    phone_number: str | None = None,
    exclude_id=None,
):
    clauses = []
    if email:
        clauses.append({"email": email})
    if phone_number:
        clauses.append({"phone_number": phone_number})
    if not clauses:
        return

    query = {"$or": clauses}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}

    if await identity_collection(db, role).find_one(query, {"_id": 1}):
        raise Conflict(f"{IDENTITY_LABELS[role]} with this email or phone number already exists")


# ==============================
# Register
# ==============================

async def register_identity(db, role: str, fields: dict, password: str) -> dict:
    """
    Store a new customer or vendor. Email is kept lowercase, phone in
    +233 form, the password only as a bcrypt hash.

    The pre-check gives a friendly message; the unique indexes decide
    when two registrations race.
    """
    email = normalize_email(fields.pop("email"))
    phone_number = normalize_phone(fields.pop("phone_number"))

    await ensure_contact_available(db, role, email=email, phone_number=phone_number)

    now = datetime.utcnow()
    identity = {
        **fields,
        "email": email,
        "phone_number": phone_number,
        "password": hash_password(password),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }

    try:
        await identity_collection(db, role).insert_one(identity)
    except DuplicateKeyError:
        raise Conflict(f"{IDENTITY_LABELS[role]} with this email or phone number already exists")

    logger.info("%s_REGISTERED id=%s", role.upper(), identity["_id"])
    return identity


# ==============================
# Authenticate
# ==============================

async def authenticate(db, role: str, email: str, password: str) -> dict:
    identity = await identity_collection(db, role).find_one({"email": normalize_email(email)})

    if not identity or not verify_password(password, identity.get("password") or ""):
        logger.warning("LOGIN_FAILED role=%s", role)
        raise Unauthorized("Invalid credentials")

    if not identity.get("is_active", False):
        raise Unauthorized("Account is inactive, please contact support")

    return identity


def issue_token(identity: dict, role: str) -> str:
    return create_access_token(identity["_id"], role)


# ==============================
# Password change
# ==============================

async def change_password(db, role: str, identity: dict, current_password: str | None, new_password: str | None):
    if not current_password or not new_password:
        raise BadRequest("Please provide current and new password")

    if not verify_password(current_password, identity.get("password") or ""):
        raise BadRequest("Current password is incorrect")

    await identity_collection(db, role).update_one(
        {"_id": identity["_id"]},
        {"$set": {"password": hash_password(new_password), "updated_at": datetime.utcnow()}},
    )

    logger.info("%s_PASSWORD_CHANGED id=%s", role.upper(), identity["_id"])
