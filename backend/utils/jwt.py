from datetime import datetime, timedelta
from jose import JWTError, jwt

from config.env import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_DAYS
from config.constants import ROLE_CUSTOMER, ROLE_VENDOR
from utils.errors import Unauthorized

VALID_ROLES = {ROLE_CUSTOMER, ROLE_VENDOR}


def _require_jwt_secret() -> str:
    secret = (JWT_SECRET or "").strip()
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def create_access_token(identity_id, role: str, *, issued_at: datetime | None = None) -> str:
    if role not in VALID_ROLES:
        raise ValueError(f"Unknown role: {role}")

    issued_at = issued_at or datetime.utcnow()
    payload = {
        "sub": str(identity_id),
        "role": role,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=ACCESS_TOKEN_DAYS),
    }
    return jwt.encode(payload, _require_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> tuple[str, str]:
    """
    Verify signature and expiry, return (identity_id, role).
    """
    try:
        payload = jwt.decode(token, _require_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Not authorized, token failed")

    identity_id = payload.get("sub")
    role = payload.get("role")

    if not identity_id or role not in VALID_ROLES:
        raise Unauthorized("Not authorized, token failed")

    return identity_id, role
