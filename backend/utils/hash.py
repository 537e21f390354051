from passlib.context import CryptContext

from utils.errors import BadRequest

# bcrypt configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

# bcrypt hard limit
MAX_BCRYPT_BYTES = 72
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """
    Salt and hash a password with bcrypt.
    Rejects passwords bcrypt would silently truncate.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        raise BadRequest("Password too long (max 72 bytes)")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Never lets bcrypt crash, even with bad legacy hashes.
    """
    if len(plain_password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False
