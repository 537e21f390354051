import re

from utils.errors import BadRequest

# Ghana numbers: 0XXXXXXXXX or +233XXXXXXXXX
PHONE_REGEX = re.compile(r"^(?:\+233|0)([2-5]\d{8})$")


def normalize_phone(phone: str) -> str:
    phone = re.sub(r"[\s-]", "", phone or "")

    match = PHONE_REGEX.match(phone)
    if not match:
        raise BadRequest("Invalid phone number format")

    return "+233" + match.group(1)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
