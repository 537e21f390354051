from utils.errors import Forbidden, NotFound
from utils.guards import parse_object_id


async def load_owned(
    collection,
    record_id,
    *,
    owner_field: str,
    owner_id,
    name: str,
    action: str = "modify",
) -> dict:
    """
    Resolve a record for mutation by its owner.

    Existence is checked first, so a caller acting on a missing record
    gets NotFound even when it would not own it.
    """
    oid = parse_object_id(record_id, f"{name.lower()} id")

    record = await collection.find_one({"_id": oid})
    if not record:
        raise NotFound(f"{name} not found")

    if record.get(owner_field) != owner_id:
        raise Forbidden(f"Not authorized to {action} this {name.lower()}")

    return record


async def load_for_owner(collection, record_id, *, owner_field: str, owner_id, name: str) -> dict:
    """
    Joint existence + ownership lookup: records owned by someone else
    are reported exactly like missing ones.
    """
    oid = parse_object_id(record_id, f"{name.lower()} id")

    record = await collection.find_one({"_id": oid, owner_field: owner_id})
    if not record:
        raise NotFound(f"{name} not found")

    return record
