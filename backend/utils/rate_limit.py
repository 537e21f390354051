from datetime import datetime

from pymongo import ReturnDocument

from utils.errors import RateLimited


async def rate_limit(
    db,
    key: str,
    max_requests: int,
    window_seconds: int,
):
    """
    Fixed-window counter stored in Mongo, one document per key and window.
    Old windows are removed by the TTL index on created_at.
    """
    now = datetime.utcnow()
    window = int(now.timestamp()) // window_seconds

    record = await db.rate_limits.find_one_and_update(
        {"key": key, "window": window},
        {
            "$inc": {"count": 1},
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )

    if record and record["count"] > max(1, max_requests):
        raise RateLimited("Too many requests. Please try again later.")
