from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from config.env import LOGIN_RATE_WINDOW_SECONDS


def _normalize_key_pairs(keys):
    return [(k, v) for k, v in keys]


async def _create_index_safe(collection, keys, **kwargs):
    """
    Create index safely.
    If Mongo reports IndexOptionsConflict/IndexKeySpecsConflict for same key pattern,
    drop the conflicting index and recreate with desired options.
    """
    desired_key = _normalize_key_pairs(keys)
    desired_name = kwargs.get("name")
    try:
        await collection.create_index(keys, **kwargs)
        return
    except OperationFailure as e:
        if getattr(e, "code", None) not in {85, 86}:
            raise

        conflicting_names = []
        async for idx in collection.list_indexes():
            idx_key = _normalize_key_pairs(list(idx.get("key", {}).items()))
            if idx_key == desired_key:
                idx_name = idx.get("name")
                if idx_name and idx_name != desired_name:
                    conflicting_names.append(idx_name)

        for idx_name in conflicting_names:
            await collection.drop_index(idx_name)

        await collection.create_index(keys, **kwargs)


async def ensure_indexes(db):
    # Identities: email and phone unique per kind
    for kind in ("customers", "vendors"):
        await _create_index_safe(
            db[kind],
            [("email", ASCENDING)],
            name=f"{kind}_email_unique_idx",
            unique=True,
        )
        await _create_index_safe(
            db[kind],
            [("phone_number", ASCENDING)],
            name=f"{kind}_phone_unique_idx",
            unique=True,
        )

    await _create_index_safe(
        db.vendors,
        [("is_active", ASCENDING), ("is_verified", ASCENDING), ("vendor_name", ASCENDING)],
        name="vendors_listing_idx",
    )

    # Catalog
    await _create_index_safe(
        db.categories,
        [("category_name", ASCENDING)],
        name="categories_name_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db.products,
        [("vendor_id", ASCENDING), ("is_active", ASCENDING)],
        name="products_vendor_active_idx",
    )
    await _create_index_safe(
        db.products,
        [("category_id", ASCENDING), ("is_active", ASCENDING), ("created_at", DESCENDING)],
        name="products_category_active_created_idx",
    )

    # Carts: one per customer
    await _create_index_safe(
        db.carts,
        [("customer_id", ASCENDING)],
        name="carts_customer_unique_idx",
        unique=True,
    )

    # Orders
    await _create_index_safe(
        db.orders,
        [("customer_id", ASCENDING), ("order_date", DESCENDING)],
        name="orders_customer_date_idx",
    )

    # Payments: at most one per order, references unique when present
    await _create_index_safe(
        db.payments,
        [("order_id", ASCENDING)],
        name="payments_order_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db.payments,
        [("transaction_reference", ASCENDING)],
        name="payments_reference_unique_idx",
        unique=True,
        partialFilterExpression={"transaction_reference": {"$type": "string"}},
    )

    # Shipping: at most one per order
    await _create_index_safe(
        db.shipping,
        [("order_id", ASCENDING)],
        name="shipping_order_unique_idx",
        unique=True,
    )

    # Reviews: one per (customer, product)
    await _create_index_safe(
        db.reviews,
        [("customer_id", ASCENDING), ("product_id", ASCENDING)],
        name="reviews_customer_product_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db.reviews,
        [("product_id", ASCENDING), ("created_at", DESCENDING)],
        name="reviews_product_created_idx",
    )

    # Rate limits
    await _create_index_safe(
        db.rate_limits,
        [("key", ASCENDING), ("window", ASCENDING)],
        name="rate_limits_key_window_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db.rate_limits,
        [("created_at", ASCENDING)],
        name="rate_limits_ttl_idx",
        expireAfterSeconds=LOGIN_RATE_WINDOW_SECONDS * 2,
    )

    # Audit
    await _create_index_safe(
        db.audit_logs,
        [("actor_id", ASCENDING), ("created_at", DESCENDING)],
        name="audit_logs_actor_created_idx",
    )
