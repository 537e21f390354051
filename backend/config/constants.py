# backend/config/constants.py

# -----------------------------
# ROLES
# -----------------------------

ROLE_CUSTOMER = "customer"
ROLE_VENDOR = "vendor"

# -----------------------------
# PAYMENTS
# -----------------------------

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"

PAYMENT_TERMINAL_STATES = {PAYMENT_COMPLETED, PAYMENT_FAILED}

# Mobile money networks plus card and cash on delivery
ALLOWED_PAYMENT_METHODS = {
    "MTN_MOBILE_MONEY",
    "VODAFONE_CASH",
    "AIRTELTIGO_MONEY",
    "CARD",
    "CASH_ON_DELIVERY",
}

# -----------------------------
# ORDERS / SHIPPING
# -----------------------------

ORDER_PENDING = "pending"
SHIPPING_PENDING = "pending"

# -----------------------------
# CATALOG
# -----------------------------

PRODUCTS_PAGE_DEFAULT = 12
PRODUCTS_PAGE_MAX = 50
PRODUCT_SORT_FIELDS = {
    "createdAt": "created_at",
    "price": "price",
    "productName": "product_name",
    "stockQuantity": "stock_quantity",
}

CATEGORY_PREVIEW_PRODUCTS = 8
VENDOR_PREVIEW_PRODUCTS = 10

# -----------------------------
# REVIEWS
# -----------------------------

MIN_RATING = 1
MAX_RATING = 5
