from bson import ObjectId
from datetime import datetime


def serialize_object_id(value):
    return str(value) if isinstance(value, ObjectId) else value


def serialize_datetime(value):
    return value.isoformat() if isinstance(value, datetime) else None


def serialize_customer(customer: dict) -> dict:
    return {
        "id": str(customer["_id"]),
        "firstName": customer.get("first_name"),
        "lastName": customer.get("last_name"),
        "email": customer.get("email"),
        "phoneNumber": customer.get("phone_number"),
        "region": customer.get("region"),
        "city": customer.get("city"),
        "address": customer.get("address", ""),
        "dateJoined": serialize_datetime(customer.get("date_joined")),
        "isActive": customer.get("is_active", False),
    }


def serialize_vendor(vendor: dict, *, private: bool = False) -> dict:
    data = {
        "id": str(vendor["_id"]),
        "vendorName": vendor.get("vendor_name"),
        "region": vendor.get("region"),
        "city": vendor.get("city"),
        "joinedDate": serialize_datetime(vendor.get("joined_date")),
        "isVerified": vendor.get("is_verified", False),
        "isActive": vendor.get("is_active", False),
        "rating": vendor.get("rating", 0),
    }

    # contact and licensing details only go to the vendor itself and admins
    if private:
        data.update({
            "email": vendor.get("email"),
            "phoneNumber": vendor.get("phone_number"),
            "businessAddress": vendor.get("business_address"),
            "businessLicense": vendor.get("business_license"),
            "taxId": vendor.get("tax_id"),
        })

    return data


def serialize_category(category: dict) -> dict:
    return {
        "id": str(category["_id"]),
        "categoryName": category.get("category_name"),
        "description": category.get("description"),
    }


def serialize_product(product: dict) -> dict:
    return {
        "id": str(product["_id"]),
        "productName": product.get("product_name"),
        "description": product.get("description"),
        "price": product.get("price"),
        "stockQuantity": product.get("stock_quantity", 0),
        "imageURL": product.get("image_url"),
        "sku": product.get("sku"),
        "brand": product.get("brand"),
        "isActive": product.get("is_active", False),
        "categoryId": serialize_object_id(product.get("category_id")),
        "vendorId": serialize_object_id(product.get("vendor_id")),
        "createdAt": serialize_datetime(product.get("created_at")),
        "updatedAt": serialize_datetime(product.get("updated_at")),
    }


def serialize_review(review: dict, customer: dict | None = None) -> dict:
    data = {
        "id": str(review["_id"]),
        "productId": serialize_object_id(review.get("product_id")),
        "customerId": serialize_object_id(review.get("customer_id")),
        "rating": review.get("rating"),
        "comment": review.get("comment"),
        "createdAt": serialize_datetime(review.get("created_at")),
    }
    if customer:
        data["customer"] = {
            "firstName": customer.get("first_name"),
            "lastName": customer.get("last_name"),
        }
    return data


def serialize_payment(payment: dict | None) -> dict | None:
    if not payment:
        return None

    return {
        "id": str(payment["_id"]),
        "orderId": serialize_object_id(payment.get("order_id")),
        "amount": payment.get("amount"),
        "paymentMethod": payment.get("payment_method"),
        "transactionReference": payment.get("transaction_reference"),
        "status": payment.get("status"),
        "paymentDate": serialize_datetime(payment.get("payment_date")),
        "updatedAt": serialize_datetime(payment.get("updated_at")),
    }


def serialize_shipping(shipping: dict | None) -> dict | None:
    if not shipping:
        return None

    return {
        "id": str(shipping["_id"]),
        "orderId": serialize_object_id(shipping.get("order_id")),
        "shippingAddress": shipping.get("shipping_address"),
        "region": shipping.get("region"),
        "city": shipping.get("city"),
        "status": shipping.get("status"),
        "courier": shipping.get("courier"),
        "trackingNumber": shipping.get("tracking_number"),
    }


def serialize_order(order: dict, payment: dict | None = None, shipping: dict | None = None) -> dict:
    return {
        "id": str(order["_id"]),
        "customerId": serialize_object_id(order["customer_id"]),

        "orderItems": [
            {
                "productId": serialize_object_id(item["product_id"]),
                "productName": item.get("product_name"),
                "imageURL": item.get("image_url"),
                "quantity": item["quantity"],
                "unitPrice": item["unit_price"],
                "lineTotal": item["line_total"],
            }
            for item in order.get("items", [])
        ],

        "totalAmount": order["total_amount"],
        "status": order["status"],

        "orderDate": serialize_datetime(order.get("order_date")),
        "updatedAt": serialize_datetime(order.get("updated_at")),

        "payment": serialize_payment(payment),
        "shipping": serialize_shipping(shipping),
    }
