import os
import sys
import unittest
from contextlib import asynccontextmanager
from datetime import datetime

# Settings are read at import time, so they must be in place first
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "test-webhook-secret")

# Ensure backend/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
backend_path = os.path.join(ROOT, "backend")
if backend_path not in sys.path:
    sys.path.insert(0, backend_path)

import httpx
from mongomock_motor import AsyncMongoMockClient

from config.constants import ROLE_CUSTOMER, ROLE_VENDOR
from database import Store
from main import create_app
from utils.hash import hash_password
from utils.jwt import create_access_token

PASSWORD = "secret123"
ADMIN_KEY = os.environ["ADMIN_API_KEY"]
WEBHOOK_SECRET = os.environ["PAYMENT_WEBHOOK_SECRET"]


class MockStore(Store):
    """
    mongomock has no sessions, so a transaction snapshots every collection
    and puts the snapshot back when the block raises.
    """

    @asynccontextmanager
    async def transaction(self):
        snapshot = {}
        for name in await self.db.list_collection_names():
            snapshot[name] = await self.db[name].find().to_list(None)

        try:
            yield None
        except BaseException:
            for name in await self.db.list_collection_names():
                await self.db[name].delete_many({})
                if snapshot.get(name):
                    await self.db[name].insert_many(snapshot[name])
            raise


class ApiTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        client = AsyncMongoMockClient()
        self.store = MockStore(client, client["gomart_test"])
        self.db = self.store.db
        self.app = create_app(self.store)
        self.client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app),
            base_url="http://test",
        )

    async def asyncTearDown(self):
        await self.client.aclose()

    # ---------- seeding ----------

    async def seed_customer(self, email="ama@example.com", phone="+233241234567", **extra):
        now = datetime.utcnow()
        customer = {
            "first_name": "Ama",
            "last_name": "Mensah",
            "email": email,
            "phone_number": phone,
            "password": hash_password(PASSWORD),
            "region": "Greater Accra",
            "city": "Accra",
            "address": "12 Oxford Street",
            "is_active": True,
            "date_joined": now,
            "created_at": now,
            "updated_at": now,
            **extra,
        }
        await self.db.customers.insert_one(customer)
        return customer

    async def seed_vendor(self, email="shop@example.com", phone="+233501234567", **extra):
        now = datetime.utcnow()
        vendor = {
            "vendor_name": "Kofi Fabrics",
            "email": email,
            "phone_number": phone,
            "password": hash_password(PASSWORD),
            "business_address": "Makola Market",
            "region": "Greater Accra",
            "city": "Accra",
            "is_verified": True,
            "is_active": True,
            "rating": 0,
            "joined_date": now,
            "created_at": now,
            "updated_at": now,
            **extra,
        }
        await self.db.vendors.insert_one(vendor)
        return vendor

    async def seed_category(self, name="Fashion"):
        category = {"category_name": name, "description": None, "created_at": datetime.utcnow()}
        await self.db.categories.insert_one(category)
        return category

    async def seed_product(self, vendor, category, name="Kente Cloth", price=120.0, stock=5, **extra):
        now = datetime.utcnow()
        product = {
            "product_name": name,
            "description": "Handwoven",
            "price": price,
            "stock_quantity": stock,
            "vendor_id": vendor["_id"],
            "category_id": category["_id"],
            "image_url": None,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
            **extra,
        }
        await self.db.products.insert_one(product)
        return product

    async def seed_order(self, customer, total=250.0):
        now = datetime.utcnow()
        order = {
            "customer_id": customer["_id"],
            "items": [],
            "total_amount": total,
            "status": "pending",
            "order_date": now,
            "updated_at": now,
        }
        await self.db.orders.insert_one(order)
        return order

    # ---------- auth ----------

    def customer_headers(self, customer):
        return {"Authorization": f"Bearer {create_access_token(customer['_id'], ROLE_CUSTOMER)}"}

    def vendor_headers(self, vendor):
        return {"Authorization": f"Bearer {create_access_token(vendor['_id'], ROLE_VENDOR)}"}

    def admin_headers(self):
        return {"X-Admin-Key": ADMIN_KEY}
