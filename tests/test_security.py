from datetime import datetime, timedelta

from bson import ObjectId

from support import ApiTestCase

from config.constants import ROLE_CUSTOMER, ROLE_VENDOR
from utils.jwt import create_access_token


class CustomerGateTestCase(ApiTestCase):
    async def test_no_token(self):
        res = await self.client.get("/api/customers/profile")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, no token provided")

    async def test_garbage_token(self):
        res = await self.client.get("/api/customers/profile", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, token failed")

    async def test_expired_token(self):
        customer = await self.seed_customer()
        token = create_access_token(customer["_id"], ROLE_CUSTOMER, issued_at=datetime.utcnow() - timedelta(days=31))

        res = await self.client.get("/api/customers/profile", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, token failed")

    async def test_vendor_token_cannot_act_as_customer(self):
        vendor = await self.seed_vendor()

        res = await self.client.get("/api/customers/profile", headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, token failed")

    async def test_deleted_customer(self):
        token = create_access_token(ObjectId(), ROLE_CUSTOMER)

        res = await self.client.get("/api/customers/profile", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, user not found")

    async def test_inactive_customer(self):
        customer = await self.seed_customer(is_active=False)

        res = await self.client.get("/api/customers/profile", headers=self.customer_headers(customer))
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Account is inactive, please contact support")


class VendorGateTestCase(ApiTestCase):
    async def test_unknown_vendor(self):
        token = create_access_token(ObjectId(), ROLE_VENDOR)

        res = await self.client.get("/api/vendors/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, vendor not found")

    async def test_inactive_is_checked_before_verification(self):
        vendor = await self.seed_vendor(is_active=False, is_verified=False)

        res = await self.client.get("/api/vendors/me", headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 401)

    async def test_unverified_vendor_is_forbidden(self):
        vendor = await self.seed_vendor(is_verified=False)

        res = await self.client.get("/api/vendors/me", headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["message"], "Vendor account not verified, please contact support")

    async def test_verified_vendor_passes(self):
        vendor = await self.seed_vendor()

        res = await self.client.get("/api/vendors/me", headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["vendor"]["email"], "shop@example.com")


class OptionalCustomerTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        vendor = await self.seed_vendor()
        category = await self.seed_category()
        self.product = await self.seed_product(vendor, category)
        self.path = f"/api/products/{self.product['_id']}"

    async def test_anonymous_and_bad_tokens_still_get_the_product(self):
        inactive = await self.seed_customer(is_active=False)
        expired = create_access_token(inactive["_id"], ROLE_CUSTOMER, issued_at=datetime.utcnow() - timedelta(days=40))

        for headers in (
            {},
            {"Authorization": "Bearer garbage"},
            {"Authorization": f"Bearer {expired}"},
            self.customer_headers(inactive),
        ):
            res = await self.client.get(self.path, headers=headers)
            self.assertEqual(res.status_code, 200)
            self.assertNotIn("reviewedByMe", res.json()["data"]["product"])

    async def test_active_customer_is_attached(self):
        customer = await self.seed_customer()

        res = await self.client.get(self.path, headers=self.customer_headers(customer))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.json()["data"]["product"]["reviewedByMe"])


class AdminGateTestCase(ApiTestCase):
    async def test_admin_key_required(self):
        vendor = await self.seed_vendor(is_verified=False)
        path = f"/api/admin/vendors/{vendor['_id']}/verification"

        res = await self.client.patch(path, json={"isVerified": True})
        self.assertEqual(res.status_code, 401)

        res = await self.client.patch(path, json={"isVerified": True}, headers={"X-Admin-Key": "wrong"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Not authorized, invalid admin key")

        res = await self.client.patch(path, json={"isVerified": True}, headers=self.admin_headers())
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["data"]["vendor"]["isVerified"])

        # verification unlocks the vendor gate
        res = await self.client.get("/api/vendors/me", headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 200)

    async def test_admin_can_deactivate_customer(self):
        customer = await self.seed_customer()

        res = await self.client.patch(
            f"/api/admin/customers/{customer['_id']}/status",
            json={"isActive": False},
            headers=self.admin_headers(),
        )
        self.assertEqual(res.status_code, 200)

        res = await self.client.get("/api/customers/profile", headers=self.customer_headers(customer))
        self.assertEqual(res.status_code, 401)
        self.assertEqual(await self.db.audit_logs.count_documents({"action": "CUSTOMER_DEACTIVATED"}), 1)
