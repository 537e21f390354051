from unittest import mock

from support import ApiTestCase


class ProductImageUploadTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.vendor = await self.seed_vendor()
        self.other = await self.seed_vendor(email="other@example.com", phone="+233209876543")
        category = await self.seed_category()
        self.product = await self.seed_product(self.vendor, category)
        self.path = f"/api/uploads/products/{self.product['_id']}/image"

    async def test_owner_uploads_image(self):
        with mock.patch(
            "routes.uploads.upload_image",
            return_value="https://res.cloudinary.com/demo/kente.jpg",
        ) as upload:
            res = await self.client.post(
                self.path,
                files={"file": ("kente.jpg", b"\xff\xd8\xff", "image/jpeg")},
                headers=self.vendor_headers(self.vendor),
            )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(upload.call_args.kwargs["folder"], f"gomart/products/{self.vendor['_id']}")

        product = await self.db.products.find_one({"_id": self.product["_id"]})
        self.assertEqual(product["image_url"], "https://res.cloudinary.com/demo/kente.jpg")

    async def test_non_image_rejected(self):
        with mock.patch("routes.uploads.upload_image") as upload:
            res = await self.client.post(
                self.path,
                files={"file": ("notes.txt", b"hello", "text/plain")},
                headers=self.vendor_headers(self.vendor),
            )

        self.assertEqual(res.status_code, 400)
        upload.assert_not_called()

    async def test_other_vendor_forbidden(self):
        with mock.patch("routes.uploads.upload_image") as upload:
            res = await self.client.post(
                self.path,
                files={"file": ("kente.jpg", b"\xff\xd8\xff", "image/jpeg")},
                headers=self.vendor_headers(self.other),
            )

        self.assertEqual(res.status_code, 403)
        upload.assert_not_called()
