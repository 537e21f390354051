from bson import ObjectId

from support import ApiTestCase


class ProductOwnershipTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.owner = await self.seed_vendor()
        self.other = await self.seed_vendor(email="other@example.com", phone="+233209876543", vendor_name="Esi Beads")
        self.category = await self.seed_category()
        self.product = await self.seed_product(self.owner, self.category)

    async def test_other_vendor_is_forbidden(self):
        res = await self.client.put(
            f"/api/products/{self.product['_id']}",
            json={"price": 1},
            headers=self.vendor_headers(self.other),
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["message"], "Not authorized to update this product")

        res = await self.client.delete(f"/api/products/{self.product['_id']}", headers=self.vendor_headers(self.other))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["message"], "Not authorized to delete this product")

        stored = await self.db.products.find_one({"_id": self.product["_id"]})
        self.assertEqual(stored["price"], 120.0)

    async def test_missing_product_is_not_found_before_ownership(self):
        res = await self.client.put(
            f"/api/products/{ObjectId()}",
            json={"price": 1},
            headers=self.vendor_headers(self.other),
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["message"], "Product not found")

    async def test_malformed_id(self):
        res = await self.client.put("/api/products/abc", json={"price": 1}, headers=self.vendor_headers(self.owner))
        self.assertEqual(res.status_code, 400)

    async def test_owner_updates_and_deletes(self):
        headers = self.vendor_headers(self.owner)

        res = await self.client.put(
            f"/api/products/{self.product['_id']}",
            json={"price": 99.5, "stockQuantity": 3},
            headers=headers,
        )
        self.assertEqual(res.status_code, 200)
        product = res.json()["data"]["product"]
        self.assertEqual(product["price"], 99.5)
        self.assertEqual(product["stockQuantity"], 3)
        self.assertEqual(product["vendor"]["vendorName"], "Kofi Fabrics")

        res = await self.client.delete(f"/api/products/{self.product['_id']}", headers=headers)
        self.assertEqual(res.status_code, 200)
        self.assertIsNone(await self.db.products.find_one({"_id": self.product["_id"]}))


class ProductCreateTestCase(ApiTestCase):
    def payload(self, category_id):
        return {
            "productName": "Shea Butter",
            "description": "Raw, unrefined",
            "price": 25,
            "stockQuantity": 40,
            "categoryId": str(category_id),
        }

    async def test_verified_vendor_creates_product(self):
        vendor = await self.seed_vendor()
        category = await self.seed_category()

        res = await self.client.post("/api/products", json=self.payload(category["_id"]), headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 201)

        product = res.json()["data"]["product"]
        self.assertTrue(product["isActive"])
        self.assertEqual(product["vendorId"], str(vendor["_id"]))
        self.assertEqual(product["category"]["categoryName"], "Fashion")

    async def test_unverified_vendor_cannot_create(self):
        vendor = await self.seed_vendor(is_verified=False)
        category = await self.seed_category()

        res = await self.client.post("/api/products", json=self.payload(category["_id"]), headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(await self.db.products.count_documents({}), 0)

    async def test_unknown_category(self):
        vendor = await self.seed_vendor()

        res = await self.client.post("/api/products", json=self.payload(ObjectId()), headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["message"], "Invalid category ID")

    async def test_negative_price_rejected(self):
        vendor = await self.seed_vendor()
        category = await self.seed_category()
        body = self.payload(category["_id"])
        body["price"] = -1

        res = await self.client.post("/api/products", json=body, headers=self.vendor_headers(vendor))
        self.assertEqual(res.status_code, 400)


class ProductListingTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        vendor = await self.seed_vendor()
        self.fashion = await self.seed_category("Fashion")
        self.food = await self.seed_category("Food")

        await self.seed_product(vendor, self.fashion, name="Kente Cloth", price=120.0)
        await self.seed_product(vendor, self.fashion, name="Batakari Smock", price=80.0)
        await self.seed_product(vendor, self.food, name="Shito Jar", price=15.0)
        await self.seed_product(vendor, self.food, name="Hidden Item", price=5.0, is_active=False)

    async def test_listing_hides_inactive_and_is_repeatable(self):
        first = await self.client.get("/api/products")
        second = await self.client.get("/api/products")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), second.json())

        data = first.json()["data"]
        names = [p["productName"] for p in data["products"]]
        self.assertNotIn("Hidden Item", names)
        self.assertEqual(data["pagination"]["totalProducts"], 3)

    async def test_filters_and_sorting(self):
        res = await self.client.get("/api/products", params={"category": str(self.food["_id"])})
        self.assertEqual([p["productName"] for p in res.json()["data"]["products"]], ["Shito Jar"])

        res = await self.client.get("/api/products", params={"minPrice": 50, "sortBy": "price", "sortOrder": "asc"})
        self.assertEqual(
            [p["productName"] for p in res.json()["data"]["products"]],
            ["Batakari Smock", "Kente Cloth"],
        )

        res = await self.client.get("/api/products", params={"search": "kente"})
        self.assertEqual([p["productName"] for p in res.json()["data"]["products"]], ["Kente Cloth"])

    async def test_pagination(self):
        res = await self.client.get("/api/products", params={"page": 2, "limit": 2})
        pagination = res.json()["data"]["pagination"]

        self.assertEqual(len(res.json()["data"]["products"]), 1)
        self.assertEqual(pagination["currentPage"], 2)
        self.assertEqual(pagination["totalPages"], 2)
        self.assertFalse(pagination["hasNext"])
        self.assertTrue(pagination["hasPrev"])

    async def test_invalid_sort_field(self):
        res = await self.client.get("/api/products", params={"sortBy": "password"})
        self.assertEqual(res.status_code, 400)

    async def test_category_detail(self):
        res = await self.client.get(f"/api/categories/{self.food['_id']}")
        self.assertEqual(res.status_code, 200)

        category = res.json()["data"]["category"]
        self.assertEqual([p["productName"] for p in category["products"]], ["Shito Jar"])
        self.assertEqual(category["productCount"], 1)

        res = await self.client.get("/api/categories")
        counts = {c["categoryName"]: c["productCount"] for c in res.json()["data"]["categories"]}
        self.assertEqual(counts, {"Fashion": 2, "Food": 1})

        res = await self.client.get(f"/api/categories/{ObjectId()}")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["message"], "Category not found")
