from bson import ObjectId

from support import ApiTestCase


class CartTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.vendor = await self.seed_vendor()
        category = await self.seed_category()
        self.kente = await self.seed_product(self.vendor, category, price=120.0, stock=5)
        self.shito = await self.seed_product(self.vendor, category, name="Shito Jar", price=15.5, stock=10)
        self.customer = await self.seed_customer()
        self.headers = self.customer_headers(self.customer)

    async def add(self, product, quantity):
        return await self.client.post(
            "/api/cart/items",
            json={"productId": str(product["_id"]), "quantity": quantity},
            headers=self.headers,
        )

    async def test_cart_is_created_on_first_access(self):
        res = await self.client.get("/api/cart", headers=self.headers)
        self.assertEqual(res.status_code, 200)

        cart = res.json()["data"]["cart"]
        self.assertEqual(cart["cartItems"], [])
        self.assertEqual(cart["totalAmount"], 0)
        self.assertEqual(await self.db.carts.count_documents({"customer_id": self.customer["_id"]}), 1)

    async def test_add_update_remove(self):
        await self.add(self.kente, 1)
        res = await self.add(self.shito, 2)
        cart = res.json()["data"]["cart"]
        self.assertEqual(cart["totalItems"], 3)
        self.assertEqual(cart["totalAmount"], 151.0)

        # adding an existing product sets its quantity
        res = await self.add(self.kente, 2)
        cart = res.json()["data"]["cart"]
        self.assertEqual(len(cart["cartItems"]), 2)
        self.assertEqual(cart["totalAmount"], 271.0)

        res = await self.client.put(
            f"/api/cart/items/{self.shito['_id']}",
            json={"quantity": 1},
            headers=self.headers,
        )
        self.assertEqual(res.json()["data"]["cart"]["totalAmount"], 255.5)

        res = await self.client.delete(f"/api/cart/items/{self.shito['_id']}", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.json()["data"]["cart"]["cartItems"]), 1)

        res = await self.client.delete(f"/api/cart/items/{self.shito['_id']}", headers=self.headers)
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["message"], "Item not found in cart")

        res = await self.client.delete("/api/cart", headers=self.headers)
        self.assertEqual(res.json()["data"]["cart"]["cartItems"], [])

    async def test_stock_and_availability(self):
        res = await self.add(self.kente, 6)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["message"], "Quantity exceeds available stock")

        res = await self.add({"_id": ObjectId()}, 1)
        self.assertEqual(res.status_code, 404)

        res = await self.add(self.kente, 0)
        self.assertEqual(res.status_code, 400)


class CheckoutTestCase(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.vendor = await self.seed_vendor()
        category = await self.seed_category()
        self.product = await self.seed_product(self.vendor, category, price=40.25, stock=5)
        self.customer = await self.seed_customer()
        self.headers = self.customer_headers(self.customer)

    async def test_empty_cart(self):
        res = await self.client.post("/api/orders", headers=self.headers)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["message"], "Cart is empty")

    async def test_checkout_snapshots_prices_and_empties_cart(self):
        await self.client.post(
            "/api/cart/items",
            json={"productId": str(self.product["_id"]), "quantity": 2},
            headers=self.headers,
        )

        res = await self.client.post("/api/orders", json={"city": "Kumasi"}, headers=self.headers)
        self.assertEqual(res.status_code, 201)

        order = res.json()["data"]["order"]
        self.assertEqual(order["totalAmount"], 80.5)
        self.assertEqual(order["status"], "pending")
        self.assertEqual(order["orderItems"][0]["unitPrice"], 40.25)
        self.assertEqual(order["shipping"]["city"], "Kumasi")
        self.assertEqual(order["shipping"]["shippingAddress"], "12 Oxford Street")

        # stock is not reserved at checkout
        product = await self.db.products.find_one({"_id": self.product["_id"]})
        self.assertEqual(product["stock_quantity"], 5)

        cart = await self.client.get("/api/cart", headers=self.headers)
        self.assertEqual(cart.json()["data"]["cart"]["cartItems"], [])

        # later price changes leave the order alone
        await self.db.products.update_one({"_id": self.product["_id"]}, {"$set": {"price": 99.0}})
        res = await self.client.get(f"/api/orders/{order['id']}", headers=self.headers)
        self.assertEqual(res.json()["data"]["order"]["totalAmount"], 80.5)

        res = await self.client.get("/api/orders", headers=self.headers)
        self.assertEqual(len(res.json()["data"]["orders"]), 1)

    async def test_inactive_vendor_blocks_checkout(self):
        await self.client.post(
            "/api/cart/items",
            json={"productId": str(self.product["_id"]), "quantity": 1},
            headers=self.headers,
        )
        await self.db.vendors.update_one({"_id": self.vendor["_id"]}, {"$set": {"is_active": False}})

        res = await self.client.post("/api/orders", headers=self.headers)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(await self.db.orders.count_documents({}), 0)

    async def test_order_of_another_customer_is_not_found(self):
        other = await self.seed_customer(email="kojo@example.com", phone="+233551112223")
        order = await self.seed_order(other)

        res = await self.client.get(f"/api/orders/{order['_id']}", headers=self.headers)
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["message"], "Order not found")
