import random
from locust import HttpUser, task, between

BASE_URL = "http://127.0.0.1:9000"
TEST_USERNAME = "load_test_user"
TEST_PASSWORD = "loadtest123"
ADMIN_AUTH = ""  # set to a Basic header of an admin account to load the dashboard


def _expect(response, *ok_codes):
    if response.status_code in ok_codes:
        response.success()
    elif response.status_code == 401:
        response.failure("Unauthorized")
    else:
        response.failure(f"Status code: {response.status_code}")


class ShopperUser(HttpUser):

    wait_time = between(1, 3)

    host = BASE_URL

    def on_start(self):
        with self.client.post(
                "/api/v1/users/registration",
                json={"username": TEST_USERNAME, "password": TEST_PASSWORD, "passwordConfirmation": TEST_PASSWORD},
                catch_response=True,
                name="POST /users/registration (setup)"
        ) as response:
            # 400 once the account exists
            _expect(response, 200, 400)
        self.client.auth = (TEST_USERNAME, TEST_PASSWORD)
        res = self.client.get("/api/v1/products", name="GET /products (setup)")
        self.products = res.json().get("items", []) if res.status_code == 200 else []

    @task(10)
    def view_catalog(self):
        with self.client.get(
                "/api/v1/products",
                catch_response=True,
                name="GET /products (catalog)"
        ) as response:
            if response.status_code != 200:
                response.failure(f"Status code: {response.status_code}")
                return
            try:
                data = response.json()
            except ValueError:
                response.failure("Invalid JSON response")
                return
            if data.get("items"):
                response.success()
            else:
                response.failure("Empty product list")

    @task(6)
    def view_product_details(self):
        if not self.products:
            return
        product = random.choice(self.products)

        with self.client.get(
                f"/api/v1/products/{product['id']}",
                catch_response=True,
                name="GET /products/{id} (view, tracked)"
        ) as response:
            _expect(response, 200)

    @task(5)
    def similar_products(self):
        if not self.products:
            return
        product = random.choice(self.products)

        with self.client.get(
                f"/api/v1/products/{product['id']}/similar",
                params={"category": product["category"], "price": product["price"], "limit": 4},
                catch_response=True,
                name="GET /products/{id}/similar"
        ) as response:
            _expect(response, 200)

    @task(3)
    def add_to_cart(self):
        if not self.products:
            return
        product = random.choice(self.products)

        with self.client.post(
                "/api/v1/cart/items",
                json={"product_id": product["id"], "category": product["category"]},
                catch_response=True,
                name="POST /cart/items (cart_add, tracked)"
        ) as response:
            _expect(response, 200)

    @task(3)
    def get_recommendations(self):
        with self.client.get(
                "/api/v1/recommendations/products?limit=8",
                catch_response=True,
                name="GET /recommendations/products"
        ) as response:
            _expect(response, 200)

    @task(1)
    def checkout(self):
        if not self.products:
            return
        basket = random.sample(self.products, min(len(self.products), random.randint(1, 3)))

        with self.client.post(
                "/api/v1/interactions/purchases",
                json={"items": [{"product_id": p["id"], "category": p["category"]} for p in basket]},
                catch_response=True,
                name="POST /interactions/purchases (checkout)"
        ) as response:
            _expect(response, 202)


class AdminUser(HttpUser):

    wait_time = between(5, 10)
    host = BASE_URL

    weight = 1

    @task
    def dashboard(self):
        if not ADMIN_AUTH:
            return
        with self.client.get(
                "/api/v1/admin/analytics",
                headers={"Authorization": ADMIN_AUTH},
                catch_response=True,
                name="GET /admin/analytics"
        ) as response:
            _expect(response, 200)


class AnonymousUser(HttpUser):

    wait_time = between(2, 5)
    host = BASE_URL

    weight = 3

    @task(10)
    def browse_catalog(self):
        self.client.get("/api/v1/products", name="[Anonymous] GET /products")

    @task(3)
    def browse_category(self):
        category = random.choice(["electronics", "jewelery", "men's clothing", "women's clothing"])
        self.client.get("/api/v1/products", params={"category": category}, name="[Anonymous] GET /products?category")

ShopperUser.weight = 6
