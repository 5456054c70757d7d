"""Catalogue browsing load test scenarios.

Read-heavy traffic: category listings, search, featured shelves and product
pages. Product pages are fetched by slug, so every one of them also records
a view, which contends on the product's version.
"""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import CATEGORIES, SEARCH_TERMS, product_data


class BrowsingUser(HttpUser):
    """Anonymous visitor paging through the catalogue."""

    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.slugs = []
        for _ in range(3):
            resp = self.client.post("/products", json=product_data(), name="[SEED] POST /products")
            if resp.status_code == 201:
                product = self.client.get(
                    f"/products/{resp.json()['product_id']}", name="[SEED] GET /products/{id}"
                ).json()
                self.slugs.append(product["slug"])

    @task(5)
    def browse_category(self):
        self.client.get(
            "/products",
            params={"category": random.choice(CATEGORIES), "page": random.randint(1, 3)},
            name="GET /products?category",
        )

    @task(3)
    def search(self):
        self.client.get("/products/search", params={"q": random.choice(SEARCH_TERMS)}, name="GET /products/search")

    @task(2)
    def featured(self):
        self.client.get("/products/featured", name="GET /products/featured")
        self.client.get("/products/new-arrivals", name="GET /products/new-arrivals")

    @task(4)
    def product_page(self):
        if not self.slugs:
            return
        with self.client.get(
            f"/products/slug/{random.choice(self.slugs)}",
            catch_response=True,
            name="GET /products/slug/{slug}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Product page failed: {resp.status_code}")
