"""Shopping load test scenarios.

Stateful SequentialTaskSet journeys from cart to review. Steps execute in
order — each depends on the previous step succeeding.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    cart_item_data,
    checkout_data,
    product_data,
    review_data,
    tracking_data,
    user_id,
)
from loadtests.helpers.state import ShopperState


class _ShopperJourney(SequentialTaskSet):
    """Shared steps: seed a product, fill a cart, check out."""

    def on_start(self):
        self.state = ShopperState(user_id=user_id())

    def seed_product(self):
        payload = product_data()
        with self.client.post("/products", json=payload, catch_response=True, name="POST /products") as resp:
            if resp.status_code == 201:
                self.state.product_id = resp.json()["product_id"]
                self.state.colors = [v["color"] for v in payload["variants"]]
            else:
                resp.failure(f"Create product failed: {resp.status_code}")
                self.interrupt()

    def fill_cart(self, lines=2):
        for _ in range(lines):
            with self.client.post(
                f"/carts/{self.state.user_id}/items",
                json=cart_item_data(self.state.product_id, random.choice(self.state.colors)),
                catch_response=True,
                name="POST /carts/{user_id}/items",
            ) as resp:
                if resp.status_code == 201:
                    self.state.item_ids.append(resp.json()["item_id"])
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}")

    def place_order(self):
        with self.client.post(
            "/orders",
            json=checkout_data(self.state.user_id),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code}")
                self.interrupt()

    def put(self, path, name, json=None):
        with self.client.put(path, json=json, catch_response=True, name=name) as resp:
            if resp.status_code != 200:
                resp.failure(f"{name} failed: {resp.status_code}")
                self.interrupt()


class CheckoutToReviewJourney(_ShopperJourney):
    """Cart -> Checkout -> Pay -> Process -> Ship -> Deliver -> Verified review."""

    @task
    def setup(self):
        self.seed_product()
        self.fill_cart()

    @task
    def checkout(self):
        self.place_order()

    @task
    def pay(self):
        self.put(
            f"/orders/{self.state.order_id}/payment",
            "PUT /orders/{id}/payment",
            json={"transaction_id": f"txn-{self.state.order_id[:8]}"},
        )

    @task
    def process(self):
        self.put(f"/orders/{self.state.order_id}/status", "PUT /orders/{id}/status", json={"status": "processing"})

    @task
    def ship(self):
        self.put(f"/orders/{self.state.order_id}/shipping", "PUT /orders/{id}/shipping", json=tracking_data())

    @task
    def deliver(self):
        self.put(f"/orders/{self.state.order_id}/delivered", "PUT /orders/{id}/delivered")

    @task
    def review(self):
        with self.client.post(
            "/reviews",
            json=review_data(self.state.product_id, self.state.user_id, self.state.order_id),
            catch_response=True,
            name="POST /reviews",
        ) as resp:
            if resp.status_code == 201:
                self.state.review_id = resp.json()["review_id"]
            else:
                resp.failure(f"Review failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class CartAbandonmentJourney(_ShopperJourney):
    """Cart -> Change quantity -> Remove line -> Leave."""

    @task
    def setup(self):
        self.seed_product()
        self.fill_cart(lines=3)

    @task
    def change_quantity(self):
        if self.state.item_ids:
            self.put(
                f"/carts/{self.state.user_id}/items/{self.state.item_ids[0]}",
                "PUT /carts/{user_id}/items/{id}",
                json={"quantity": random.randint(1, 10)},
            )

    @task
    def remove_line(self):
        if len(self.state.item_ids) > 1:
            self.client.delete(
                f"/carts/{self.state.user_id}/items/{self.state.item_ids[-1]}",
                name="DELETE /carts/{user_id}/items/{id}",
            )

    @task
    def done(self):
        self.interrupt()


class OrderCancellationJourney(_ShopperJourney):
    """Cart -> Checkout -> Cancel (stock goes back on the shelf)."""

    @task
    def setup(self):
        self.seed_product()
        self.fill_cart()

    @task
    def checkout(self):
        self.place_order()

    @task
    def cancel(self):
        self.put(
            f"/orders/{self.state.order_id}/cancel",
            "PUT /orders/{id}/cancel",
            json={"reason": "Changed my mind"},
        )

    @task
    def done(self):
        self.interrupt()
