"""Stock contention stress scenario.

Every user buys from one shared product, so stock decrements and the
day's order-number counter are fought over. Some checkouts are expected to
fail with 409 once the retry budget runs out, or with 422 once the shelf
is empty.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import checkout_data, product_data, user_id
from loadtests.helpers.response import error_detail, is_contention_outcome


class StockContentionUser(HttpUser):
    """Many shoppers checking out the same product at once."""

    wait_time = constant_pacing(0.2)
    shared_product = None

    def on_start(self):
        if StockContentionUser.shared_product is None:
            payload = product_data(stock=5000)
            resp = self.client.post("/products", json=payload, name="[SEED] POST /products")
            if resp.status_code == 201:
                StockContentionUser.shared_product = (
                    resp.json()["product_id"],
                    payload["variants"][0]["color"],
                )

    @task
    def buy_one(self):
        if StockContentionUser.shared_product is None:
            return
        product_id, color = StockContentionUser.shared_product
        shopper = user_id()
        self.client.post(
            f"/carts/{shopper}/items",
            json={"product_id": product_id, "color": color, "size": random.choice(["S", "M", "L"]), "quantity": 1},
            name="[CONTENTION] POST /carts/{user_id}/items",
        )
        with self.client.post(
            "/orders",
            json=checkout_data(shopper),
            catch_response=True,
            name="[CONTENTION] POST /orders",
        ) as resp:
            if is_contention_outcome(resp):
                resp.success()
            elif resp.status_code != 201:
                resp.failure(f"Checkout failed: {resp.status_code} {error_detail(resp)}")
