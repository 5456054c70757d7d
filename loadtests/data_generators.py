"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(category and size choices, sale below base price, line limits) and match
the exact field names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

CATEGORIES = ["men-shirts", "men-pants", "women-tops", "women-dresses", "unisex"]
COLORS = ["Black", "White", "Navy", "Olive", "Red"]
SIZES = ["XS", "S", "M", "L", "XL"]
SEARCH_TERMS = ["cotton", "linen", "denim", "wool", "classic", "relaxed"]

# ---------- Products ----------


def valid_sku(prefix: str = "LT") -> str:
    """Generate SKUs like 'LT-A1B2C3D4'; the API upper-cases them anyway."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def variant_data(color: str | None = None, stock: int = 50) -> dict:
    """Generate a color with every size in stock."""
    return {
        "color": color or random.choice(COLORS),
        "sizes": [
            {"size": size, "stock": stock, "price_adjustment": 2.0 if size == "XL" else 0.0} for size in SIZES
        ],
    }


def product_data(stock: int = 50) -> dict:
    """Generate CreateProductRequest payload with two colors."""
    base_price = round(random.uniform(15.0, 150.0), 2)
    on_sale = random.random() < 0.3
    colors = random.sample(COLORS, 2)
    return {
        "sku": valid_sku("PROD"),
        "name": f"{fake.word().capitalize()} {random.choice(SEARCH_TERMS)} {uuid.uuid4().hex[:4]}"[:200],
        "description": fake.paragraph(nb_sentences=3),
        "category": random.choice(CATEGORIES),
        "brand": fake.company()[:100],
        "base_price": base_price,
        "sale_price": round(base_price * 0.8, 2) if on_sale else None,
        "tags": random.sample(SEARCH_TERMS, 2),
        "variants": [variant_data(color, stock) for color in colors],
        "images": [image_data(is_primary=True)],
        "is_featured": random.random() < 0.2,
        "is_new_arrival": random.random() < 0.3,
    }


def image_data(is_primary: bool = False) -> dict:
    """Generate ImageSchema payload."""
    return {
        "url": f"https://cdn.example.com/images/{uuid.uuid4().hex}.jpg",
        "alt": fake.sentence(nb_words=5)[:255],
        "is_primary": is_primary,
    }


# ---------- Carts and orders ----------


def user_id() -> str:
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def cart_item_data(product_id: str, color: str) -> dict:
    """Generate AddToCartRequest payload for an in-stock size."""
    return {
        "product_id": product_id,
        "color": color,
        "size": random.choice(SIZES),
        "quantity": random.randint(1, 3),
    }


def address_data() -> dict:
    """Generate AddressSchema payload."""
    return {
        "first_name": fake.first_name()[:100],
        "last_name": fake.last_name()[:100],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
        "phone": fake.numerify("+1-###-###-####"),
    }


def checkout_data(user: str) -> dict:
    """Generate PlaceOrderRequest payload, sometimes with a coupon."""
    payload = {
        "user_id": user,
        "shipping_address": address_data(),
        "payment_method": random.choice(["stripe", "paypal", "credit_card"]),
        "shipping_method": random.choice(["standard", "express"]),
        "shipping_cost": random.choice([0.0, 4.99, 9.99]),
        "tax": round(random.uniform(0.0, 12.0), 2),
    }
    if random.random() < 0.25:
        payload["coupon"] = {"code": "LOADTEST10", "discount_type": "percentage", "discount_value": 10}
    return payload


def tracking_data() -> dict:
    return {
        "tracking_number": f"1Z{uuid.uuid4().hex[:12].upper()}",
        "carrier": random.choice(["UPS", "FedEx", "USPS"]),
    }


# ---------- Reviews ----------


def review_data(product_id: str, user: str, order_id: str | None = None) -> dict:
    """Generate CreateReviewRequest payload."""
    payload = {
        "product_id": product_id,
        "user_id": user,
        "rating": random.randint(1, 5),
        "title": fake.sentence(nb_words=4)[:100],
        "comment": fake.paragraph(nb_sentences=2)[:1000],
        "fit_rating": random.choice(["runs-small", "true-to-size", "runs-large"]),
        "recommend_product": random.random() < 0.8,
    }
    if order_id:
        payload["order_id"] = order_id
    return payload
