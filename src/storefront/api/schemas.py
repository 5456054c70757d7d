"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class SizeSchema(BaseModel):
    size: str
    stock: int = Field(default=0, ge=0)
    price_adjustment: float = 0.0


class VariantSchema(BaseModel):
    color: str
    color_code: str | None = None
    sizes: list[SizeSchema] = []


class ImageSchema(BaseModel):
    url: str
    alt: str | None = None
    is_primary: bool = False


class AddressSchema(BaseModel):
    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    phone: str | None = None


class CouponSchema(BaseModel):
    code: str
    discount_type: str = Field(pattern="^(percentage|fixed)$")
    discount_value: float = Field(ge=0)


class GuestItemSchema(BaseModel):
    product_id: str
    color: str
    size: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)


class ReviewImageSchema(BaseModel):
    url: str
    alt: str | None = None
    caption: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sku": "TSH-001",
                    "name": "Classic Tee",
                    "description": "A heavyweight cotton t-shirt.",
                    "category": "t-shirts",
                    "brand": "Acme",
                    "base_price": 25.0,
                    "variants": [{"color": "Black", "sizes": [{"size": "M", "stock": 10}]}],
                }
            ]
        }
    }

    sku: str
    name: str
    description: str
    category: str
    brand: str
    base_price: float = Field(ge=0)
    slug: str | None = None
    sale_price: float | None = Field(default=None, ge=0)
    short_description: str | None = None
    subcategory: str | None = None
    gender: str | None = None
    variants: list[VariantSchema] = []
    images: list[ImageSchema] = []
    materials: list[str] = []
    care_instructions: list[str] = []
    features: list[str] = []
    tags: list[str] = []
    is_featured: bool = False
    is_new_arrival: bool = False


class UpdateProductRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    short_description: str | None = None
    brand: str | None = None
    base_price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    clear_sale_price: bool = False
    is_featured: bool | None = None
    is_new_arrival: bool | None = None
    tags: list[str] | None = None


class AddVariantRequest(VariantSchema):
    pass


class AdjustStockRequest(BaseModel):
    color: str
    size: str
    delta: int


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "b2c3d4e5-f6a7-8901-bcde-f12345678901", "color": "Black", "size": "M", "quantity": 2}]
        }
    }

    product_id: str
    color: str
    size: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int


class MergeGuestCartRequest(BaseModel):
    guest_items: list[GuestItemSchema]


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    user_id: str
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    billing_same_as_shipping: bool = True
    payment_method: str | None = None
    shipping_method: str | None = None
    shipping_cost: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)
    coupon: CouponSchema | None = None
    customer_notes: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str
    cancelled_by: str | None = None


class UpdateShippingRequest(BaseModel):
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: datetime | None = None
    method: str | None = None
    changed_by: str | None = None


class AdvanceStatusRequest(BaseModel):
    status: str
    note: str | None = None
    changed_by: str | None = None


class ProcessPaymentRequest(BaseModel):
    transaction_id: str
    payment_intent_id: str | None = None


class PaymentFailureRequest(BaseModel):
    reason: str | None = None


class RefundRequest(BaseModel):
    amount: float | None = Field(default=None, ge=0)


class ReturnRequestSchema(BaseModel):
    reason: str


class ProcessReturnRequest(BaseModel):
    approve: bool
    refund_amount: float | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Review Request Schemas
# ---------------------------------------------------------------------------
class CreateReviewRequest(BaseModel):
    product_id: str
    user_id: str
    rating: int = Field(ge=1, le=5)
    title: str = Field(max_length=100)
    comment: str = Field(max_length=1000)
    order_id: str | None = None
    pros: list[str] = []
    cons: list[str] = []
    images: list[ReviewImageSchema] = []
    size_purchased: str | None = None
    color_purchased: str | None = None
    fit_rating: str | None = None
    quality_rating: int | None = Field(default=None, ge=1, le=5)
    value_rating: int | None = Field(default=None, ge=1, le=5)
    recommend_product: bool = True


class VoteRequest(BaseModel):
    user_id: str
    vote: str = Field(pattern="^(helpful|not-helpful)$")


class FlagRequest(BaseModel):
    user_id: str
    reason: str
    note: str | None = None


class ModerateRequest(BaseModel):
    status: str
    moderator_id: str
    note: str | None = None


class RespondRequest(BaseModel):
    comment: str = Field(max_length=1000)
    responded_by: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_id": "b2c3d4e5-f6a7-8901-bcde-f12345678901"}]}}

    product_id: str


class StockResponse(BaseModel):
    stock: int


class CartIdResponse(BaseModel):
    cart_id: str


class ItemIdResponse(BaseModel):
    item_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class ReviewIdResponse(BaseModel):
    review_id: str


class VoteResponse(BaseModel):
    helpful: int
    not_helpful: int


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"


class PageResponse(BaseModel):
    items: list[dict]
    total: int
    page: int
    per_page: int
