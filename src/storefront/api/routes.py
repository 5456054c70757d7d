"""FastAPI routes for the Storefront — products, carts, orders and reviews.

Writes go through Protean commands; reads use the aggregate repositories.
"""

from datetime import datetime

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    AddVariantRequest,
    AdjustStockRequest,
    AdvanceStatusRequest,
    CancelOrderRequest,
    CartIdResponse,
    CreateProductRequest,
    CreateReviewRequest,
    FlagRequest,
    ImageSchema,
    ItemIdResponse,
    MergeGuestCartRequest,
    ModerateRequest,
    OrderIdResponse,
    PageResponse,
    PaymentFailureRequest,
    PlaceOrderRequest,
    ProcessPaymentRequest,
    ProcessReturnRequest,
    ProductIdResponse,
    RefundRequest,
    RespondRequest,
    ReturnRequestSchema,
    ReviewIdResponse,
    StatusResponse,
    StockResponse,
    UpdateCartItemRequest,
    UpdateProductRequest,
    UpdateShippingRequest,
    VoteRequest,
    VoteResponse,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, MergeGuestCart
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import PlaceOrder
from storefront.order.fulfillment import AdvanceOrderStatus, MarkDelivered, UpdateShipping
from storefront.order.order import Order
from storefront.order.payment import ProcessPayment, RecordPaymentFailure, RefundOrder
from storefront.order.returns import CompleteReturn, ProcessReturn, RequestReturn
from storefront.product.creation import CreateProduct
from storefront.product.management import (
    ActivateProduct,
    AddProductImage,
    AddVariant,
    DeactivateProduct,
    RecordProductView,
    UpdateProductDetails,
)
from storefront.product.product import Product
from storefront.product.stock import AdjustStock
from storefront.review.creation import CreateReview
from storefront.review.engagement import FlagReview, RespondToReview, VoteOnReview
from storefront.review.moderation import DeleteReview, ModerateReview
from storefront.review.rating import reconcile_rating
from storefront.review.review import Review
from storefront.utils.dispatch import dispatch
from storefront.utils.pagination import page_size


def _page(result, page, per_page, render=lambda item: item.to_dict()):
    return PageResponse(
        items=[render(item) for item in result.items],
        total=result.total,
        page=page,
        per_page=page_size(per_page),
    )


def _product_view(product):
    data = product.to_dict()
    data.update(
        current_price=product.current_price,
        discount_percentage=product.discount_percentage,
        total_stock=product.total_stock,
        is_available=product.is_available,
    )
    return data


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = CreateProduct(**body.model_dump(exclude_none=True))
    result = dispatch(command)
    return ProductIdResponse(product_id=result)


@product_router.get("", response_model=PageResponse)
async def browse_products(
    category: str | None = None,
    gender: str | None = None,
    brand: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
) -> PageResponse:
    result = current_domain.repository_for(Product).browse(
        category=category,
        gender=gender,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        page=page,
        per_page=per_page,
    )
    return _page(result, page, per_page, render=_product_view)


@product_router.get("/search", response_model=PageResponse)
async def search_products(
    q: str = Query(min_length=1),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
) -> PageResponse:
    result = current_domain.repository_for(Product).search(q, page=page, per_page=per_page)
    return _page(result, page, per_page, render=_product_view)


@product_router.get("/featured")
async def featured_products(limit: int = Query(default=10, ge=1, le=50)) -> list[dict]:
    return [_product_view(p) for p in current_domain.repository_for(Product).featured(limit)]


@product_router.get("/new-arrivals")
async def new_arrival_products(limit: int = Query(default=10, ge=1, le=50)) -> list[dict]:
    return [_product_view(p) for p in current_domain.repository_for(Product).new_arrivals(limit)]


@product_router.get("/slug/{slug}")
async def get_product_by_slug(slug: str) -> dict:
    product = current_domain.repository_for(Product).by_slug(slug)
    dispatch(RecordProductView(product_id=product.id))
    return _product_view(product)


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return _product_view(current_domain.repository_for(Product).get(product_id))


@product_router.get("/{product_id}/sizes")
async def available_sizes(product_id: str, color: str) -> list[dict]:
    return current_domain.repository_for(Product).get(product_id).get_available_sizes(color)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> StatusResponse:
    dispatch(UpdateProductDetails(product_id=product_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@product_router.post("/{product_id}/variants", status_code=201, response_model=StatusResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> StatusResponse:
    dispatch(
        AddVariant(
            product_id=product_id,
            color=body.color,
            color_code=body.color_code,
            sizes=[s.model_dump() for s in body.sizes],
        )
    )
    return StatusResponse()


@product_router.post("/{product_id}/images", status_code=201, response_model=StatusResponse)
async def add_image(product_id: str, body: ImageSchema) -> StatusResponse:
    dispatch(AddProductImage(product_id=product_id, **body.model_dump()))
    return StatusResponse()


@product_router.post("/{product_id}/stock", response_model=StockResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest) -> StockResponse:
    result = dispatch(AdjustStock(product_id=product_id, **body.model_dump()))
    return StockResponse(stock=result)


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    dispatch(DeactivateProduct(product_id=product_id))
    return StatusResponse()


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str) -> StatusResponse:
    dispatch(ActivateProduct(product_id=product_id))
    return StatusResponse()


@product_router.get("/{product_id}/reviews", response_model=PageResponse)
async def product_reviews(
    product_id: str,
    sort: str = "newest",
    rating: int | None = Query(default=None, ge=1, le=5),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
) -> PageResponse:
    result = current_domain.repository_for(Review).for_product(
        product_id, sort=sort, rating=rating, page=page, per_page=per_page
    )
    return _page(result, page, per_page)


@product_router.get("/{product_id}/reviews/stats")
async def product_review_stats(product_id: str) -> dict:
    return current_domain.repository_for(Review).product_stats(product_id)


@product_router.get("/{product_id}/rating/reconcile")
async def reconcile_product_rating(product_id: str) -> dict:
    return reconcile_rating(product_id)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}")
async def get_cart(user_id: str) -> dict:
    return current_domain.repository_for(Cart).get_or_create_for_user(user_id).to_dict()


@cart_router.post("/{user_id}/items", status_code=201, response_model=ItemIdResponse)
async def add_cart_item(user_id: str, body: AddToCartRequest) -> ItemIdResponse:
    result = dispatch(AddToCart(user_id=user_id, **body.model_dump()))
    return ItemIdResponse(item_id=result)


@cart_router.put("/{user_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(user_id: str, item_id: str, body: UpdateCartItemRequest) -> StatusResponse:
    dispatch(UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=body.quantity))
    return StatusResponse()


@cart_router.delete("/{user_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(user_id: str, item_id: str) -> StatusResponse:
    dispatch(RemoveFromCart(user_id=user_id, item_id=item_id))
    return StatusResponse()


@cart_router.delete("/{user_id}", response_model=StatusResponse)
async def clear_cart(user_id: str) -> StatusResponse:
    dispatch(ClearCart(user_id=user_id))
    return StatusResponse()


@cart_router.post("/{user_id}/merge", response_model=CartIdResponse)
async def merge_guest_cart(user_id: str, body: MergeGuestCartRequest) -> CartIdResponse:
    result = dispatch(MergeGuestCart(user_id=user_id, guest_items=[i.model_dump() for i in body.guest_items]))
    return CartIdResponse(cart_id=result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    result = dispatch(PlaceOrder(**body.model_dump(exclude_none=True)))
    return OrderIdResponse(order_id=result)


@order_router.get("/stats")
async def sales_stats(start: datetime, end: datetime) -> dict:
    return current_domain.repository_for(Order).sales_stats(start, end)


@order_router.get("/number/{order_number}")
async def get_order_by_number(order_number: str) -> dict:
    return current_domain.repository_for(Order).by_number(order_number).to_dict()


@order_router.get("/user/{user_id}", response_model=PageResponse)
async def user_orders(
    user_id: str,
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
) -> PageResponse:
    result = current_domain.repository_for(Order).for_user(user_id, status=status, page=page, per_page=per_page)
    return _page(result, page, per_page)


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return current_domain.repository_for(Order).get(order_id).to_dict()


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    dispatch(CancelOrder(order_id=order_id, reason=body.reason, cancelled_by=body.cancelled_by))
    return StatusResponse()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def advance_order_status(order_id: str, body: AdvanceStatusRequest) -> StatusResponse:
    dispatch(AdvanceOrderStatus(order_id=order_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@order_router.put("/{order_id}/shipping", response_model=StatusResponse)
async def update_shipping(order_id: str, body: UpdateShippingRequest) -> StatusResponse:
    dispatch(UpdateShipping(order_id=order_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@order_router.put("/{order_id}/delivered", response_model=StatusResponse)
async def mark_delivered(order_id: str) -> StatusResponse:
    dispatch(MarkDelivered(order_id=order_id))
    return StatusResponse()


@order_router.put("/{order_id}/payment", response_model=StatusResponse)
async def process_payment(order_id: str, body: ProcessPaymentRequest) -> StatusResponse:
    dispatch(ProcessPayment(order_id=order_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@order_router.put("/{order_id}/payment/failure", response_model=StatusResponse)
async def record_payment_failure(order_id: str, body: PaymentFailureRequest) -> StatusResponse:
    dispatch(RecordPaymentFailure(order_id=order_id, reason=body.reason))
    return StatusResponse()


@order_router.put("/{order_id}/refund", response_model=StatusResponse)
async def refund_order(order_id: str, body: RefundRequest) -> StatusResponse:
    dispatch(RefundOrder(order_id=order_id, amount=body.amount))
    return StatusResponse()


@order_router.post("/{order_id}/return", status_code=201, response_model=StatusResponse)
async def request_return(order_id: str, body: ReturnRequestSchema) -> StatusResponse:
    dispatch(RequestReturn(order_id=order_id, reason=body.reason))
    return StatusResponse()


@order_router.put("/{order_id}/return", response_model=StatusResponse)
async def process_return(order_id: str, body: ProcessReturnRequest) -> StatusResponse:
    dispatch(ProcessReturn(order_id=order_id, approve=body.approve, refund_amount=body.refund_amount))
    return StatusResponse()


@order_router.put("/{order_id}/return/complete", response_model=StatusResponse)
async def complete_return(order_id: str) -> StatusResponse:
    dispatch(CompleteReturn(order_id=order_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def create_review(body: CreateReviewRequest) -> ReviewIdResponse:
    payload = body.model_dump(exclude_none=True)
    payload["images"] = [i.model_dump(exclude_none=True) for i in body.images]
    result = dispatch(CreateReview(**payload))
    return ReviewIdResponse(review_id=result)


@review_router.get("/pending", response_model=PageResponse)
async def pending_reviews(
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
) -> PageResponse:
    result = current_domain.repository_for(Review).pending_moderation(page=page, per_page=per_page)
    return _page(result, page, per_page)


@review_router.get("/{review_id}")
async def get_review(review_id: str) -> dict:
    review = current_domain.repository_for(Review).get(review_id)
    data = review.to_dict()
    data["helpfulness_score"] = review.helpfulness_score
    return data


@review_router.post("/{review_id}/votes", response_model=VoteResponse)
async def vote_on_review(review_id: str, body: VoteRequest) -> VoteResponse:
    result = dispatch(VoteOnReview(review_id=review_id, user_id=body.user_id, vote=body.vote))
    return VoteResponse(**result)


@review_router.post("/{review_id}/flags", status_code=201, response_model=StatusResponse)
async def flag_review(review_id: str, body: FlagRequest) -> StatusResponse:
    dispatch(FlagReview(review_id=review_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@review_router.put("/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(review_id: str, body: ModerateRequest) -> StatusResponse:
    dispatch(ModerateReview(review_id=review_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@review_router.post("/{review_id}/response", status_code=201, response_model=StatusResponse)
async def respond_to_review(review_id: str, body: RespondRequest) -> StatusResponse:
    dispatch(RespondToReview(review_id=review_id, comment=body.comment, responded_by=body.responded_by))
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str) -> StatusResponse:
    dispatch(DeleteReview(review_id=review_id))
    return StatusResponse()
