"""Storefront FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → short version-conflict backoff
#   - "production" → PostgreSQL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from storefront.domain import storefront
from storefront.utils.logging import bind_request, configure_logging, get_logger, unbind_request

configure_logging()
storefront.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce backend — catalogue, carts, orders and reviews",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and a log scope for each request."""
    request_id = bind_request(request.method, request.url.path, request.headers.get("X-Request-ID"))
    try:
        with storefront.domain_context():
            response = await call_next(request)
    finally:
        unbind_request()
    response.headers["X-Request-ID"] = request_id
    return response


register_exception_handlers(app)


@app.exception_handler(ExpectedVersionError)
async def version_conflict_handler(request: Request, exc: ExpectedVersionError):
    logger.warning("version_conflict", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=409, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import cart_router, order_router, product_router, review_router  # noqa: E402

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(review_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
