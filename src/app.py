"""FreshCart storefront FastAPI application.

Web server that processes cart and order commands synchronously via HTTP.
Every request runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - default      -> event_processing = "sync"  (projectors fire in UoW)
#   - "production" -> event_processing = "async" (projectors fire via Engine)
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import bind_request_context, clear_request_context

storefront.init()

_DOMAIN_PREFIXES = ("/cart", "/orders", "/products", "/maintenance")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="FreshCart Storefront API",
    description="Grocery storefront: cart pricing and order lifecycle",
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
    """Push the storefront domain context and bind request details for logging."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        # Health check, docs, etc.
        return await call_next(request)

    bind_request_context(
        request_id=request.headers.get("X-Request-Id") or str(uuid.uuid4()),
        path=request.url.path,
        method=request.method,
        user_id=request.headers.get("X-User-Id"),
    )
    try:
        with storefront.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    admin_router,
    cart_router,
    maintenance_router,
    order_router,
    product_router,
    register_all_exceptions,
)

register_all_exceptions(app)

app.include_router(cart_router)
app.include_router(admin_router)
app.include_router(order_router)
app.include_router(product_router)
app.include_router(maintenance_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "storefront": {"name": storefront.name},
            },
        }
    )
