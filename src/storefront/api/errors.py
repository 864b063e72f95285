"""HTTP mapping for storefront domain failures.

Every error leaves the API as ``{"error": {"code": ..., "details": ...}}``.
Protean's own FastAPI handlers are installed first so any framework error we
do not map explicitly still gets a sensible status.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.shared.errors import EmptyCart, InsufficientStock, InvalidTransition, ProductUnavailable

logger = structlog.get_logger(__name__)


def build_error(code, details):
    return {"error": {"code": code, "details": details}}


def json_error(payload, status_code):
    return JSONResponse(content=payload, status_code=status_code)


async def not_found_handler(request: Request, exc: ObjectNotFoundError):
    return json_error(build_error("NOT_FOUND", getattr(exc, "messages", str(exc))), status.HTTP_404_NOT_FOUND)


async def validation_error_handler(request: Request, exc: ValidationError):
    return json_error(build_error("VALIDATION_ERROR", exc.messages), status.HTTP_400_BAD_REQUEST)


async def insufficient_stock_handler(request: Request, exc: InsufficientStock):
    details = {
        **exc.messages,
        "product_id": exc.product_id,
        "requested": exc.requested,
        "available": exc.available,
    }
    return json_error(build_error("INSUFFICIENT_STOCK", details), status.HTTP_400_BAD_REQUEST)


async def empty_cart_handler(request: Request, exc: EmptyCart):
    return json_error(build_error("EMPTY_CART", exc.messages), status.HTTP_400_BAD_REQUEST)


async def product_unavailable_handler(request: Request, exc: ProductUnavailable):
    return json_error(build_error("PRODUCT_UNAVAILABLE", exc.messages), status.HTTP_400_BAD_REQUEST)


async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    details = {**exc.messages, "current": exc.current, "target": exc.target}
    return json_error(build_error("INVALID_TRANSITION", details), status.HTTP_409_CONFLICT)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation failed", path=request.url.path, errors=exc.errors())
    details = [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]
    return json_error(build_error("UNPROCESSABLE_ENTITY", details), status.HTTP_422_UNPROCESSABLE_ENTITY)


def register_all_exceptions(app: FastAPI):
    register_exception_handlers(app)

    # Most specific class wins, so the typed failures override ValidationError
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InsufficientStock, insufficient_stock_handler)
    app.add_exception_handler(EmptyCart, empty_cart_handler)
    app.add_exception_handler(ProductUnavailable, product_unavailable_handler)
    app.add_exception_handler(InvalidTransition, invalid_transition_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
