"""Exception handlers translating storefront errors into HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.exceptions import (
    AuthenticationError,
    ConcurrentCartEditError,
    EmptyCartError,
    InsufficientStockError,
    InvalidPromoError,
    InvalidQuantityError,
    MalformedCartItemError,
    MalformedSizeKeyError,
    NotFoundError,
    OutOfStockError,
    PromoExhaustedError,
    StockContentionError,
    StockRestoreError,
    TransactionAbortError,
)

STATUS_CODES = {
    NotFoundError: 404,
    InsufficientStockError: 409,
    OutOfStockError: 409,
    PromoExhaustedError: 409,
    ConcurrentCartEditError: 409,
    TransactionAbortError: 409,
    InvalidPromoError: 422,
    InvalidQuantityError: 422,
    MalformedSizeKeyError: 422,
    MalformedCartItemError: 422,
    EmptyCartError: 422,
    AuthenticationError: 401,
    StockContentionError: 503,
    StockRestoreError: 500,
}


def _error_body(exc):
    body = {"error": type(exc).__name__, "detail": str(exc)}
    if isinstance(exc, InsufficientStockError):
        body["remaining"] = exc.remaining
    elif isinstance(exc, TransactionAbortError):
        body["step"] = exc.step
    elif isinstance(exc, MalformedCartItemError):
        body["item"] = exc.item_name
    return body


def _handler_for(status_code):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=_error_body(exc))

    return handler


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "ValidationError", "detail": exc.messages})


async def _object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "NotFoundError", "detail": str(exc)})


def install_error_handlers(app: FastAPI) -> FastAPI:
    for exc_class, status_code in STATUS_CODES.items():
        app.add_exception_handler(exc_class, _handler_for(status_code))
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _object_not_found)
    return app
