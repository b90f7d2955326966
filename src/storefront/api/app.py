"""Storefront FastAPI application.

Usage:
    uvicorn storefront.api.app:create_app --factory --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import install_error_handlers
from storefront.api.routes import cart_router, favorites_router, order_router, product_router, promotion_router
from storefront.domain import storefront


def create_app(init_domain: bool = True) -> FastAPI:
    if init_domain:
        storefront.init()

    app = FastAPI(
        title="Storefront API",
        description="Stock reservations, carts, promotions and checkout",
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
        """Push the storefront domain context for each request."""
        with storefront.domain_context():
            return await call_next(request)

    app.include_router(product_router)
    app.include_router(promotion_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(favorites_router)
    install_error_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": storefront.name})

    return app
