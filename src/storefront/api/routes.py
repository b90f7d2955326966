"""FastAPI endpoints for the Storefront backend."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AppliedPromoResponse,
    ApplyPromoRequest,
    CartRequest,
    CartResponse,
    AddFavoriteRequest,
    CreatePromoCodeRequest,
    FavoriteChangeResponse,
    FavoritesResponse,
    FeaturedResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    PromoCodeIdResponse,
    RegisterProductRequest,
    RestockRequest,
    StatusResponse,
    StockMovementRequest,
    StockResponse,
)
from storefront.cart.lines import lines_to_documents
from storefront.cart.persistence import CustomerCartStore, DeleteCustomerCart, SaveCustomerCart
from storefront.catalogue.management import RegisterProduct, RestockProduct, ToggleProductFeatured
from storefront.catalogue.reservation import ReleaseStock, ReserveStock
from storefront.catalogue.stock import StockAccessor
from storefront.favorites.management import AddFavorite, RemoveFavorite, load_favorites
from storefront.order.placement import OrderPlacement
from storefront.order.shipping import shipping_cost_for
from storefront.promotion.management import CreatePromoCode
from storefront.promotion.resolution import PromotionResolver

product_router = APIRouter(prefix="/products", tags=["products"])
promotion_router = APIRouter(prefix="/promotions", tags=["promotions"])
cart_router = APIRouter(prefix="/carts", tags=["carts"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
favorites_router = APIRouter(prefix="/favorites", tags=["favorites"])


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(document=json.dumps(body.model_dump()))
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}/stock", response_model=StockResponse)
async def get_stock(product_id: str, size_key: str = Query(..., max_length=255)) -> StockResponse:
    available = StockAccessor().get_available_stock(product_id, size_key)
    return StockResponse(product_id=product_id, size_key=size_key, available=available)


@product_router.post("/{product_id}/reservations", response_model=StockResponse)
async def reserve_stock(product_id: str, body: StockMovementRequest) -> StockResponse:
    command = ReserveStock(product_id=product_id, size_key=body.size_key, quantity=body.quantity)
    available = current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, size_key=body.size_key, available=available)


@product_router.post("/{product_id}/releases", response_model=StockResponse)
async def release_stock(product_id: str, body: StockMovementRequest) -> StockResponse:
    command = ReleaseStock(product_id=product_id, size_key=body.size_key, quantity=body.quantity)
    available = current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, size_key=body.size_key, available=available)


@product_router.put("/{product_id}/stock", response_model=StockResponse)
async def restock(product_id: str, body: RestockRequest) -> StockResponse:
    command = RestockProduct(product_id=product_id, size_key=body.size_key, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, size_key=body.size_key, available=body.quantity)


@product_router.post("/{product_id}/featured", response_model=FeaturedResponse)
async def toggle_featured(product_id: str) -> FeaturedResponse:
    featured = current_domain.process(ToggleProductFeatured(product_id=product_id), asynchronous=False)
    return FeaturedResponse(product_id=product_id, featured=featured)


# --- Promotion endpoints ---


@promotion_router.post("", status_code=201, response_model=PromoCodeIdResponse)
async def create_promo_code(body: CreatePromoCodeRequest) -> PromoCodeIdResponse:
    command = CreatePromoCode(
        code=body.code,
        discount_percentage=body.discount_percentage,
        usage_limit=body.usage_limit,
        active=body.active,
    )
    result = current_domain.process(command, asynchronous=False)
    return PromoCodeIdResponse(promo_code_id=result)


@promotion_router.post("/apply", response_model=AppliedPromoResponse)
async def apply_promo(body: ApplyPromoRequest) -> AppliedPromoResponse:
    application = PromotionResolver().apply(body.code)
    return AppliedPromoResponse(
        promo_code_id=str(application.promo.promo_code_id),
        code=application.promo.code,
        discount_percentage=application.promo.discount_percentage,
        message=application.message,
    )


# --- Cart endpoints ---


def _cart_response(identity_id):
    lines = CustomerCartStore().load(identity_id)
    return CartResponse(
        identity_id=identity_id,
        items=lines_to_documents(lines),
        total_item_count=sum(line.quantity for line in lines),
        subtotal=sum(line.line_total for line in lines),
    )


@cart_router.get("/{identity_id}", response_model=CartResponse)
async def get_cart(identity_id: str) -> CartResponse:
    return _cart_response(identity_id)


@cart_router.put("/{identity_id}", response_model=CartResponse)
async def save_cart(identity_id: str, body: CartRequest) -> CartResponse:
    items = [item.model_dump() for item in body.items]
    current_domain.process(SaveCustomerCart(identity_id=identity_id, items=json.dumps(items)), asynchronous=False)
    return _cart_response(identity_id)


@cart_router.delete("/{identity_id}", response_model=StatusResponse)
async def delete_cart(identity_id: str) -> StatusResponse:
    current_domain.process(DeleteCustomerCart(identity_id=identity_id), asynchronous=False)
    return StatusResponse()


# --- Favorites endpoints ---


@favorites_router.get("/{identity_id}", response_model=FavoritesResponse)
async def get_favorites(identity_id: str) -> FavoritesResponse:
    return FavoritesResponse(identity_id=identity_id, items=load_favorites(identity_id).entries())


@favorites_router.post("/{identity_id}", response_model=FavoriteChangeResponse)
async def add_favorite(identity_id: str, body: AddFavoriteRequest) -> FavoriteChangeResponse:
    command = AddFavorite(identity_id=identity_id, product_id=body.product_id, variant_id=body.variant_id)
    applied = current_domain.process(command, asynchronous=False)
    return FavoriteChangeResponse(applied=applied, items=load_favorites(identity_id).entries())


@favorites_router.delete("/{identity_id}/{product_id}", response_model=FavoriteChangeResponse)
async def remove_favorite(
    identity_id: str, product_id: str, variant_id: str | None = Query(None)
) -> FavoriteChangeResponse:
    command = RemoveFavorite(identity_id=identity_id, product_id=product_id, variant_id=variant_id)
    applied = current_domain.process(command, asynchronous=False)
    return FavoriteChangeResponse(applied=applied, items=load_favorites(identity_id).entries())


# --- Order endpoints ---


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    promo = PromotionResolver().apply(body.promo_code).promo if body.promo_code else None
    shipping = body.shipping.model_dump(exclude={"distance_meters"})
    shipping_cost = shipping_cost_for(body.shipping.shipping_method, body.shipping.distance_meters)

    order = OrderPlacement().place(
        body.customer_id,
        body.items,
        shipping=shipping,
        payment_method=body.payment_method,
        promo=promo,
        shipping_cost=shipping_cost,
    )
    return OrderResponse(**order.to_document())
