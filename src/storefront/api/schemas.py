"""Pydantic request/response schemas for the Storefront API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- Catalogue ---


class VariantDocument(BaseModel):
    id: str | None = None
    color: str = Field(..., max_length=100)
    images: list[str] = []
    inventory: dict[str, int] = {}


class RegisterProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Vestido Lino",
                    "price": 450.0,
                    "category": "vestidos",
                    "images": ["https://cdn.example.com/vestido-lino.jpg"],
                    "inventory": {"S": 3, "M": 5},
                    "variants": [{"color": "Azul", "inventory": {"M": 2}}],
                }
            ]
        }
    }

    id: str | None = None
    name: str = Field(..., max_length=255)
    price: float = Field(..., gt=0)
    category: str | None = Field(None, max_length=100)
    featured: bool = False
    images: list[str] = []
    inventory: dict[str, int] = {}
    variants: list[VariantDocument] = []


class ProductIdResponse(BaseModel):
    product_id: str


class StockMovementRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"size_key": "p1__M", "quantity": 1}]}}

    size_key: str = Field(..., max_length=255)
    quantity: int = Field(..., ge=1)


class RestockRequest(BaseModel):
    size_key: str = Field(..., max_length=255)
    quantity: int = Field(..., ge=0)


class StockResponse(BaseModel):
    product_id: str
    size_key: str
    available: int


class FeaturedResponse(BaseModel):
    product_id: str
    featured: bool


# --- Promotions ---


class CreatePromoCodeRequest(BaseModel):
    code: str = Field(..., max_length=100)
    discount_percentage: float = Field(..., ge=0, le=100)
    usage_limit: int = Field(0, ge=0)
    active: bool = True


class PromoCodeIdResponse(BaseModel):
    promo_code_id: str


class ApplyPromoRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"code": "summer10"}]}}

    code: str = Field(..., max_length=100)


class AppliedPromoResponse(BaseModel):
    promo_code_id: str
    code: str
    discount_percentage: float
    message: str


# --- Carts ---


class CartItemSchema(BaseModel):
    productId: str
    name: str
    price: float = Field(..., ge=0)
    size: str
    quantity: int = Field(..., ge=1)
    image: str | None = None
    createdAt: str | None = None


class CartRequest(BaseModel):
    items: list[CartItemSchema] = []


class CartResponse(BaseModel):
    identity_id: str
    items: list[CartItemSchema]
    total_item_count: int
    subtotal: float


# --- Favorites ---


class FavoriteEntry(BaseModel):
    productId: str
    name: str
    price: float
    image: str | None = None
    variantId: str | None = None
    color: str | None = None


class AddFavoriteRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    variant_id: str | None = None


class FavoritesResponse(BaseModel):
    identity_id: str
    items: list[FavoriteEntry]


class FavoriteChangeResponse(BaseModel):
    applied: bool
    items: list[FavoriteEntry]


# --- Orders ---


class ShippingDetails(BaseModel):
    customer_name: str | None = Field(None, max_length=255)
    customer_email: str | None = Field(None, max_length=254)
    customer_phone: str | None = Field(None, max_length=30)
    shipping_method: Literal["domicilio", "popotla"] = "domicilio"
    metro_station: str | None = Field(None, max_length=100)
    distance_meters: int | None = Field(None, ge=0)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "user-123",
                    "items": [
                        {
                            "productId": "p1",
                            "name": "Vestido Lino",
                            "price": 450.0,
                            "size": "p1__M",
                            "quantity": 1,
                        }
                    ],
                    "shipping": {"customer_name": "Ana", "shipping_method": "popotla"},
                    "payment_method": "transferencia",
                    "promo_code": "SUMMER10",
                }
            ]
        }
    }

    customer_id: str = Field(..., max_length=255)
    items: list[dict]
    shipping: ShippingDetails = ShippingDetails()
    payment_method: str | None = Field(None, max_length=50)
    promo_code: str | None = Field(None, max_length=100)


class OrderResponse(BaseModel):
    id: str
    userId: str
    items: list[dict]
    subtotal: float
    discount: float
    shippingCost: float
    totalAmount: float
    promoCode: dict | None = None
    status: str
    confirmed: bool
    customerName: str | None = None
    customerEmail: str | None = None
    customerPhone: str | None = None
    shippingMethod: str | None = None
    metroStation: str | None = None
    paymentMethod: str | None = None
    createdAt: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
