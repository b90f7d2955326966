"""Order and OrderCounter aggregates.

An order is a frozen snapshot of a cart at checkout: its lines, the prices
and promo as they were, and the totals derived from them. Orders start out
pending and unconfirmed; confirming them is an administrative concern.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.order.events import OrderPlaced

PENDING = "Pendiente"


def order_id_for(customer_id, number):
    return f"{customer_id}__orden{number}"


@storefront.aggregate
class OrderCounter:
    """Per-customer order sequence. The id is the customer id."""

    count = Integer(default=0, min_value=0)

    def next_number(self):
        self.count = (self.count or 0) + 1
        return self.count


@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    order_number = Integer(required=True, min_value=1)
    items = Text(required=True)  # JSON: list of cart line documents
    subtotal = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True)
    promo_code = Text()  # JSON: {"code", "discountPercentage"} or empty
    status = String(max_length=50, default=PENDING)
    confirmed = Boolean(default=False)
    customer_name = String(max_length=255)
    customer_email = String(max_length=254)
    customer_phone = String(max_length=30)
    shipping_method = String(max_length=50)
    metro_station = String(max_length=100)
    payment_method = String(max_length=50)
    created_at = DateTime()

    @invariant.post
    def total_must_match_its_parts(self):
        expected = round(self.subtotal - (self.discount or 0.0) + (self.shipping_cost or 0.0), 2)
        if round(self.total_amount, 2) != expected:
            raise ValidationError({"total_amount": ["Total must equal subtotal - discount + shipping"]})

    @classmethod
    def place(cls, customer_id, number, lines, shipping_cost=0.0, promo=None, shipping=None, payment_method=None):
        """Build a pending order from cart lines.

        ``promo`` is anything exposing ``code``, ``discount_percentage`` and
        ``discount_for(subtotal)``.
        """
        shipping = shipping or {}
        subtotal = round(sum(line.line_total for line in lines), 2)
        discount = round(promo.discount_for(subtotal), 2) if promo else 0.0
        shipping_cost = shipping_cost or 0.0
        now = datetime.now(UTC)

        order = cls(
            id=order_id_for(customer_id, number),
            customer_id=customer_id,
            order_number=number,
            items=json.dumps([line.to_document() for line in lines]),
            subtotal=subtotal,
            discount=discount,
            shipping_cost=shipping_cost,
            total_amount=round(subtotal - discount + shipping_cost, 2),
            promo_code=json.dumps(
                {"code": promo.code, "discountPercentage": promo.discount_percentage} if promo else None
            ),
            customer_name=shipping.get("customer_name"),
            customer_email=shipping.get("customer_email"),
            customer_phone=shipping.get("customer_phone"),
            shipping_method=shipping.get("shipping_method"),
            metro_station=shipping.get("metro_station") or "",
            payment_method=payment_method,
            created_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                order_number=number,
                item_count=sum(line.quantity for line in lines),
                total_amount=order.total_amount,
                promo_code=promo.code if promo else None,
                placed_at=now,
            )
        )
        return order

    @property
    def item_documents(self):
        return json.loads(self.items) if self.items else []

    @property
    def promo_snapshot(self):
        return json.loads(self.promo_code) if self.promo_code else None

    def to_document(self):
        return {
            "id": str(self.id),
            "userId": str(self.customer_id),
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "shippingMethod": self.shipping_method,
            "metroStation": self.metro_station,
            "paymentMethod": self.payment_method,
            "items": self.item_documents,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shippingCost": self.shipping_cost,
            "totalAmount": self.total_amount,
            "promoCode": self.promo_snapshot,
            "status": self.status,
            "confirmed": bool(self.confirmed),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
