"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was written together with its stock and promo effects."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_number = Integer(required=True)
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    promo_code = String()
    placed_at = DateTime(required=True)
