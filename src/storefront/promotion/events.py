"""Domain events for the PromoCode aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="PromoCode")
class PromoCodeRedeemed:
    """A placed order used the promotion."""

    __version__ = 1

    promo_code_id = Identifier(required=True)
    code = String(required=True)
    order_id = Identifier()
    usage_count = Integer(required=True)
