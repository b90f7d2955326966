"""Promotion resolver: turns a customer-entered code into an applied promotion."""

import structlog
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import InvalidPromoError, PromoExhaustedError
from storefront.promotion.promo_code import PromoCode, normalize_code

logger = structlog.get_logger(__name__)


@storefront.value_object
class AppliedPromo:
    """The promotion snapshot a cart carries until checkout."""

    promo_code_id = Identifier(required=True)
    code = String(required=True, max_length=100)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)

    def discount_for(self, subtotal):
        return subtotal * self.discount_percentage / 100


class PromoApplication:
    def __init__(self, promo: AppliedPromo, message: str):
        self.promo = promo
        self.message = message


class PromotionResolver:
    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(PromoCode)

    def apply(self, code) -> PromoApplication:
        """Validate a code without touching its usage counter."""
        normalized = normalize_code(code)
        promo = self.repository.find_active_by_code(normalized) if normalized else None
        if promo is None:
            raise InvalidPromoError("Invalid or expired code")

        if promo.is_exhausted:
            logger.info("Exhausted promo code rejected", code=promo.code, usage_limit=promo.usage_limit)
            raise PromoExhaustedError("This code has reached its usage limit")

        applied = AppliedPromo(
            promo_code_id=str(promo.id),
            code=promo.code,
            discount_percentage=promo.discount_percentage,
        )
        percentage = f"{promo.discount_percentage:g}"
        return PromoApplication(applied, f"Code {promo.code} applied: {percentage}% off")
