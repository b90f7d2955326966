"""PromoCode aggregate and its repository.

A promotion is a percentage discount on the cart subtotal. Codes are stored
upper-cased and trimmed; lookups normalize the same way, so matching is
case-insensitive. Usage is counted only when an order is placed.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.domain import storefront
from storefront.exceptions import PromoExhaustedError
from storefront.promotion.events import PromoCodeRedeemed


def normalize_code(code) -> str:
    return (code or "").strip().upper()


@storefront.aggregate
class PromoCode:
    code = String(required=True, max_length=100)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)
    usage_limit = Integer(default=0, min_value=0)  # 0 means unlimited
    usage_count = Integer(default=0, min_value=0)
    active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, code, discount_percentage, usage_limit=0, active=True):
        return cls(
            code=normalize_code(code),
            discount_percentage=discount_percentage,
            usage_limit=usage_limit,
            usage_count=0,
            active=active,
            created_at=datetime.now(UTC),
        )

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit > 0 and self.usage_count >= self.usage_limit

    @property
    def is_applicable(self) -> bool:
        return bool(self.active) and not self.is_exhausted

    def discount_for(self, subtotal):
        return subtotal * self.discount_percentage / 100

    def record_usage(self, order_id=None):
        if self.is_exhausted:
            raise PromoExhaustedError(f"Code {self.code} has reached its usage limit")

        self.usage_count += 1
        self.raise_(
            PromoCodeRedeemed(
                promo_code_id=str(self.id),
                code=self.code,
                order_id=order_id,
                usage_count=self.usage_count,
            )
        )

    def set_active(self, active):
        self.active = bool(active)


@storefront.repository(part_of=PromoCode)
class PromoCodeRepository:
    def find_active_by_code(self, code) -> PromoCode | None:
        """The active promotion with this code, if any."""
        matches = self._dao.query.filter(code=normalize_code(code), active=True).all().items
        return matches[0] if matches else None

    def find_by_code(self, code) -> PromoCode | None:
        matches = self._dao.query.filter(code=normalize_code(code)).all().items
        return matches[0] if matches else None
