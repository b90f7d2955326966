"""Promotion management: commands and handler for the back office."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.promotion.promo_code import PromoCode, normalize_code


@storefront.command(part_of="PromoCode")
class CreatePromoCode:
    code = String(required=True, max_length=100)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)
    usage_limit = Integer(default=0, min_value=0)
    active = Boolean(default=True)


@storefront.command(part_of="PromoCode")
class SetPromoCodeActive:
    promo_code_id = Identifier(required=True)
    active = Boolean(required=True)


@storefront.command_handler(part_of=PromoCode)
class ManagePromoCodesHandler:
    @handle(CreatePromoCode)
    def create_promo_code(self, command):
        repo = current_domain.repository_for(PromoCode)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": [f"Code {normalize_code(command.code)} already exists"]})

        promo = PromoCode.create(
            code=command.code,
            discount_percentage=command.discount_percentage,
            usage_limit=command.usage_limit or 0,
            active=command.active if command.active is not None else True,
        )
        repo.add(promo)
        return str(promo.id)

    @handle(SetPromoCodeActive)
    def set_active(self, command):
        repo = current_domain.repository_for(PromoCode)
        try:
            promo = repo.get(command.promo_code_id)
        except ObjectNotFoundError:
            raise NotFoundError(f"Promo code {command.promo_code_id} not found") from None
        promo.set_active(command.active)
        repo.add(promo)
