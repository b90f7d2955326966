"""Favorites management: commands and handler that edit a customer's list."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.stock import StockAccessor
from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.favorites.favorite_list import FavoriteList

logger = structlog.get_logger(__name__)


def load_favorites(identity_id) -> FavoriteList:
    """The customer's list, or a new empty one if nothing was ever saved."""
    try:
        return current_domain.repository_for(FavoriteList).get(str(identity_id))
    except ObjectNotFoundError:
        return FavoriteList.create(identity_id)


@storefront.command(part_of="FavoriteList")
class AddFavorite:
    identity_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()


@storefront.command(part_of="FavoriteList")
class RemoveFavorite:
    identity_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()


@storefront.command_handler(part_of=FavoriteList)
class ManageFavoritesHandler:
    @handle(AddFavorite)
    def add_favorite(self, command):
        product = StockAccessor().get_product(command.product_id)
        variant = None
        if command.variant_id:
            variant = product.find_variant(command.variant_id)
            if variant is None:
                raise NotFoundError(f"Variant {command.variant_id} not found on product {product.id}")

        favorites = load_favorites(command.identity_id)
        added = favorites.add(product, variant)
        if added:
            current_domain.repository_for(FavoriteList).add(favorites)
            logger.info("Favorite added", identity_id=str(command.identity_id), product_id=str(product.id))
        return added

    @handle(RemoveFavorite)
    def remove_favorite(self, command):
        favorites = load_favorites(command.identity_id)
        removed = favorites.remove(command.product_id, command.variant_id or None)
        if removed:
            current_domain.repository_for(FavoriteList).add(favorites)
            logger.info("Favorite removed", identity_id=str(command.identity_id), product_id=str(command.product_id))
        return removed
