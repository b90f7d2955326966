"""Domain events for the FavoriteList aggregate."""

from protean.fields import DateTime, Identifier

from storefront.domain import storefront


@storefront.event(part_of="FavoriteList")
class FavoriteAdded:
    __version__ = 1

    identity_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    added_at = DateTime(required=True)


@storefront.event(part_of="FavoriteList")
class FavoriteRemoved:
    __version__ = 1

    identity_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
