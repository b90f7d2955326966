"""FavoriteList aggregate: the products a signed-in customer has saved.

One list per customer, keyed by identity id. An entry is either a product or
one color variant of it, and the two are distinct: saving a variant does not
make the plain product a favorite.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Text

from storefront.domain import storefront
from storefront.favorites.events import FavoriteAdded, FavoriteRemoved


def _matches(entry, product_id, variant_id):
    if entry.get("productId") != str(product_id):
        return False
    if variant_id is None:
        return entry.get("variantId") is None
    return entry.get("variantId") == str(variant_id)


@storefront.aggregate
class FavoriteList:
    items = Text(default="[]")  # JSON: list of favorite entries
    updated_at = DateTime()

    @classmethod
    def create(cls, identity_id):
        return cls(id=str(identity_id), items="[]", updated_at=datetime.now(UTC))

    def entries(self):
        return json.loads(self.items or "[]")

    def contains(self, product_id, variant_id=None) -> bool:
        return any(_matches(entry, product_id, variant_id) for entry in self.entries())

    def add(self, product, variant=None) -> bool:
        """Save ``product``, or one of its variants. Returns False if it was already saved."""
        variant_id = str(variant.id) if variant is not None else None
        if self.contains(product.id, variant_id):
            return False

        images = (variant.image_urls if variant is not None else []) or product.image_urls
        entry = {
            "productId": str(product.id),
            "name": product.name,
            "price": product.price,
            "image": images[0] if images else None,
            "variantId": variant_id,
            "color": variant.color if variant is not None else None,
        }
        now = datetime.now(UTC)
        self.items = json.dumps([*self.entries(), entry])
        self.updated_at = now

        self.raise_(
            FavoriteAdded(
                identity_id=str(self.id),
                product_id=str(product.id),
                variant_id=variant_id,
                added_at=now,
            )
        )
        return True

    def remove(self, product_id, variant_id=None) -> bool:
        """Drop a saved entry. Returns False if there was nothing to drop."""
        entries = self.entries()
        remaining = [entry for entry in entries if not _matches(entry, product_id, variant_id)]
        if len(remaining) == len(entries):
            return False

        self.items = json.dumps(remaining)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            FavoriteRemoved(
                identity_id=str(self.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id is not None else None,
            )
        )
        return True
