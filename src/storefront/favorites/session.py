"""FavoritesSession: the signed-in customer's saved products as the UI sees them.

The list follows the identity provider. It is loaded at sign-in and
forgotten at sign-out; editing it while signed out raises
``AuthenticationError``.
"""

from protean.utils.globals import current_domain

from storefront.exceptions import AuthenticationError
from storefront.favorites.management import AddFavorite, RemoveFavorite, load_favorites


class FavoritesSession:
    def __init__(self, identity_provider):
        self._identity_provider = identity_provider
        self._entries = []
        self._load(identity_provider.current_identity())
        self._unsubscribe = identity_provider.subscribe(self._load)

    @property
    def favorites(self):
        return list(self._entries)

    def is_favorite(self, product_id, variant_id=None) -> bool:
        for entry in self._entries:
            if entry["productId"] != str(product_id):
                continue
            if entry.get("variantId") == (str(variant_id) if variant_id is not None else None):
                return True
        return False

    def add(self, product, variant=None) -> bool:
        identity = self._require_identity("add to favorites")
        command = AddFavorite(
            identity_id=identity.uid,
            product_id=str(product.id),
            variant_id=str(variant.id) if variant is not None else None,
        )
        added = current_domain.process(command, asynchronous=False)
        self._load(identity)
        return added

    def remove(self, product_id, variant_id=None) -> bool:
        identity = self._require_identity("remove from favorites")
        command = RemoveFavorite(
            identity_id=identity.uid,
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id is not None else None,
        )
        removed = current_domain.process(command, asynchronous=False)
        self._load(identity)
        return removed

    def toggle(self, product, variant=None) -> bool:
        """Flip the saved state; returns True when the entry is now a favorite."""
        variant_id = variant.id if variant is not None else None
        if self.is_favorite(product.id, variant_id):
            self.remove(product.id, variant_id)
            return False
        self.add(product, variant)
        return True

    def close(self):
        self._unsubscribe()

    def _require_identity(self, action):
        identity = self._identity_provider.current_identity()
        if identity is None:
            raise AuthenticationError(f"Sign in to {action}")
        return identity

    def _load(self, identity):
        self._entries = load_favorites(identity.uid).entries() if identity is not None else []
