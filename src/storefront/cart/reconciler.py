"""Cart reconciler: moves a guest cart into the customer's cart at sign-in."""

import structlog

from storefront.cart.lines import lines_from_documents
from storefront.cart.persistence import CustomerCartStore
from storefront.config import GUEST_CART_KEY

logger = structlog.get_logger(__name__)


def merge(guest_lines, remote_lines):
    """Combine two carts by size key, summing quantities of shared keys.

    Remote lines keep their position; guest-only lines are appended in order.
    """
    merged = {line.size: line for line in remote_lines}
    for guest_line in guest_lines:
        existing = merged.get(guest_line.size)
        if existing is not None:
            merged[guest_line.size] = existing.with_quantity(existing.quantity + guest_line.quantity)
        else:
            merged[guest_line.size] = guest_line
    return list(merged.values())


class CartReconciler:
    def __init__(self, storage, cart_store=None):
        self._storage = storage
        self._cart_store = cart_store or CustomerCartStore()

    def reconcile(self, identity_id):
        """Return the customer's cart after folding in any guest cart.

        The guest copy is removed before the merged cart is written: if the
        write fails, the guest lines are lost rather than applied twice.
        """
        guest_lines = lines_from_documents(self._storage.get(GUEST_CART_KEY))
        if not guest_lines:
            return self._cart_store.load(identity_id)

        self._storage.delete(GUEST_CART_KEY)

        remote_lines = self._cart_store.load(identity_id)
        merged = merge(guest_lines, remote_lines)
        self._cart_store.save(identity_id, merged, merged=True)

        logger.info(
            "Guest cart merged",
            identity_id=str(identity_id),
            guest_lines=len(guest_lines),
            remote_lines=len(remote_lines),
            merged_lines=len(merged),
        )
        return merged
