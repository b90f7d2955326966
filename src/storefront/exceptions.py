"""Storefront error taxonomy.

Every cart, stock and order operation raises one of these on failure. The
HTTP layer and the UI are the only places expected to catch and render them.
"""


class StorefrontError(Exception):
    """Base class for all storefront errors."""


class NotFoundError(StorefrontError):
    """A referenced product, order, cart or identity record does not exist."""


class InsufficientStockError(StorefrontError):
    """A reservation or quantity increase would exceed available stock."""

    def __init__(self, remaining: int, message: str | None = None):
        self.remaining = remaining
        super().__init__(message or f"Not enough stock available. Only {remaining} units left.")


class OutOfStockError(StorefrontError):
    """Available stock is zero at the time of an add attempt."""

    def __init__(self, message: str = "The product is out of stock"):
        super().__init__(message)


class InvalidQuantityError(StorefrontError):
    """A quantity that must be positive was not."""


class InvalidPromoError(StorefrontError):
    """No active promotion matches the given code."""


class PromoExhaustedError(StorefrontError):
    """The promotion has reached its usage limit."""


class MalformedSizeKeyError(StorefrontError, ValueError):
    """A size key string cannot be decomposed into its parts."""


class MalformedCartItemError(StorefrontError):
    """A cart line cannot be resolved to an inventory slot."""

    def __init__(self, item_name: str, reason: str | None = None):
        self.item_name = item_name
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid cart item '{item_name}'{detail}")


class TransactionAbortError(StorefrontError):
    """The order placement unit failed; none of its writes are visible."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"Order placement failed while trying to {step}: {cause}")


class EmptyCartError(StorefrontError):
    """An order cannot be placed for an empty cart."""


class ConcurrentCartEditError(StorefrontError):
    """Another mutating operation on the same cart line is still in flight."""


class StockContentionError(StorefrontError):
    """A stock slot kept changing underneath a conditional write."""


class StockRestoreError(StorefrontError):
    """One or more cart lines could not be returned to stock."""

    def __init__(self, failures: list[tuple[str, Exception]]):
        self.failures = failures
        keys = ", ".join(key for key, _ in failures)
        super().__init__(f"Could not restore stock for: {keys}")


class AuthenticationError(StorefrontError):
    """Sign-in was refused by the identity provider."""
