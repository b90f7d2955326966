"""Identity provider seam.

The cart core only needs to know whether someone is signed in, their stable
id, and when that changes. ``InMemoryIdentityProvider`` is a self-contained
provider for development and tests.
"""

from abc import ABC, abstractmethod
from uuid import uuid4

import structlog
from passlib.context import CryptContext
from protean.fields import String

from storefront.domain import storefront
from storefront.exceptions import AuthenticationError

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@storefront.value_object
class Identity:
    uid = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    phone = String(max_length=30)
    metro_station = String(max_length=100)

    @property
    def full_name(self):
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class IdentityProvider(ABC):
    def __init__(self):
        self._listeners = []

    @abstractmethod
    def current_identity(self) -> Identity | None: ...

    @abstractmethod
    def sign_in(self, email, password) -> Identity: ...

    @abstractmethod
    def sign_out(self) -> None: ...

    def subscribe(self, listener):
        """Call ``listener(identity_or_none)`` on every sign-in and sign-out."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, identity):
        for listener in list(self._listeners):
            listener(identity)


class InMemoryIdentityProvider(IdentityProvider):
    def __init__(self, password_context=None):
        super().__init__()
        self._password_context = password_context or pwd_context
        self._accounts = {}  # email -> (identity, password hash)
        self._current = None

    def register(self, email, password, uid=None, **profile) -> Identity:
        identity = Identity(uid=uid or str(uuid4()), email=email.lower(), **profile)
        self._accounts[identity.email] = (identity, self._password_context.hash(password))
        return identity

    def current_identity(self):
        return self._current

    def sign_in(self, email, password):
        account = self._accounts.get((email or "").lower())
        if account is None or not self._password_context.verify(password, account[1]):
            raise AuthenticationError("Invalid email or password")

        if self._current is not None:
            self.sign_out()

        self._current = account[0]
        logger.info("Signed in", identity_id=self._current.uid)
        self._notify(self._current)
        return self._current

    def sign_out(self):
        if self._current is None:
            return
        logger.info("Signed out", identity_id=self._current.uid)
        self._current = None
        self._notify(None)
