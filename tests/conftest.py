import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_configure(config):
    """Select the config overlay before the domain is initialized."""
    os.environ["PROTEAN_ENV"] = config.getoption("--env")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Client-side collaborators
# ---------------------------------------------------------------------------
class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def settings():
    from storefront.config import Settings

    return Settings()


@pytest.fixture()
def storage():
    from storefront.client.storage import MemoryStorage

    return MemoryStorage()


@pytest.fixture()
def identity_provider():
    from passlib.context import CryptContext
    from storefront.client.identity import InMemoryIdentityProvider

    provider = InMemoryIdentityProvider(CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))
    provider.register(
        "ana@example.com",
        "secret-pass",
        uid="user-1",
        first_name="Ana",
        last_name="López",
        phone="5550001111",
        metro_station="Popotla",
    )
    provider.register("luis@example.com", "other-pass", uid="user-2", first_name="Luis")
    return provider


@pytest.fixture()
def session(identity_provider, storage, settings, clock):
    from storefront.cart.session import CartSession

    cart_session = CartSession(identity_provider, storage, settings=settings, clock=clock)
    yield cart_session
    cart_session._unsubscribe()


@pytest.fixture()
def make_product():
    """Persist a product and return it."""
    from protean import current_domain
    from storefront.catalogue.product import Product

    def _make(product_id="p1", name="Vestido Lino", price=100.0, sizes=None, variants=None, images=None):
        product = Product.create(
            name=name,
            price=price,
            product_id=product_id,
            images=images or [f"https://cdn.example.com/{product_id}.jpg"],
            sizes=sizes if sizes is not None else {"L": 2},
        )
        for variant in variants or []:
            product.add_variant(**variant)
        current_domain.repository_for(Product).add(product)
        return current_domain.repository_for(Product).get(product_id)

    return _make
