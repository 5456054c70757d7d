import os
import threading
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Select the config overlay before any domain module is imported, so the
    storefront domain is constructed with the right settings.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


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
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed():
    from protean.integrations.pytest import DomainFixture
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run every test inside the domain context; stores are reset afterwards."""
    with storefront_bed.domain_context():
        yield


def build_product(
    sku="TEE-001",
    name="Classic Tee",
    base_price=25.0,
    sale_price=None,
    category="men-shirts",
    brand="Acme",
    **details,
):
    from storefront.product.product import Product

    product = Product.create(
        sku=sku,
        name=name,
        description="Heavyweight cotton t-shirt with a relaxed fit.",
        category=category,
        brand=brand,
        base_price=base_price,
        sale_price=sale_price,
        **details,
    )
    product.add_variant(
        "Black",
        color_code="#000000",
        sizes=[
            {"size": "S", "stock": 5},
            {"size": "M", "stock": 10},
            {"size": "L", "stock": 0, "price_adjustment": 2.0},
        ],
    )
    product.add_variant("White", sizes=[{"size": "M", "stock": 3}])
    return product


@pytest.fixture()
def make_product():
    """Factory for unsaved products; keyword arguments override the defaults.

    Every product carries Black (S=5, M=10, L=0 at +2.00) and White (M=3).
    """
    return build_product


@pytest.fixture()
def race(storefront_bed, monkeypatch):
    """Process commands on parallel threads that meet inside ``cls.method_name``.

    Each thread waits at a barrier right after its first call to the gated
    method, so every writer has loaded and changed the same version before
    any of them commits. Returns each command's result, or the exception it
    raised, in command order.
    """
    from protean.utils.globals import current_domain

    def _race(cls, method_name, *commands):
        barrier = threading.Barrier(len(commands), timeout=10)
        original = getattr(cls, method_name)
        gated_threads = set()

        def gated(self, *args, **kwargs):
            result = original(self, *args, **kwargs)
            if threading.get_ident() not in gated_threads:
                gated_threads.add(threading.get_ident())
                barrier.wait()
            return result

        monkeypatch.setattr(cls, method_name, gated)
        outcomes = [None] * len(commands)

        def run(index, command):
            with storefront_bed.domain.domain_context():
                try:
                    outcomes[index] = current_domain.process(command, asynchronous=False)
                except Exception as exc:
                    outcomes[index] = exc

        threads = [threading.Thread(target=run, args=(index, command)) for index, command in enumerate(commands)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        monkeypatch.setattr(cls, method_name, original)
        return outcomes

    return _race
