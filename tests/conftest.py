import os
from pathlib import Path

import pytest

# Test layer directory -> marker. Order matters: bdd/ sits beside integration/.
LAYER_MARKERS = (
    ("domain", pytest.mark.domain),
    ("application", pytest.mark.application),
    ("bdd", pytest.mark.bdd),
    ("integration", pytest.mark.integration),
)


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="domain.toml environment the storefront is initialised with",
    )


def pytest_sessionstart(session):
    """Initialise the storefront once and leave its domain context pushed."""
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in LAYER_MARKERS:
            if directory in parts:
                item.add_marker(marker)
                break

        if "integration" in parts and not item.get_closest_marker("fast"):
            item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def storefront_tables():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)
    yield
    drop_db(storefront)


@pytest.fixture(autouse=True)
def fresh_storefront():
    """Every test starts with empty stores and the fixed coupon table."""
    yield

    from protean import current_domain

    from storefront.coupon import reset_coupon_source

    for provider in current_domain.providers.values():
        provider._data_reset()
    current_domain.event_store.store._data_reset()
    reset_coupon_source()
