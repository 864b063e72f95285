import pytest
from protean.integrations.pytest import DomainFixture


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


@pytest.fixture()
def make_product():
    """Register a catalogue product through its command and return the id."""
    import json

    from protean import current_domain

    from storefront.product.management import RegisterProduct

    def _make(name="Organic Apples", price=4.99, stock=10, discount=0.0, status="active", variants=None):
        return current_domain.process(
            RegisterProduct(
                name=name,
                price=price,
                stock=stock,
                discount=discount,
                status=status,
                image_url=f"https://cdn.freshcart.test/{name.lower().replace(' ', '-')}.jpg",
                variants=json.dumps(variants or []),
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": "555-0100",
        "street": "12 Market St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "United States",
    }
