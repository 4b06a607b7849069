from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Product, ProductVariant
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.orders.dtos import AddressDTO, OrderLineDTO, PlaceOrderDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderPlacementService

User = get_user_model()

ADDRESS = {
    "first_name": "Nimal",
    "last_name": "Perera",
    "email": "nimal@example.com",
    "phone": "0771234567",
    "line1": "12 Galle Road",
    "line2": "",
    "city": "Colombo",
    "postal_code": "00300",
    "country": "Sri Lanka",
}


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def user():
    return User.objects.create_user(username="shopper", password="testpass123")


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="othershopper", password="testpass123")


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="storeadmin", password="testpass123", is_staff=True
    )


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated shopper."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture()
def address():
    return dict(ADDRESS)


@pytest.fixture()
def make_product():
    """Factory: ``make_product(variants=[(sku, size, color, stock), ...])``."""

    def _make(title="Trail Runner", price="1000.00", variants=None, is_active=True):
        product = Product.objects.create(
            title=title, price=Decimal(price), is_active=is_active
        )
        for sku, size, color, stock in variants or [(f"{title[:3]}-STD", "", "", 10)]:
            ProductVariant.objects.create(
                product=product, sku=sku, size=size, color=color, stock=stock
            )
        return product

    return _make


@pytest.fixture()
def variant(make_product):
    """A stock-only variant priced 1000.00 with 10 units."""
    product = make_product(variants=[("RUN-STD", "", "", 10)])
    return product.variants.get()


@pytest.fixture()
def placement_service():
    return OrderPlacementService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def place_order(placement_service, settings):
    """Factory placing an order directly through the placement transaction.

    ``items`` is a list of ``(variant, quantity)`` pairs; prices come from
    the variants.
    """

    def _place(user, items, payment_method="bank", shipping_method="standard"):
        lines = [
            OrderLineDTO(variant_id=v.id, quantity=qty, unit_price=v.unit_price)
            for v, qty in items
        ]
        shipping = settings.SHIPPING_RATES[shipping_method]
        subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
        dto = PlaceOrderDTO(
            lines=lines,
            payment_method=payment_method,
            shipping_method=shipping_method,
            shipping_cost=shipping,
            total=subtotal + shipping,
            currency=settings.STORE_CURRENCY,
            shipping_address=AddressDTO(**ADDRESS),
        )
        return placement_service.place_order(user, dto)

    return _place
