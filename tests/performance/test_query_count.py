"""Performance regression tests: constant query count (N+1 prevention).

Verifies that order and product reads execute a bounded number of SQL
queries regardless of how many lines, history rows or variants exist,
proving that ``select_related`` / ``prefetch_related`` are applied.
"""

from __future__ import annotations

import pytest


@pytest.fixture()
def catalog(make_product):
    return [
        make_product(
            title=f"Runner {i}",
            variants=[(f"RN{i}-{size}", str(size), "Black", 50) for size in range(38, 44)],
        )
        for i in range(3)
    ]


@pytest.fixture()
def orders_with_lines(place_order, user, catalog):
    variants = [product.variants.first() for product in catalog]
    return [place_order(user, [(v, 1) for v in variants]) for _ in range(10)]


class TestOrderListQueryCount:
    def test_list_query_count_is_constant(
        self, auth_client, orders_with_lines, django_assert_max_num_queries
    ):
        """GET /api/v1/orders/ uses COUNT + one SELECT (list has no nesting)."""
        with django_assert_max_num_queries(5):
            response = auth_client.get("/api/v1/orders/")

        assert response.status_code == 200
        assert response.data["count"] == 10


class TestOrderRetrieveQueryCount:
    def test_retrieve_query_count_is_constant(
        self, auth_client, orders_with_lines, django_assert_max_num_queries
    ):
        """GET /api/v1/orders/{id}/: order, lines and history in three queries."""
        order = orders_with_lines[0]

        with django_assert_max_num_queries(5):
            response = auth_client.get(f"/api/v1/orders/{order.order_id}/")

        assert response.status_code == 200
        assert len(response.data["lines"]) == 3


class TestProductDetailQueryCount:
    def test_retrieve_prefetches_variants(
        self, api_client, catalog, django_assert_max_num_queries
    ):
        with django_assert_max_num_queries(3):
            response = api_client.get(f"/api/v1/products/{catalog[0].id}/")

        assert response.status_code == 200
        assert len(response.data["variants"]) == 6
