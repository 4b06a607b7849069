"""Unit tests for BaseModel, exercised through the catalog Product model."""

from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from freezegun import freeze_time

from modules.catalog.models import Product

pytestmark = pytest.mark.unit


def _product(title="Loafer"):
    return Product.objects.create(title=title, price=Decimal("100.00"))


class TestBaseModel:
    def test_id_is_uuid_version_7(self):
        obj = _product()
        assert isinstance(obj.id, uuid.UUID)
        assert obj.id.version == 7

    def test_ids_are_time_ordered(self):
        a = _product("first")
        b = _product("second")
        assert str(a.id) < str(b.id)

    def test_id_is_not_editable(self):
        assert Product._meta.get_field("id").editable is False

    def test_updated_at_changes_on_save(self):
        with freeze_time("2026-03-01 10:00:00"):
            obj = _product()
        with freeze_time("2026-03-01 10:05:00"):
            obj.title = "modified"
            obj.save()
        obj.refresh_from_db()
        assert obj.updated_at - obj.created_at == timedelta(minutes=5)

    def test_save_with_update_fields_includes_updated_at(self):
        with freeze_time("2026-03-01 10:00:00"):
            obj = _product()
        with freeze_time("2026-03-01 11:00:00"):
            obj.title = "modified"
            obj.save(update_fields=["title"])
        obj.refresh_from_db()
        assert obj.updated_at - obj.created_at == timedelta(hours=1)
