"""Order routes: shopper history, staff transitions and payment status."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.orders.views import OrderViewSet

app_router = DefaultRouter(trailing_slash=True)
app_router.register("orders", OrderViewSet, basename="order")

urlpatterns = app_router.urls
