"""Payments URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.payments.views import PayHereNotifyView

urlpatterns = [
    path(
        "payments/payhere/notify/",
        PayHereNotifyView.as_view(),
        name="payhere-notify",
    ),
]
