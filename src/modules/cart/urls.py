"""Cart URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.cart.views import CartViewSet

cart_detail = CartViewSet.as_view({"get": "retrieve", "delete": "destroy"})
cart_lines = CartViewSet.as_view({"post": "add_line"})
cart_line_detail = CartViewSet.as_view(
    {"patch": "set_quantity", "delete": "remove_line"}
)
cart_validate = CartViewSet.as_view({"post": "validate"})

urlpatterns = [
    path("cart/", cart_detail, name="cart-detail"),
    path("cart/lines/", cart_lines, name="cart-lines"),
    path("cart/lines/<str:variant_id>/", cart_line_detail, name="cart-line-detail"),
    path("cart/validate/", cart_validate, name="cart-validate"),
]
