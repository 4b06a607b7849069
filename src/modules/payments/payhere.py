"""PayHere gateway integration.

Builds the signed form the shopper's browser posts to PayHere's hosted
checkout, and verifies the server-to-server payment notification.

Signatures (upper-case hex MD5)::

    hash   = MD5(merchant_id + order_id + amount + currency + MD5(secret))
    md5sig = MD5(merchant_id + order_id + payhere_amount + payhere_currency
                 + status_code + MD5(secret))

``order_id`` on the wire is our human-readable order number.
"""

from __future__ import annotations

import hashlib
import hmac
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from django.conf import settings

from modules.payments.exceptions import GatewayConfigurationError

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.payments.dtos import CustomerContact

SANDBOX_CHECKOUT_URL = "https://sandbox.payhere.lk/pay/checkout"
LIVE_CHECKOUT_URL = "https://www.payhere.lk/pay/checkout"

PROVIDER_NAME = "payhere"

# Notification status codes: 2 settles the payment, 0 and -2 leave it
# untouched, any other code marks it failed.
STATUS_SUCCESS = 2
NO_CHANGE_CODES = frozenset({0, -2})


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def format_amount(amount: Decimal) -> str:
    """Two decimal places, no thousands separator (``1399.00``)."""
    return str(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class PayHereGateway:
    """Signs outbound checkout forms and verifies inbound notifications."""

    def __init__(
        self,
        merchant_id: Optional[str] = None,
        secret: Optional[str] = None,
        environment: Optional[str] = None,
        notify_url: Optional[str] = None,
    ) -> None:
        self.merchant_id = (
            merchant_id if merchant_id is not None else settings.PAYHERE_MERCHANT_ID
        )
        self._secret = secret if secret is not None else settings.PAYHERE_SECRET
        self.environment = environment or settings.PAYHERE_ENVIRONMENT
        self.notify_url = notify_url or settings.PAYHERE_NOTIFY_URL

    @property
    def checkout_url(self) -> str:
        if self.environment == "production":
            return LIVE_CHECKOUT_URL
        return SANDBOX_CHECKOUT_URL

    def _require_credentials(self) -> None:
        if not self.merchant_id or not self._secret:
            raise GatewayConfigurationError(
                "PayHere merchant credentials are not configured."
            )

    def _hashed_secret(self) -> str:
        return _md5_upper(self._secret)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def sign_checkout(self, order_number: str, amount: Decimal, currency: str) -> str:
        self._require_credentials()
        return _md5_upper(
            f"{self.merchant_id}{order_number}{format_amount(amount)}"
            f"{currency}{self._hashed_secret()}"
        )

    def build_checkout_fields(
        self,
        order: Order,
        customer: CustomerContact,
        return_url: str,
        cancel_url: str,
    ) -> Dict[str, str]:
        """Form fields for the hosted checkout, including per-line items."""
        self._require_credentials()
        lines = list(order.lines.all())
        fields: Dict[str, str] = {
            "merchant_id": self.merchant_id,
            "return_url": return_url,
            "cancel_url": cancel_url,
            "notify_url": self.notify_url,
            "order_id": order.order_number,
            "items": ", ".join(line.product_title for line in lines)[:255],
            "currency": order.currency,
            "amount": format_amount(order.total),
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address,
            "city": customer.city,
            "country": customer.country,
        }
        for index, line in enumerate(lines, start=1):
            fields[f"item_number_{index}"] = line.sku
            fields[f"item_name_{index}"] = line.product_title
            fields[f"amount_{index}"] = format_amount(line.unit_price)
            fields[f"quantity_{index}"] = str(line.quantity)
        fields["hash"] = self.sign_checkout(order.order_number, order.total, order.currency)
        return fields

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def expected_notification_signature(self, data: Mapping[str, str]) -> str:
        self._require_credentials()
        return _md5_upper(
            f"{data.get('merchant_id', '')}{data.get('order_id', '')}"
            f"{data.get('payhere_amount', '')}{data.get('payhere_currency', '')}"
            f"{data.get('status_code', '')}{self._hashed_secret()}"
        )

    def verify_notification(self, data: Mapping[str, str]) -> bool:
        """Check merchant id and ``md5sig`` in constant time."""
        if str(data.get("merchant_id", "")) != str(self.merchant_id):
            return False
        received = str(data.get("md5sig", "")).upper()
        return hmac.compare_digest(received, self.expected_notification_signature(data))
