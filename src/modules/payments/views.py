"""Payment gateway callback views."""

from __future__ import annotations

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.responses import error_response
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderStatusService
from modules.payments.dtos import PayHereNotificationDTO
from modules.payments.exceptions import InvalidNotification
from modules.payments.payhere import PayHereGateway
from modules.payments.services import PaymentNotificationService

logger = structlog.get_logger(__name__)


class PayHereNotifyView(APIView):
    """POST /api/v1/payments/payhere/notify/

    Server-to-server notification from PayHere (form encoded).  Invalid
    notifications are answered with 400 and change nothing.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    parser_classes = [FormParser, MultiPartParser, JSONParser]
    throttle_scope = "payment_notify"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        order_repository = OrderDjangoRepository()
        self._service = PaymentNotificationService(
            gateway=PayHereGateway(),
            order_repository=order_repository,
            status_service=OrderStatusService(order_repository=order_repository),
        )

    def post(self, request: Request) -> Response:
        data = request.data
        data = data.dict() if hasattr(data, "dict") else dict(data)
        try:
            dto = PayHereNotificationDTO(**data)
        except PydanticValidationError as exc:
            logger.warning(
                "payment.notification_malformed", error_count=exc.error_count()
            )
            return error_response(
                "validation_error",
                "Malformed payment notification.",
                status.HTTP_400_BAD_REQUEST,
                code="invalid",
            )

        try:
            outcome = self._service.handle_payhere_notification(dto)
        except InvalidNotification as exc:
            return error_response(
                "invalid_notification",
                str(exc),
                status.HTTP_400_BAD_REQUEST,
            )
        return Response(outcome.model_dump(), status=status.HTTP_200_OK)
