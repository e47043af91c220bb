"""
Notification Service Abstract Base Class

Customer SMS about their orders. Calls are synchronous: they run inside
Celery workers, never on the request path.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from khabee.core.config import get_settings

settings = get_settings()

STATUS_MESSAGES = {
    "PENDING": "has been received by {kitchen}",
    "CONFIRMED": "was confirmed by {kitchen}",
    "COOKING": "is being cooked at {kitchen}",
    "READY": "is ready at {kitchen}",
    "OUT_FOR_DELIVERY": "is on its way from {kitchen}",
    "DELIVERED": "was delivered. Enjoy your meal from {kitchen}!",
    "CANCELLED": "was cancelled by {kitchen}",
}


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


def build_status_message(
    order_id: str,
    kitchen_name: str,
    status: str,
    total_price: float,
) -> str:
    """Customer-facing text for a status change; unknown statuses are quoted as-is."""
    template = STATUS_MESSAGES.get(status)
    if template is None:
        template = "is now " + status.replace("_", " ").lower() + " at {kitchen}"
    return (
        f"Khabee: your order #{order_id[:8]} "
        f"{template.format(kitchen=kitchen_name)} "
        f"(total {settings.currency_symbol}{total_price:.2f})"
    )


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def send_sms(self, to_phone: str, message: str) -> NotificationResult:
        """Send an SMS message."""
        pass

    def send_order_status_update(
        self,
        order_id: str,
        customer_phone: str,
        kitchen_name: str,
        status: str,
        total_price: float,
    ) -> NotificationResult:
        """Tell a customer their order changed status."""
        message = build_status_message(order_id, kitchen_name, status, total_price)
        return self.send_sms(customer_phone, message)

    @abstractmethod
    def health_check(self) -> bool:
        """Check service connectivity."""
        pass
