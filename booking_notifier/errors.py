"""
Exception taxonomy for the notification pipeline.

Request validation failures are raised by pydantic/FastAPI before any side
effect and are reshaped by the handler in `booking_notifier.main`.
Persistence failures never surface as exceptions: the message log store
reports them through `StoreResult` instead.
"""
from typing import Any, Dict, Optional

DEFAULT_PROVIDER_ERROR = "Failed to send WhatsApp message"


class NotificationError(Exception):
    """Base class for errors that abort a send."""


class DuplicateMessageError(NotificationError):
    """A notification was already recorded for (booking number, event type)."""

    def __init__(self, event_type: str, booking_number: str):
        super().__init__(f"Message already sent for {event_type} {booking_number}")
        self.event_type = event_type
        self.booking_number = booking_number


class ConfigurationError(NotificationError):
    """Unknown brand or unknown event/template combination."""


class CatalogError(ValueError):
    """The template catalog table is inconsistent."""


class ProviderError(NotificationError):
    """Transport failure or rejection reported by the messaging provider."""

    def __init__(
        self,
        message: str = DEFAULT_PROVIDER_ERROR,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
