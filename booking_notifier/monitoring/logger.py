# booking_notifier/monitoring/logger.py
"""
Structured JSON logger for the booking notification backend.
"""
import logging
import json
from datetime import datetime, timezone

from booking_notifier.config import settings

def get_request_context():
    # Import lazily to avoid import cycles
    from booking_notifier.monitoring.context import get_request_context as _g
    return _g()

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": getattr(record, "component", None) or record.module,
            "request_id": getattr(record, "request_id", None),
            "brand": getattr(record, "brand", None),
            "booking_number": getattr(record, "booking_number", None),
        }
        details = getattr(record, "details", None)
        if details:
            log_record["details"] = details
        return json.dumps(log_record, default=str)

logger = logging.getLogger("booking_notifier")
logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
handler = logging.StreamHandler()
handler.setFormatter(JsonFormatter())
logger.handlers = [handler]

# Helper to log with context
def log(level: str, message: str, component: str = None, request_id: str = None, brand: str = None, booking_number: str = None, **kwargs):
    # Map legacy 'module' kwarg to 'component' to avoid LogRecord collision
    if "module" in kwargs and not component:
        component = kwargs.pop("module")
    # Fill missing fields from contextvars
    ctx = get_request_context()
    if request_id is None:
        request_id = ctx.get("request_id")
    if brand is None:
        brand = ctx.get("brand")
    if booking_number is None:
        booking_number = ctx.get("booking_number")

    extra = {
        "request_id": request_id,
        "brand": brand,
        "booking_number": booking_number,
        "component": component,
        **kwargs
    }
    logger.log(getattr(logging, level.upper(), logging.INFO), message, extra=extra)
