"""
Best-effort access to the message log.

The log doubles as the duplicate guard, but it is an audit trail, not a
gate on delivery: when the database is unreachable every operation reports
`SKIPPED_STORE_UNAVAILABLE` and the caller carries on without duplicate
protection or audit record. No store exception leaves this module.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError

from booking_notifier.db.models import MessageLog
from booking_notifier.db.repositories.message_log_repository import MessageLogRepository
from booking_notifier.monitoring.logger import log


class StoreOutcome(str, Enum):
    WRITTEN = "written"
    FOUND = "found"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SKIPPED_STORE_UNAVAILABLE = "skipped_store_unavailable"


@dataclass
class StoreResult:
    outcome: StoreOutcome
    record: Optional[MessageLog] = None
    error: Optional[str] = None

    @property
    def written(self) -> bool:
        return self.outcome == StoreOutcome.WRITTEN

    @property
    def store_available(self) -> bool:
        return self.outcome != StoreOutcome.SKIPPED_STORE_UNAVAILABLE


class MessageLogStore:
    def __init__(self, session_factory: Callable[[], Any]):
        self.session_factory = session_factory

    async def find(self, booking_number: str, event_type: str) -> StoreResult:
        try:
            async with self.session_factory() as db:
                record = await MessageLogRepository(db).get_by_key(booking_number, event_type)
        except Exception as exc:
            return self._unavailable("find", exc)
        if record is None:
            return StoreResult(StoreOutcome.NOT_FOUND)
        return StoreResult(StoreOutcome.FOUND, record=record)

    async def claim(self, brand: str, event_type: str, template_name: str, customer_phone: str, booking_number: str, payload: Dict[str, Any]) -> StoreResult:
        """Insert a `pending` record; the unique (booking_number, event_type)
        constraint turns a concurrent or repeated claim into CONFLICT."""
        return await self.create(
            brand=brand,
            event_type=event_type,
            template_name=template_name,
            customer_phone=customer_phone,
            booking_number=booking_number,
            status="pending",
            payload=payload,
        )

    async def create(self, **fields) -> StoreResult:
        try:
            async with self.session_factory() as db:
                try:
                    record = await MessageLogRepository(db).create(**fields)
                except IntegrityError:
                    await db.rollback()
                    log("WARNING", f"Message log already exists for {fields.get('event_type')} {fields.get('booking_number')}", module="message_log")
                    return StoreResult(StoreOutcome.CONFLICT)
        except Exception as exc:
            return self._unavailable("create", exc)
        return StoreResult(StoreOutcome.WRITTEN, record=record)

    async def mark(self, booking_number: str, event_type: str, status: str, whatsapp_message_id: Optional[str] = None, error_message: Optional[str] = None) -> StoreResult:
        try:
            async with self.session_factory() as db:
                record = await MessageLogRepository(db).update_status(
                    booking_number,
                    event_type,
                    status=status,
                    whatsapp_message_id=whatsapp_message_id,
                    error_message=error_message,
                )
        except Exception as exc:
            return self._unavailable("mark", exc)
        if record is None:
            return StoreResult(StoreOutcome.NOT_FOUND)
        return StoreResult(StoreOutcome.WRITTEN, record=record)

    @staticmethod
    def _unavailable(operation: str, exc: Exception) -> StoreResult:
        log("ERROR", f"Message log {operation} skipped, store unavailable: {exc}", module="message_log")
        return StoreResult(StoreOutcome.SKIPPED_STORE_UNAVAILABLE, error=str(exc))
