# booking_notifier/db/models.py
"""
SQLAlchemy models for the WhatsApp message log.
"""
from sqlalchemy import Column, String, DateTime, JSON, Text, Uuid, UniqueConstraint
from uuid import uuid4
from datetime import datetime, timezone
from booking_notifier.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageLog(Base):
    __tablename__ = "message_logs"
    # At most one notification per booking number and event type
    __table_args__ = (
        UniqueConstraint("booking_number", "event_type", name="uq_message_logs_booking_event"),
    )
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    brand = Column(String, nullable=False)
    event_type = Column(String, nullable=False)
    template_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    booking_number = Column(String, nullable=False, index=True)
    whatsapp_message_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="sent")
    error_message = Column(Text, nullable=True)
    payload = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "brand": self.brand,
            "event_type": self.event_type,
            "template_name": self.template_name,
            "customer_phone": self.customer_phone,
            "booking_number": self.booking_number,
            "whatsapp_message_id": self.whatsapp_message_id,
            "status": self.status,
            "error_message": self.error_message,
            "payload": self.payload,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
