"""
CRUD operations for MessageLog model.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from booking_notifier.db.models import MessageLog
from typing import Optional, List

class MessageLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, brand: str, event_type: str, template_name: str, customer_phone: str, booking_number: str, status: str, whatsapp_message_id: str = None, error_message: str = None, payload: dict = None) -> MessageLog:
        message_log = MessageLog(
            brand=brand,
            event_type=event_type,
            template_name=template_name,
            customer_phone=customer_phone,
            booking_number=booking_number,
            status=status,
            whatsapp_message_id=whatsapp_message_id,
            error_message=error_message,
            payload=payload
        )
        self.db.add(message_log)
        await self.db.commit()
        await self.db.refresh(message_log)
        return message_log

    async def get_by_key(self, booking_number: str, event_type: str) -> Optional[MessageLog]:
        result = await self.db.execute(
            select(MessageLog).where(
                MessageLog.booking_number == booking_number,
                MessageLog.event_type == event_type,
            )
        )
        return result.scalar_one_or_none()

    async def update_status(self, booking_number: str, event_type: str, **kwargs) -> Optional[MessageLog]:
        message_log = await self.get_by_key(booking_number, event_type)
        if not message_log:
            return None
        for key, value in kwargs.items():
            setattr(message_log, key, value)
        await self.db.commit()
        await self.db.refresh(message_log)
        return message_log

    async def list(self, brand: str = None, event_type: str = None, status: str = None, booking_number: str = None, limit: int = 50, offset: int = 0) -> List[MessageLog]:
        stmt = select(MessageLog)
        if brand:
            stmt = stmt.where(MessageLog.brand == brand)
        if event_type:
            stmt = stmt.where(MessageLog.event_type == event_type)
        if status:
            stmt = stmt.where(MessageLog.status == status)
        if booking_number:
            stmt = stmt.where(MessageLog.booking_number == booking_number)
        stmt = stmt.order_by(MessageLog.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
