"""booking_notifier/api/admin/monitoring.py
Admin endpoints for browsing the WhatsApp message log.
"""
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND, HTTP_503_SERVICE_UNAVAILABLE

from booking_notifier.db.session import get_async_session
from booking_notifier.db.message_log_store import StoreOutcome
from booking_notifier.db.repositories.message_log_repository import MessageLogRepository

router = APIRouter(prefix="/admin", tags=["admin", "monitoring"])


@router.get("/messages")
async def list_messages(
    brand: Optional[str] = Query(None),
    event_type: Optional[str] = Query(None, description="booking or rentout"),
    status: Optional[Literal["pending", "sent", "failed", "delivered", "read"]] = Query(None),
    booking_number: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
):
    """Return message log records, newest first."""
    repo = MessageLogRepository(db)
    records = await repo.list(
        brand=brand,
        event_type=event_type,
        status=status,
        booking_number=booking_number,
        limit=limit,
        offset=offset,
    )
    return {"status": "success", "count": len(records), "data": [r.to_dict() for r in records]}


@router.get("/messages/{event_type}/{booking_number}")
async def get_message(event_type: str, booking_number: str, request: Request):
    """Return the log record holding the duplicate-guard key, if any.

    A `failed` record still blocks a resend for the same key.
    """
    result = await request.app.state.message_log_store.find(booking_number, event_type)
    if result.outcome == StoreOutcome.NOT_FOUND:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Message not found")
    if not result.store_available:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Message log unavailable")
    return {"status": "success", "data": result.record.to_dict()}
