"""Integration tests for the message log store using aiosqlite."""
import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from booking_notifier.core.message_service import MessageService
from booking_notifier.db.message_log_store import MessageLogStore, StoreOutcome
from booking_notifier.db.repositories.message_log_repository import MessageLogRepository
from booking_notifier.db.session import SessionLocal
from booking_notifier.registry.templates import DEFAULT_CATALOG


def claim_args(booking_number="BK100", event_type="booking"):
    return {
        "brand": "suitorguy",
        "event_type": event_type,
        "template_name": "booking_summary_nodisc",
        "customer_phone": "918590292642",
        "booking_number": booking_number,
        "payload": {"booking_number": booking_number},
    }


@pytest.mark.asyncio
async def test_claim_writes_pending_record(db_engine):
    store = MessageLogStore(SessionLocal)

    result = await store.claim(**claim_args())

    assert result.written
    assert result.record.status == "pending"
    found = await store.find("BK100", "booking")
    assert found.outcome == StoreOutcome.FOUND
    assert found.record.payload == {"booking_number": "BK100"}


@pytest.mark.asyncio
async def test_second_claim_conflicts(db_engine):
    store = MessageLogStore(SessionLocal)
    await store.claim(**claim_args())

    again = await store.claim(**claim_args())

    assert again.outcome == StoreOutcome.CONFLICT
    assert again.store_available
    async with SessionLocal() as db:
        assert len(await MessageLogRepository(db).list(booking_number="BK100")) == 1


@pytest.mark.asyncio
async def test_claim_for_other_event_type_is_independent(db_engine):
    store = MessageLogStore(SessionLocal)
    await store.claim(**claim_args())

    result = await store.claim(**claim_args(event_type="rentout"))

    assert result.written


@pytest.mark.asyncio
async def test_mark_updates_status(db_engine):
    store = MessageLogStore(SessionLocal)
    await store.claim(**claim_args())

    marked = await store.mark("BK100", "booking", "sent", whatsapp_message_id="wamid.XYZ")

    assert marked.written
    found = await store.find("BK100", "booking")
    assert found.record.status == "sent"
    assert found.record.whatsapp_message_id == "wamid.XYZ"


@pytest.mark.asyncio
async def test_mark_and_find_missing_record(db_engine):
    store = MessageLogStore(SessionLocal)

    assert (await store.find("NOPE", "booking")).outcome == StoreOutcome.NOT_FOUND
    assert (await store.mark("NOPE", "booking", "failed")).outcome == StoreOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_list_filters_and_orders_newest_first(db_engine):
    store = MessageLogStore(SessionLocal)
    for number in ("A1", "A2", "A3"):
        await store.claim(**claim_args(booking_number=number))
    await store.mark("A2", "booking", "failed", error_message="boom")

    async with SessionLocal() as db:
        repo = MessageLogRepository(db)
        everything = await repo.list()
        failed = await repo.list(status="failed")

    assert [r.booking_number for r in everything] == ["A3", "A2", "A1"]
    assert [r.booking_number for r in failed] == ["A2"]
    assert failed[0].to_dict()["error_message"] == "boom"


@pytest.mark.asyncio
async def test_unreachable_database_is_skipped_not_raised():
    engine = create_async_engine("sqlite+aiosqlite:////nonexistent-dir/notifications.db")
    factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    store = MessageLogStore(factory)
    try:
        claim = await store.claim(**claim_args())
        found = await store.find("BK100", "booking")
        marked = await store.mark("BK100", "booking", "sent")
    finally:
        await engine.dispose()

    for result in (claim, found, marked):
        assert result.outcome == StoreOutcome.SKIPPED_STORE_UNAVAILABLE
        assert not result.store_available
        assert result.error


class TimeoutSession:
    """Session context that fails on entry like a pool connect timeout."""

    async def __aenter__(self):
        raise asyncio.TimeoutError()

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.mark.asyncio
async def test_non_sqlalchemy_store_error_is_skipped_not_raised():
    store = MessageLogStore(TimeoutSession)

    claim = await store.claim(**claim_args())
    created = await store.create(status="sent", **claim_args())
    found = await store.find("BK100", "booking")
    marked = await store.mark("BK100", "booking", "sent")

    for result in (claim, created, found, marked):
        assert result.outcome == StoreOutcome.SKIPPED_STORE_UNAVAILABLE


@pytest.mark.asyncio
async def test_send_goes_ahead_when_store_times_out(brands, fake_client):
    service = MessageService(brands, DEFAULT_CATALOG, fake_client, MessageLogStore(TimeoutSession))

    outcome = await service.send_message({
        "brand": "suitorguy",
        "event_type": "booking",
        "template_type": "nodisc",
        "customer_name": "ASHWIN TOM",
        "customer_phone": "918590292642",
        "booking_number": "BK100",
    })

    assert outcome.message_id == "wamid.1"
    assert outcome.log_outcome == StoreOutcome.SKIPPED_STORE_UNAVAILABLE
