import os
import sys
import asyncio

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.test_sqlite.db")
os.environ.setdefault("SUITORGUY_PHONE_NUMBER_ID", "111111111111111")
os.environ.setdefault("SUITORGUY_ACCESS_TOKEN", "suitorguy-test-token")
os.environ.setdefault("SUITORGUY_BUSINESS_PHONE", "8943300097")
os.environ.setdefault("ZORUCCI_PHONE_NUMBER_ID", "222222222222222")
os.environ.setdefault("ZORUCCI_ACCESS_TOKEN", "zorucci-test-token")
os.environ.setdefault("ZORUCCI_BUSINESS_PHONE", "9000000000")
os.environ.pop("SLACK_WEBHOOK_URL", None)

# Ensure repository root is on sys.path for imports when running tests here
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest
import pytest_asyncio

from booking_notifier.config import Settings
from booking_notifier.db.message_log_store import StoreOutcome, StoreResult
from booking_notifier.errors import ProviderError
from booking_notifier.integrations.whatsapp_api import SendResult
from booking_notifier.registry.brands import Brand, build_brand_registry


class FakeResp:
    """Minimal aiohttp response stand-in."""

    def __init__(self, status=200, json_payload=None, json_error=None):
        self.status = status
        self._json = json_payload if json_payload is not None else {}
        self._json_error = json_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        if self._json_error is not None:
            raise self._json_error
        return self._json


class FakeSession:
    """Minimal aiohttp.ClientSession stand-in that records requests."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResp(json_payload={"messages": [{"id": "wamid.TEST"}]})
        self.error = error
        self.calls = []

    def __call__(self):
        # Used as the client's session_factory
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def _request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)


class FakeRecord:
    def __init__(self, **fields):
        self.__dict__.update(fields)


class FakeLogStore:
    """In-memory message log honouring the (booking_number, event_type) uniqueness."""

    def __init__(self, available=True):
        self.available = available
        self.records = {}

    async def _guard(self):
        await asyncio.sleep(0)
        if not self.available:
            return StoreResult(StoreOutcome.SKIPPED_STORE_UNAVAILABLE, error="store down")
        return None

    async def find(self, booking_number, event_type):
        skipped = await self._guard()
        if skipped:
            return skipped
        record = self.records.get((booking_number, event_type))
        if record is None:
            return StoreResult(StoreOutcome.NOT_FOUND)
        return StoreResult(StoreOutcome.FOUND, record=record)

    async def claim(self, brand, event_type, template_name, customer_phone, booking_number, payload):
        return await self.create(
            brand=brand,
            event_type=event_type,
            template_name=template_name,
            customer_phone=customer_phone,
            booking_number=booking_number,
            status="pending",
            payload=payload,
        )

    async def create(self, **fields):
        skipped = await self._guard()
        if skipped:
            return skipped
        key = (fields["booking_number"], fields["event_type"])
        if key in self.records:
            return StoreResult(StoreOutcome.CONFLICT)
        fields.setdefault("whatsapp_message_id", None)
        fields.setdefault("error_message", None)
        record = FakeRecord(**fields)
        self.records[key] = record
        return StoreResult(StoreOutcome.WRITTEN, record=record)

    async def mark(self, booking_number, event_type, status, whatsapp_message_id=None, error_message=None):
        skipped = await self._guard()
        if skipped:
            return skipped
        record = self.records.get((booking_number, event_type))
        if record is None:
            return StoreResult(StoreOutcome.NOT_FOUND)
        record.status = status
        record.whatsapp_message_id = whatsapp_message_id
        record.error_message = error_message
        return StoreResult(StoreOutcome.WRITTEN, record=record)


class FakeWhatsAppClient:
    """Records sends; set `template_error` / `document_error` to simulate provider failures."""

    def __init__(self, template_error=None, document_error=None):
        self.template_error = template_error
        self.document_error = document_error
        self.templates = []
        self.documents = []

    async def send_template(self, brand_key, template_name, to, values, document_url=None):
        await asyncio.sleep(0)
        self.templates.append({
            "brand": brand_key,
            "template": template_name,
            "to": to,
            "values": list(values),
            "document_url": document_url,
        })
        if self.template_error is not None:
            raise self.template_error
        return SendResult(message_id=f"wamid.{len(self.templates)}")

    async def send_document(self, brand_key, to, link, caption=None, filename=None):
        self.documents.append({"brand": brand_key, "to": to, "link": link, "caption": caption, "filename": filename})
        if self.document_error is not None:
            raise self.document_error
        return SendResult(message_id=f"wamid.doc.{len(self.documents)}")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def brands(settings):
    return build_brand_registry(settings)


@pytest.fixture
def suitorguy():
    return Brand(key="suitorguy", display_name="SuitorGuy", phone_number_id="1", access_token="t", business_phone="8943300097")


@pytest.fixture
def fake_store():
    return FakeLogStore()


@pytest.fixture
def fake_client():
    return FakeWhatsAppClient()


@pytest.fixture
def provider_error():
    return ProviderError("(#132000) Number of parameters does not match the expected number of params")


@pytest_asyncio.fixture
async def db_engine():
    from booking_notifier.db.session import engine, Base
    from booking_notifier.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    # Connections must not outlive the test's event loop
    await engine.dispose()
