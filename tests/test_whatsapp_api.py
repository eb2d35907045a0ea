"""Unit tests for booking_notifier.integrations.whatsapp_api.WhatsAppClient

A fake aiohttp-like session is injected so the request shape and error
handling can be checked without network access.
"""
import asyncio

import aiohttp
import pytest

from booking_notifier.errors import ConfigurationError, ProviderError
from booking_notifier.integrations.whatsapp_api import (
    WhatsAppClient,
    build_document_payload,
    build_template_payload,
)

from conftest import FakeResp, FakeSession

API = "https://graph.facebook.com/v18.0"


def make_client(brands, session):
    return WhatsAppClient(API, brands, language_code="en", session_factory=session)


def test_template_payload_without_document():
    payload = build_template_payload("918590292642", "booking_summary_nodisc", ["A", 5000, ""])
    assert payload == {
        "messaging_product": "whatsapp",
        "to": "918590292642",
        "type": "template",
        "template": {
            "name": "booking_summary_nodisc",
            "language": {"code": "en"},
            "components": [
                {
                    "type": "body",
                    "parameters": [
                        {"type": "text", "text": "A"},
                        {"type": "text", "text": "5000"},
                        {"type": "text", "text": ""},
                    ],
                }
            ],
        },
    }


def test_template_payload_with_document_header_comes_first():
    payload = build_template_payload("91", "pdf_test_template", [], document_url="https://x.test/a.pdf")
    components = payload["template"]["components"]
    assert components[0] == {
        "type": "header",
        "parameters": [{"type": "document", "document": {"link": "https://x.test/a.pdf"}}],
    }
    assert components[1] == {"type": "body", "parameters": []}


def test_document_payload():
    payload = build_document_payload("91", "https://x.test/a.pdf", "Invoice for BK1", "BK1_invoice.pdf")
    assert payload["type"] == "document"
    assert payload["document"] == {
        "link": "https://x.test/a.pdf",
        "caption": "Invoice for BK1",
        "filename": "BK1_invoice.pdf",
    }


@pytest.mark.asyncio
async def test_send_template_posts_to_brand_number(brands):
    session = FakeSession(FakeResp(json_payload={"messages": [{"id": "wamid.ABC"}]}))
    client = make_client(brands, session)

    result = await client.send_template("zorucci", "rentout_summary_nodisc", "918590292642", ["x", "y"])

    assert result.message_id == "wamid.ABC"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == f"{API}/222222222222222/messages"
    assert call["headers"]["Authorization"] == "Bearer zorucci-test-token"
    assert call["json"]["template"]["components"][0]["parameters"] == [
        {"type": "text", "text": "x"},
        {"type": "text", "text": "y"},
    ]


@pytest.mark.asyncio
async def test_send_document(brands):
    session = FakeSession(FakeResp(json_payload={"messages": [{"id": "wamid.DOC"}]}))
    client = make_client(brands, session)

    result = await client.send_document("suitorguy", "91", "https://x.test/a.pdf", "cap", "f.pdf")

    assert result.message_id == "wamid.DOC"
    assert session.calls[0]["json"]["document"]["filename"] == "f.pdf"


@pytest.mark.asyncio
async def test_unknown_brand_fails_before_any_request(brands):
    session = FakeSession()
    client = make_client(brands, session)

    with pytest.raises(ConfigurationError, match="Invalid brand: acme"):
        await client.send_template("acme", "t", "91", [])
    assert session.calls == []


@pytest.mark.asyncio
async def test_provider_error_message_is_passed_through(brands):
    error_body = {"error": {"message": "Invalid OAuth access token.", "type": "OAuthException", "code": 190}}
    client = make_client(brands, FakeSession(FakeResp(status=401, json_payload=error_body)))

    with pytest.raises(ProviderError) as excinfo:
        await client.send_template("suitorguy", "t", "91", [])
    assert str(excinfo.value) == "Invalid OAuth access token."
    assert excinfo.value.code == "190"


@pytest.mark.asyncio
async def test_provider_error_without_body_uses_generic_message(brands):
    client = make_client(brands, FakeSession(FakeResp(status=500, json_error=ValueError("not json"))))

    with pytest.raises(ProviderError, match="Failed to send WhatsApp message"):
        await client.send_template("suitorguy", "t", "91", [])


@pytest.mark.asyncio
async def test_transport_error_is_normalized(brands):
    client = make_client(brands, FakeSession(error=aiohttp.ClientConnectionError("connection refused")))

    with pytest.raises(ProviderError, match="Failed to send WhatsApp message") as excinfo:
        await client.send_document("suitorguy", "91", "https://x.test/a.pdf")
    assert excinfo.value.code == "HTTP_ERROR"


@pytest.mark.asyncio
async def test_timeout_is_normalized(brands):
    client = make_client(brands, FakeSession(error=asyncio.TimeoutError()))

    with pytest.raises(ProviderError):
        await client.send_template("suitorguy", "t", "91", [])


@pytest.mark.asyncio
async def test_list_templates_passes_filters(brands):
    listing = {"data": [{"name": "booking_summary_nodisc", "status": "APPROVED", "components": []}]}
    session = FakeSession(FakeResp(json_payload=listing))
    client = make_client(brands, session)

    templates = await client.list_templates("suitorguy", name="booking_summary_nodisc", limit=1)

    assert templates[0]["name"] == "booking_summary_nodisc"
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == f"{API}/111111111111111/message_templates"
    assert call["params"] == {"limit": 1, "name": "booking_summary_nodisc"}
