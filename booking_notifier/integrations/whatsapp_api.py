"""
WhatsApp Cloud API connector.
Sends template and document messages via the Facebook Graph API.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import aiohttp

from booking_notifier.errors import DEFAULT_PROVIDER_ERROR, ProviderError
from booking_notifier.monitoring.logger import log
from booking_notifier.registry.brands import Brand, BrandRegistry


@dataclass
class SendResult:
    message_id: Optional[str]
    raw_response: Dict[str, Any] = field(default_factory=dict)


class WhatsAppClient:
    """Thin Graph API client, one outbound call per method, no retries.

    `session_factory` must return an aiohttp-compatible session usable as an
    async context manager; tests pass a fake.
    """

    def __init__(
        self,
        api_url: str,
        brands: BrandRegistry,
        language_code: str = "en",
        session_factory: Callable[[], Any] = aiohttp.ClientSession,
    ):
        self.api_url = api_url.rstrip("/")
        self.brands = brands
        self.language_code = language_code
        self.session_factory = session_factory

    async def send_template(
        self,
        brand_key: str,
        template_name: str,
        to: str,
        values: Sequence[Any],
        document_url: Optional[str] = None,
    ) -> SendResult:
        brand = self.brands.require(brand_key)
        payload = build_template_payload(to, template_name, values, self.language_code, document_url)
        result = await self._post_message(brand, payload)
        log("INFO", f"WhatsApp template {template_name} sent to {to}: {result.message_id}", module="whatsapp_api", brand=brand.key)
        return result

    async def send_document(
        self,
        brand_key: str,
        to: str,
        link: str,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> SendResult:
        brand = self.brands.require(brand_key)
        payload = build_document_payload(to, link, caption, filename)
        result = await self._post_message(brand, payload)
        log("INFO", f"WhatsApp document sent to {to}: {result.message_id}", module="whatsapp_api", brand=brand.key)
        return result

    async def list_templates(self, brand_key: str, name: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        """Return the templates registered for a brand's WhatsApp number."""
        brand = self.brands.require(brand_key)
        url = f"{self.api_url}/{brand.phone_number_id}/message_templates"
        params: Dict[str, Any] = {"limit": limit}
        if name:
            params["name"] = name
        data = await self._request("GET", url, brand, params=params)
        return list(data.get("data") or [])

    async def _post_message(self, brand: Brand, payload: Dict[str, Any]) -> SendResult:
        url = f"{self.api_url}/{brand.phone_number_id}/messages"
        data = await self._request("POST", url, brand, json=payload)
        messages = data.get("messages") or [{}]
        return SendResult(message_id=messages[0].get("id"), raw_response=data)

    async def _request(self, method: str, url: str, brand: Brand, **kwargs) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {brand.access_token}",
            "Content-Type": "application/json",
        }
        try:
            async with self.session_factory() as session:
                request = session.post if method == "POST" else session.get
                async with request(url, headers=headers, **kwargs) as resp:
                    try:
                        data = await resp.json(content_type=None)
                    except (aiohttp.ContentTypeError, ValueError):
                        data = {}
                    if not isinstance(data, dict):
                        data = {}
                    if resp.status >= 400 or "error" in data:
                        error = data.get("error") or {}
                        log("ERROR", f"WhatsApp API error ({resp.status}): {data}", module="whatsapp_api", brand=brand.key)
                        raise ProviderError(
                            message=error.get("message") or DEFAULT_PROVIDER_ERROR,
                            code=str(error.get("code", resp.status)),
                            details=error,
                        )
                    return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            log("ERROR", f"WhatsApp transport error: {exc}", module="whatsapp_api", brand=brand.key)
            raise ProviderError(message=DEFAULT_PROVIDER_ERROR, code="HTTP_ERROR") from exc


def build_template_payload(
    to: str,
    template_name: str,
    values: Sequence[Any],
    language_code: str = "en",
    document_url: Optional[str] = None,
) -> Dict[str, Any]:
    components: List[Dict[str, Any]] = []
    if document_url:
        components.append({
            "type": "header",
            "parameters": [{"type": "document", "document": {"link": document_url}}],
        })
    components.append({
        "type": "body",
        "parameters": [{"type": "text", "text": str(value)} for value in values],
    })
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "template",
        "template": {
            "name": template_name,
            "language": {"code": language_code},
            "components": components,
        },
    }


def build_document_payload(to: str, link: str, caption: Optional[str] = None, filename: Optional[str] = None) -> Dict[str, Any]:
    document: Dict[str, Any] = {"link": link}
    if caption:
        document["caption"] = caption
    if filename:
        document["filename"] = filename
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "document",
        "document": document,
    }
