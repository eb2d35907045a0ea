"""
Message service: duplicate guard, template resolution, variable mapping,
dispatch and message logging for one notification request.

Every step is awaited in sequence; nothing here retries the provider call.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from booking_notifier.core.classifier import DEFAULT_COUNTRY_CODE, Classification, classify
from booking_notifier.core.variable_mapper import map_variables
from booking_notifier.db.message_log_store import MessageLogStore, StoreOutcome, StoreResult
from booking_notifier.errors import DuplicateMessageError, NotificationError
from booking_notifier.integrations.whatsapp_api import SendResult, WhatsAppClient
from booking_notifier.monitoring.context import set_request_context
from booking_notifier.monitoring.logger import log
from booking_notifier.monitoring.slack_alerts import send_slack_alert
from booking_notifier.registry.brands import BrandRegistry
from booking_notifier.registry.templates import TemplateCatalog, TemplateVariant


@dataclass
class SendOutcome:
    message_id: Optional[str]
    booking_number: str
    template_name: str
    parameters: List[str] = field(default_factory=list)
    log_outcome: StoreOutcome = StoreOutcome.SKIPPED_STORE_UNAVAILABLE
    document_message_id: Optional[str] = None
    document_error: Optional[str] = None


class MessageService:
    def __init__(
        self,
        brands: BrandRegistry,
        catalog: TemplateCatalog,
        client: WhatsAppClient,
        store: MessageLogStore,
        country_code: str = DEFAULT_COUNTRY_CODE,
    ):
        self.brands = brands
        self.catalog = catalog
        self.client = client
        self.store = store
        self.country_code = country_code

    def resolve(self, payload: Mapping[str, Any]) -> TemplateVariant:
        variant = self.catalog.require(payload.get("event_type"), payload.get("template_type") or "default")
        self.brands.require(payload.get("brand"))
        return variant

    def preview(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Resolve and map a payload without sending anything."""
        variant = self.resolve(payload)
        brand = self.brands.require(payload.get("brand"))
        values = map_variables(payload, variant.slots, brand)
        return {
            "templateName": variant.name,
            "catalogVersion": self.catalog.version,
            "slots": list(variant.slots),
            "parameters": values,
        }

    async def send_message(self, payload: Mapping[str, Any]) -> SendOutcome:
        brand_key = payload.get("brand")
        event_type = payload.get("event_type")
        booking_number = payload.get("booking_number")
        customer_phone = payload.get("customer_phone")
        set_request_context(brand=brand_key, booking_number=booking_number)

        variant = self.resolve(payload)
        brand = self.brands.require(brand_key)

        claim = await self.store.claim(
            brand=brand_key,
            event_type=event_type,
            template_name=variant.name,
            customer_phone=customer_phone,
            booking_number=booking_number,
            payload=dict(payload),
        )
        if claim.outcome == StoreOutcome.CONFLICT:
            log("WARNING", f"Duplicate notification rejected for {event_type} {booking_number}", module="message_service")
            raise DuplicateMessageError(event_type, booking_number)
        if not claim.store_available:
            log("WARNING", "Message log unavailable, sending without duplicate protection", module="message_service")

        values = map_variables(payload, variant.slots, brand)
        pdf_url = payload.get("pdf_url")
        header_document = pdf_url if variant.has_document_header else None

        try:
            result = await self.client.send_template(brand_key, variant.name, customer_phone, values, header_document)
        except NotificationError as exc:
            await self._record(claim, payload, variant, "failed", error_message=str(exc))
            log("ERROR", f"WhatsApp send failed for {event_type} {booking_number}: {exc}", module="message_service")
            await send_slack_alert(
                message=f"WhatsApp send failed for {event_type} {booking_number}: {exc}",
                context={"template": variant.name},
                severity="ERROR",
                module="message_service",
            )
            raise

        logged = await self._record(claim, payload, variant, "sent", whatsapp_message_id=result.message_id)
        outcome = SendOutcome(
            message_id=result.message_id,
            booking_number=booking_number,
            template_name=variant.name,
            parameters=values,
            log_outcome=logged.outcome,
        )

        if pdf_url:
            caption = f"{'Booking' if event_type == 'booking' else 'Rent-out'} Invoice - {booking_number}"
            try:
                document = await self.client.send_document(brand_key, customer_phone, pdf_url, caption, f"{booking_number}_invoice.pdf")
                outcome.document_message_id = document.message_id
            except NotificationError as exc:
                outcome.document_error = str(exc)
                log("ERROR", f"Failed to send PDF for {booking_number}: {exc}", module="message_service")

        return outcome

    async def send_booking(
        self,
        record: Mapping[str, Any],
        brand: str = "suitorguy",
        phone_override: Optional[str] = None,
        pdf_url: Optional[str] = None,
    ) -> Tuple[Classification, SendOutcome]:
        """Classify an upstream booking record, then send it like any other request."""
        classification = classify(record, brand=brand, phone_override=phone_override, country_code=self.country_code)
        payload = dict(classification.payload)
        if pdf_url:
            payload["pdf_url"] = pdf_url
        log("INFO", f"Booking {payload['booking_number']} classified as {classification.event_type}/{classification.template_type}", module="message_service", brand=brand)
        outcome = await self.send_message(payload)
        return classification, outcome

    async def send_document(self, brand: str, customer_phone: str, pdf_url: str, booking_number: str, caption: Optional[str] = None) -> SendResult:
        set_request_context(brand=brand, booking_number=booking_number)
        return await self.client.send_document(
            brand,
            customer_phone,
            pdf_url,
            caption or f"Invoice for {booking_number}",
            f"{booking_number}_invoice.pdf",
        )

    async def _record(self, claim: StoreResult, payload: Mapping[str, Any], variant: TemplateVariant, status: str, whatsapp_message_id: Optional[str] = None, error_message: Optional[str] = None) -> StoreResult:
        booking_number = payload.get("booking_number")
        event_type = payload.get("event_type")
        if claim.written:
            return await self.store.mark(booking_number, event_type, status, whatsapp_message_id=whatsapp_message_id, error_message=error_message)
        # The claim was skipped; the store may be back, so try a plain insert
        return await self.store.create(
            brand=payload.get("brand"),
            event_type=event_type,
            template_name=variant.name,
            customer_phone=payload.get("customer_phone"),
            booking_number=booking_number,
            status=status,
            whatsapp_message_id=whatsapp_message_id,
            error_message=error_message,
            payload=dict(payload),
        )
