# booking_notifier/api/notifications/whatsapp.py
"""
WhatsApp notification endpoints: template sends, booking-record sends and
parameter previews.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from booking_notifier.api.deps import get_message_service
from booking_notifier.api.notifications.schemas import SendBookingRequest, SendMessageRequest, brand_errors
from booking_notifier.core.message_service import MessageService
from booking_notifier.errors import DuplicateMessageError, NotificationError
from booking_notifier.monitoring.logger import log

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])

SEND_FAILED = "Failed to send WhatsApp message"


def _validation_failed(errors) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "errors": errors})


def _send_failed(exc: Exception, request_id) -> JSONResponse:
    if isinstance(exc, DuplicateMessageError):
        return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})
    log("ERROR", f"Error sending message: {exc}", module="whatsapp_routes", request_id=request_id)
    return JSONResponse(status_code=500, content={"success": False, "message": SEND_FAILED, "error": str(exc)})


@router.post("/send")
async def send_message(body: SendMessageRequest, request: Request, service: MessageService = Depends(get_message_service)):
    request_id = getattr(request.state, "request_id", None)
    errors = brand_errors(body.brand, service.brands) + body.missing_field_errors()
    if errors:
        return _validation_failed(errors)
    try:
        outcome = await service.send_message(body.to_payload())
    except NotificationError as exc:
        return _send_failed(exc, request_id)
    return {
        "success": True,
        "message": "WhatsApp message sent successfully",
        "data": {
            "success": True,
            "messageId": outcome.message_id,
            "bookingNumber": outcome.booking_number,
        },
    }


@router.post("/send-booking")
async def send_booking(body: SendBookingRequest, request: Request, service: MessageService = Depends(get_message_service)):
    """Classify a raw booking record from the rental system and send it."""
    request_id = getattr(request.state, "request_id", None)
    errors = brand_errors(body.brand, service.brands)
    if errors:
        return _validation_failed(errors)
    try:
        classification, outcome = await service.send_booking(
            body.booking,
            brand=body.brand,
            phone_override=body.phone_number,
            pdf_url=str(body.pdf_url) if body.pdf_url else None,
        )
    except NotificationError as exc:
        return _send_failed(exc, request_id)
    return {
        "success": True,
        "message": "WhatsApp message sent successfully",
        "data": {
            "success": True,
            "messageId": outcome.message_id,
            "bookingNumber": outcome.booking_number,
            "detected": {
                "eventType": classification.event_type,
                "templateType": classification.template_type,
                "hasDiscount": classification.has_discount,
                "templateName": outcome.template_name,
            },
        },
    }


@router.post("/preview")
async def preview_message(body: SendMessageRequest, service: MessageService = Depends(get_message_service)):
    """Show the template and ordered parameters a send would use, without sending."""
    errors = brand_errors(body.brand, service.brands) + body.missing_field_errors()
    if errors:
        return _validation_failed(errors)
    try:
        data = service.preview(body.to_payload())
    except NotificationError as exc:
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to map template variables", "error": str(exc)})
    return {"success": True, "data": data}
