# booking_notifier/api/notifications/pdf.py
"""
Standalone PDF document endpoint.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from booking_notifier.api.deps import get_message_service
from booking_notifier.api.notifications.schemas import SendPdfRequest, brand_errors
from booking_notifier.core.message_service import MessageService
from booking_notifier.errors import NotificationError
from booking_notifier.monitoring.logger import log

router = APIRouter(prefix="/pdf", tags=["pdf"])


@router.post("/send")
async def send_pdf(body: SendPdfRequest, request: Request, service: MessageService = Depends(get_message_service)):
    request_id = getattr(request.state, "request_id", None)
    errors = brand_errors(body.brand, service.brands)
    if errors:
        return JSONResponse(status_code=400, content={"success": False, "errors": errors})
    try:
        result = await service.send_document(
            body.brand,
            body.customer_phone,
            str(body.pdf_url),
            body.booking_number,
            caption=body.caption,
        )
    except NotificationError as exc:
        log("ERROR", f"Error sending PDF: {exc}", module="pdf_routes", request_id=request_id)
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to send PDF", "error": str(exc)})
    return {
        "success": True,
        "message": "PDF sent successfully",
        "data": {
            "messageId": result.message_id,
            "bookingNumber": body.booking_number,
        },
    }
