"""
Context helpers using contextvars for request/brand/booking propagation.
"""
import contextvars

request_id_var = contextvars.ContextVar("request_id", default=None)
brand_var = contextvars.ContextVar("brand", default=None)
booking_number_var = contextvars.ContextVar("booking_number", default=None)

def set_request_context(request_id=None, brand=None, booking_number=None):
    if request_id is not None:
        request_id_var.set(request_id)
    if brand is not None:
        brand_var.set(brand)
    if booking_number is not None:
        booking_number_var.set(booking_number)

def get_request_context():
    return {
        "request_id": request_id_var.get(),
        "brand": brand_var.get(),
        "booking_number": booking_number_var.get(),
    }
