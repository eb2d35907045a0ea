"""
Booking classifier: turns a loosely typed booking record from the upstream
rental system into a canonical notification payload.

Upstream installations name the same concept differently (`price`,
`totalAmount`, `amount`, ...). Every canonical field is resolved through an
ordered list of candidate field names in `NORMALIZATION_RULES`; the first
present value wins. Event type and discount detection are fixed,
first-match-wins rule chains.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from booking_notifier.core.amounts import format_amount, is_present, parse_amount

DEFAULT_COUNTRY_CODE = "91"

_PHONE_STRIP_RE = re.compile(r"[\s\-+]")

# canonical field -> candidate upstream field names, in precedence order
NORMALIZATION_RULES: Dict[str, Tuple[str, ...]] = {
    "customer_name": ("customerName", "customer_name", "name"),
    "customer_phone": ("phoneNo", "phone", "customerPhone", "customer_phone", "mobile"),
    "booking_number": ("bookingNo", "bookingNumber", "booking_no", "booking_number"),
    "total_amount": ("price", "totalAmount", "amount", "total_amount"),
    "payable_amount": ("finalPrice", "payableAmount", "payable_amount", "price"),
    "advance_paid": ("advancePaid", "advance", "paidAmount", "advance_paid"),
    "invoice_amount": ("invoiceAmount", "invoice_amount"),
    "security_deposit": ("securityDeposit", "security_deposit"),
    "security_amount": ("securityAmount", "security_amount", "securityDeposit", "security_deposit"),
    "subtotal": ("subTotal", "subtotal"),
}

FIELD_DEFAULTS: Dict[str, Any] = {
    "customer_name": "Customer",
    "booking_number": "UNKNOWN",
    "customer_phone": "",
    "advance_paid": 0,
    "security_deposit": 0,
    "security_amount": 0,
}


@dataclass(frozen=True)
class Classification:
    event_type: str
    has_discount: bool
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def template_type(self) -> str:
        return "withdiscount" if self.has_discount else "nodisc"


def resolve_field(record: Mapping[str, Any], candidates: Sequence[str], default: Any = None) -> Any:
    """Return the value of the first candidate field present in `record`."""
    for name in candidates:
        value = record.get(name)
        if is_present(value):
            return value
    return default


def normalize_phone(phone: Any, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Strip spaces, hyphens and '+' and prefix bare 10-digit numbers.

    Only the single-country rule is applied: inputs of any other length are
    returned unchanged rather than rejected.
    """
    if not is_present(phone):
        return ""
    formatted = _PHONE_STRIP_RE.sub("", str(phone))
    if len(formatted) == 10 and not formatted.startswith(country_code):
        formatted = country_code + formatted
    return formatted


# Event type rules

def _status_rule(record: Mapping[str, Any]) -> Optional[str]:
    status = record.get("status")
    if not is_present(status):
        return None
    status = str(status).lower()
    if "rent" in status:
        return "rentout"
    if "book" in status:
        return "booking"
    return None


def _rent_out_date_rule(record: Mapping[str, Any]) -> Optional[str]:
    return "rentout" if is_present(record.get("rentOutDate")) else None


def _return_date_rule(record: Mapping[str, Any]) -> Optional[str]:
    return "rentout" if is_present(record.get("returnDate")) else None


EVENT_TYPE_RULES: Tuple[Tuple[str, Callable[[Mapping[str, Any]], Optional[str]]], ...] = (
    ("status", _status_rule),
    ("rentOutDate", _rent_out_date_rule),
    ("returnDate", _return_date_rule),
)


def detect_event_type(record: Mapping[str, Any]) -> str:
    for _, rule in EVENT_TYPE_RULES:
        event_type = rule(record)
        if event_type is not None:
            return event_type
    return "booking"


# Discount rules: each returns a positive amount-like number or None

def _positive(value: Optional[float]) -> Optional[float]:
    if value is not None and value > 0:
        return value
    return None


def _difference(record: Mapping[str, Any], minuend: str, subtrahend: str) -> Optional[float]:
    high = parse_amount(record.get(minuend))
    low = parse_amount(record.get(subtrahend))
    if high is None or low is None:
        return None
    return _positive(high - low)


DISCOUNT_RULES: Tuple[Tuple[str, Callable[[Mapping[str, Any]], Optional[float]]], ...] = (
    ("discount", lambda r: _positive(parse_amount(r.get("discount")))),
    ("discountAmount", lambda r: _positive(parse_amount(r.get("discountAmount")))),
    ("discountPercentage", lambda r: _positive(parse_amount(r.get("discountPercentage")))),
    ("totalAmount-payableAmount", lambda r: _difference(r, "totalAmount", "payableAmount")),
    ("price-finalPrice", lambda r: _difference(r, "price", "finalPrice")),
)


def has_discount(record: Mapping[str, Any]) -> bool:
    for _, rule in DISCOUNT_RULES:
        if rule(record) is not None:
            return True
    return False


def calculate_discount(record: Mapping[str, Any], total_amount: Any, payable_amount: Any) -> float:
    """Explicit discount fields win; otherwise the positive gap between
    total and payable, then between price and finalPrice."""
    for name in ("discount", "discountAmount"):
        amount = _positive(parse_amount(record.get(name)))
        if amount is not None:
            return amount
    total = parse_amount(total_amount)
    payable = parse_amount(payable_amount)
    if total is not None and payable is not None and total > payable:
        return total - payable
    gap = _difference(record, "price", "finalPrice")
    return gap if gap is not None else 0.0


def balance_due(payable_amount: Any, advance_paid: Any) -> float:
    payable = parse_amount(payable_amount) or 0.0
    advance = parse_amount(advance_paid) or 0.0
    return max(0.0, payable - advance)


def classify(
    record: Mapping[str, Any],
    brand: str = "suitorguy",
    phone_override: Optional[str] = None,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> Classification:
    """Infer event type and discount presence and build the canonical payload."""
    record = record or {}
    event_type = detect_event_type(record)
    discounted = has_discount(record)

    def pick(name: str) -> Any:
        return resolve_field(record, NORMALIZATION_RULES[name], FIELD_DEFAULTS.get(name))

    total_amount = pick("total_amount")
    if total_amount is None:
        total_amount = 0
    payable_amount = pick("payable_amount")
    if payable_amount is None:
        payable_amount = total_amount
    advance_paid = pick("advance_paid")
    discount_amount = calculate_discount(record, total_amount, payable_amount)

    if phone_override:
        customer_phone = phone_override
    else:
        customer_phone = normalize_phone(pick("customer_phone"), country_code)

    payload: Dict[str, Any] = {
        "brand": brand,
        "event_type": event_type,
        "template_type": "withdiscount" if discounted else "nodisc",
        "customer_name": str(pick("customer_name")),
        "customer_phone": customer_phone,
        "booking_number": str(pick("booking_number")),
        "total_amount": format_amount(total_amount),
        "discount_amount": format_amount(discount_amount),
        "payable_amount": format_amount(payable_amount),
        "advance_paid": format_amount(advance_paid),
        "balance_due": format_amount(balance_due(payable_amount, advance_paid)),
    }

    if event_type == "rentout":
        invoice_amount = pick("invoice_amount")
        subtotal = pick("subtotal")
        payload["invoice_amount"] = format_amount(payable_amount if invoice_amount is None else invoice_amount)
        payload["security_deposit"] = format_amount(pick("security_deposit"))
        payload["security_amount"] = format_amount(pick("security_amount"))
        payload["subtotal"] = format_amount(total_amount if subtotal is None else subtotal)

    return Classification(event_type=event_type, has_discount=discounted, payload=payload)
