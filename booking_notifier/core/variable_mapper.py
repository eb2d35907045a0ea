"""
Variable mapper: turns a notification payload into the ordered list of
template parameters expected by a pre-approved WhatsApp template.

Slot order is positional. The n-th value fills `{{n}}` in the provider
template, so a slot list that disagrees with the registered template shifts
every following value into the wrong field.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from booking_notifier.core.amounts import is_present, parse_amount, round_half_up

PAYLOAD_SLOTS = (
    "customer_name",
    "booking_number",
    "total_amount",
    "discount_amount",
    "payable_amount",
    "invoice_amount",
    "advance_paid",
    "balance_due",
    "security_deposit",
    "security_amount",
    "subtotal",
)
DERIVED_SLOTS = ("discount_percentage",)
BRAND_SLOTS = ("brand_name", "brand_contact")

KNOWN_SLOTS = frozenset(PAYLOAD_SLOTS + DERIVED_SLOTS + BRAND_SLOTS)


def discount_percentage(total_amount: Any, discount_amount: Any) -> int:
    total = parse_amount(total_amount) or 0.0
    discount = parse_amount(discount_amount) or 0.0
    if total <= 0:
        return 0
    return round_half_up(discount / total * 100)


def build_mapping(payload: Mapping[str, Any], brand: Optional[Any]) -> Dict[str, Any]:
    mapping: Dict[str, Any] = {name: payload.get(name) for name in PAYLOAD_SLOTS}
    mapping["discount_percentage"] = str(
        discount_percentage(payload.get("total_amount"), payload.get("discount_amount"))
    )
    mapping["brand_name"] = getattr(brand, "display_name", None)
    mapping["brand_contact"] = getattr(brand, "business_phone", None)
    return mapping


def map_variables(payload: Mapping[str, Any], slot_names: Sequence[str], brand: Optional[Any]) -> List[str]:
    """Return one string per slot, in slot order; unknown or missing slots map to ''."""
    mapping = build_mapping(payload or {}, brand)
    values = []
    for slot in slot_names:
        value = mapping.get(slot)
        values.append(str(value) if is_present(value) else "")
    return values
