"""
Template catalog: which pre-approved WhatsApp template is used for each
(event type, template type) pair, and the order of its body parameters.

The catalog is versioned and validated when constructed. Bump `version`
whenever a slot list changes so the message log and the verification
script can tell which table produced a send.
"""
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from booking_notifier.core.variable_mapper import KNOWN_SLOTS
from booking_notifier.errors import CatalogError, ConfigurationError

EVENT_TYPES = ("booking", "rentout", "pdf_test")
TEMPLATE_TYPES = ("withdiscount", "nodisc", "default")

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\d+)\s*\}\}")


@dataclass(frozen=True)
class TemplateVariant:
    event_type: str
    template_type: str
    name: str
    slots: Tuple[str, ...] = ()
    has_document_header: bool = False

    @property
    def key(self) -> Tuple[str, str]:
        return (self.event_type, self.template_type)

    @property
    def slot_count(self) -> int:
        return len(self.slots)


class TemplateCatalog:
    """Immutable, validated table of `TemplateVariant` keyed by (event, type)."""

    def __init__(self, version: str, variants: Iterable[TemplateVariant]):
        self.version = version
        table: Dict[Tuple[str, str], TemplateVariant] = {}
        for variant in variants:
            _validate_variant(variant)
            if variant.key in table:
                raise CatalogError(f"Duplicate template variant {variant.event_type}/{variant.template_type}")
            table[variant.key] = variant
        self._variants = MappingProxyType(table)

    def get(self, event_type: Optional[str], template_type: Optional[str]) -> Optional[TemplateVariant]:
        return self._variants.get((event_type, template_type))

    def require(self, event_type: Optional[str], template_type: Optional[str]) -> TemplateVariant:
        variant = self.get(event_type, template_type)
        if variant is None:
            raise ConfigurationError("Invalid event_type or template_type")
        return variant

    def by_name(self, name: str) -> Optional[TemplateVariant]:
        for variant in self._variants.values():
            if variant.name == name:
                return variant
        return None

    def __iter__(self) -> Iterator[TemplateVariant]:
        return iter(self._variants.values())

    def __len__(self) -> int:
        return len(self._variants)


def _validate_variant(variant: TemplateVariant) -> None:
    label = f"{variant.event_type}/{variant.template_type}"
    if variant.event_type not in EVENT_TYPES:
        raise CatalogError(f"Unknown event type in {label}")
    if variant.template_type not in TEMPLATE_TYPES:
        raise CatalogError(f"Unknown template type in {label}")
    if not variant.name:
        raise CatalogError(f"Missing template name for {label}")
    if len(set(variant.slots)) != len(variant.slots):
        raise CatalogError(f"Duplicate slot in {label}: {list(variant.slots)}")
    unknown = [slot for slot in variant.slots if slot not in KNOWN_SLOTS]
    if unknown:
        raise CatalogError(f"Unknown slot(s) in {label}: {unknown}")


DEFAULT_CATALOG = TemplateCatalog(
    version="2025-01",
    variants=(
        TemplateVariant(
            event_type="booking",
            template_type="withdiscount",
            name="booking_summary_withdiscount",
            slots=(
                "customer_name",
                "booking_number",
                "total_amount",
                "discount_amount",
                "payable_amount",
                "advance_paid",
                "balance_due",
                "brand_name",
                "brand_contact",
            ),
        ),
        TemplateVariant(
            event_type="booking",
            template_type="nodisc",
            name="booking_summary_nodisc",
            slots=(
                "customer_name",
                "booking_number",
                "total_amount",
                "payable_amount",
                "advance_paid",
                "balance_due",
                "brand_name",
                "brand_contact",
            ),
        ),
        TemplateVariant(
            event_type="rentout",
            template_type="withdiscount",
            name="rentout_summary_withdiscount",
            slots=(
                "customer_name",
                "booking_number",
                "total_amount",
                "discount_amount",
                "invoice_amount",
                "advance_paid",
                "balance_due",
                "security_deposit",
                "subtotal",
                "brand_name",
                "brand_contact",
            ),
        ),
        TemplateVariant(
            event_type="rentout",
            template_type="nodisc",
            name="rentout_summary_nodisc",
            slots=(
                "customer_name",
                "booking_number",
                "total_amount",
                "invoice_amount",
                "advance_paid",
                "balance_due",
                "security_amount",
                "subtotal",
                "brand_name",
                "brand_contact",
            ),
        ),
        TemplateVariant(
            event_type="pdf_test",
            template_type="default",
            name="pdf_test_template",
            slots=(),
            has_document_header=True,
        ),
    ),
)


@dataclass(frozen=True)
class TemplateCheck:
    variant: TemplateVariant
    expected: int
    found: Optional[int]
    status: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.found is not None and self.found == self.expected


def count_body_placeholders(provider_template: Mapping[str, Any]) -> int:
    """Count distinct `{{n}}` markers in the BODY component of a provider template."""
    for component in provider_template.get("components") or []:
        if str(component.get("type", "")).upper() == "BODY":
            text = component.get("text") or ""
            return len(set(_PLACEHOLDER_RE.findall(text)))
    return 0


def verify_variant(variant: TemplateVariant, provider_template: Optional[Mapping[str, Any]]) -> TemplateCheck:
    """Compare the catalog slot count with the template registered at the provider.

    `provider_template` is one entry of the Graph API `message_templates`
    listing, or None when the template was not found.
    """
    if provider_template is None:
        return TemplateCheck(variant=variant, expected=variant.slot_count, found=None)
    return TemplateCheck(
        variant=variant,
        expected=variant.slot_count,
        found=count_body_placeholders(provider_template),
        status=provider_template.get("status"),
    )
