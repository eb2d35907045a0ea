"""
Request bodies for the notification endpoints.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from booking_notifier.registry.brands import BrandRegistry

AMOUNT_FIELDS = (
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


def brand_errors(brand: str, brands: BrandRegistry) -> List[Dict[str, str]]:
    """Brand keys come from the registry built at startup, not from the schema."""
    if brand in brands:
        return []
    return [{"msg": "Invalid brand", "param": "brand", "location": "body"}]


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    brand: str
    event_type: Literal["booking", "rentout", "pdf_test"]
    template_type: Optional[Literal["withdiscount", "nodisc", "default"]] = None
    customer_name: Optional[str] = None
    customer_phone: str = Field(min_length=1)
    booking_number: str = Field(min_length=1)
    total_amount: Optional[str] = None
    discount_amount: Optional[str] = None
    payable_amount: Optional[str] = None
    invoice_amount: Optional[str] = None
    advance_paid: Optional[str] = None
    balance_due: Optional[str] = None
    security_deposit: Optional[str] = None
    security_amount: Optional[str] = None
    subtotal: Optional[str] = None
    pdf_url: Optional[AnyHttpUrl] = None

    @field_validator(*AMOUNT_FIELDS, mode="before")
    @classmethod
    def _amount_to_str(cls, value: Any) -> Any:
        # Upstream callers send amounts both as numbers and as strings
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def required_fields(self) -> List[str]:
        if self.event_type == "pdf_test":
            return ["pdf_url"]
        fields = ["template_type", "customer_name", "total_amount", "advance_paid", "balance_due"]
        if self.template_type == "withdiscount":
            fields.append("discount_amount")
        if self.event_type == "rentout":
            fields.append("security_deposit" if self.template_type == "withdiscount" else "security_amount")
        return fields

    def missing_field_errors(self) -> List[Dict[str, str]]:
        errors = []
        for name in self.required_fields():
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append({"msg": f"{name} is required", "param": name, "location": "body"})
        return errors

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(exclude_none=True)
        if self.template_type is None:
            payload["template_type"] = "default"
        if self.pdf_url is not None:
            payload["pdf_url"] = str(self.pdf_url)
        return payload


class SendBookingRequest(BaseModel):
    booking: Dict[str, Any]
    brand: str = "suitorguy"
    phone_number: Optional[str] = None
    pdf_url: Optional[AnyHttpUrl] = None


class SendPdfRequest(BaseModel):
    brand: str
    customer_phone: str = Field(min_length=1)
    pdf_url: AnyHttpUrl
    booking_number: str = Field(min_length=1)
    caption: Optional[str] = None
