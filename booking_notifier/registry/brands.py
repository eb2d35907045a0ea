"""
Brand registry: static brand metadata plus messaging-provider credentials.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from booking_notifier.errors import ConfigurationError

# brand key -> display name; credentials come from settings
BRAND_DISPLAY_NAMES = {
    "suitorguy": "SuitorGuy",
    "zorucci": "Zorucci",
}


@dataclass(frozen=True)
class Brand:
    key: str
    display_name: str
    phone_number_id: Optional[str] = None
    access_token: Optional[str] = None
    business_phone: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.phone_number_id and self.access_token)


class BrandRegistry:
    """Read-only mapping of brand key to `Brand`, built once at startup."""

    def __init__(self, brands: Mapping[str, Brand]):
        self._brands = MappingProxyType(dict(brands))

    def get(self, key: Optional[str]) -> Optional[Brand]:
        if key is None:
            return None
        return self._brands.get(key)

    def require(self, key: str) -> Brand:
        brand = self.get(key)
        if brand is None:
            raise ConfigurationError(f"Invalid brand: {key}")
        return brand

    def keys(self) -> list:
        return list(self._brands.keys())

    def __contains__(self, key) -> bool:
        return key in self._brands

    def __iter__(self) -> Iterator[Brand]:
        return iter(self._brands.values())

    def __len__(self) -> int:
        return len(self._brands)


def build_brand_registry(settings) -> BrandRegistry:
    """Read `<BRAND>_PHONE_NUMBER_ID`, `<BRAND>_ACCESS_TOKEN` and
    `<BRAND>_BUSINESS_PHONE` for every known brand from settings."""
    brands = {}
    for key, display_name in BRAND_DISPLAY_NAMES.items():
        prefix = key.upper()
        brands[key] = Brand(
            key=key,
            display_name=display_name,
            phone_number_id=getattr(settings, f"{prefix}_PHONE_NUMBER_ID", None),
            access_token=getattr(settings, f"{prefix}_ACCESS_TOKEN", None),
            business_phone=getattr(settings, f"{prefix}_BUSINESS_PHONE", None),
        )
    return BrandRegistry(brands)
