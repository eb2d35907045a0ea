"""Check every template in the catalog against the template registered at Meta.

A slot list whose length differs from the provider template's `{{n}}`
placeholders shifts values into the wrong displayed field, so run this
after editing `booking_notifier/registry/templates.py`.

Usage (from repo root):
  python scripts/verify_templates.py suitorguy
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from booking_notifier.config import settings
from booking_notifier.errors import NotificationError
from booking_notifier.integrations.whatsapp_api import WhatsAppClient
from booking_notifier.registry.brands import build_brand_registry
from booking_notifier.registry.templates import DEFAULT_CATALOG, TemplateCheck, verify_variant


def describe(check: TemplateCheck) -> str:
    variant = check.variant
    label = f"{variant.event_type}/{variant.template_type} ({variant.name})"
    if check.found is None:
        return f"MISSING   {label}: not registered at the provider"
    if not check.ok:
        return f"MISMATCH  {label}: catalog has {check.expected} slots, provider has {check.found}"
    return f"OK        {label}: {check.expected} slots, status={check.status}"


async def main(brand_key: str) -> int:
    brands = build_brand_registry(settings)
    if brand_key not in brands:
        print(f"Invalid brand: {brand_key}")
        return 1
    client = WhatsAppClient(settings.WHATSAPP_API_URL, brands, language_code=settings.WHATSAPP_LANGUAGE_CODE)
    print(f"Catalog version {DEFAULT_CATALOG.version}")

    failures = 0
    for variant in DEFAULT_CATALOG:
        try:
            found = await client.list_templates(brand_key, name=variant.name, limit=1)
        except NotificationError as e:
            print(f"ERROR     {variant.name}: {e}")
            failures += 1
            continue
        check = verify_variant(variant, found[0] if found else None)
        print(describe(check))
        if not check.ok:
            failures += 1
            for position, slot in enumerate(variant.slots, start=1):
                print(f"          {{{{{position}}}}} -> {slot}")
    return 1 if failures else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Verify catalog slot counts against Meta templates")
    parser.add_argument("brand", nargs="?", default="suitorguy")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.brand)))
