"""List the WhatsApp templates registered at Meta for one brand.

Usage (from repo root):
  set -o allexport; source .env; set +o allexport
  python scripts/list_templates.py suitorguy

This script will NOT print access tokens.
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from booking_notifier.config import settings
from booking_notifier.errors import NotificationError
from booking_notifier.integrations.whatsapp_api import WhatsAppClient
from booking_notifier.registry.brands import build_brand_registry
from booking_notifier.registry.templates import count_body_placeholders


async def main(brand_key: str) -> int:
    brands = build_brand_registry(settings)
    brand = brands.get(brand_key)
    if brand is None:
        print(f"Invalid brand: {brand_key}. Available brands: {', '.join(brands.keys())}")
        return 1
    if not brand.has_credentials:
        print(f"Missing credentials for {brand_key}: set {brand_key.upper()}_PHONE_NUMBER_ID and {brand_key.upper()}_ACCESS_TOKEN")
        return 1

    client = WhatsAppClient(settings.WHATSAPP_API_URL, brands, language_code=settings.WHATSAPP_LANGUAGE_CODE)
    try:
        templates = await client.list_templates(brand_key)
    except NotificationError as e:
        print("Listing templates failed:", str(e))
        return 1

    if not templates:
        print(f"No templates found for {brand.display_name}")
        return 0

    print(f"Found {len(templates)} template(s) for {brand.display_name}:")
    for index, template in enumerate(templates, start=1):
        print(f"{index}. {template.get('name')}  status={template.get('status')}  "
              f"language={template.get('language', 'N/A')}  category={template.get('category', 'N/A')}  "
              f"placeholders={count_body_placeholders(template)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("brand", nargs="?", default="suitorguy")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.brand)))
