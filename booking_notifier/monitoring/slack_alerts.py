# booking_notifier/monitoring/slack_alerts.py
"""
Slack alerting for failed sends and unhandled errors.
"""
import httpx
from booking_notifier.config import settings
from booking_notifier.monitoring.logger import log
from typing import Optional, Dict

async def send_slack_alert(message: str, context: Optional[Dict] = None, severity: str = "ERROR", module: str = None, request_id: str = None) -> bool:
    webhook_url = settings.SLACK_WEBHOOK_URL
    if not webhook_url:
        log("DEBUG", "Slack webhook URL not configured", module=module, request_id=request_id)
        return False
    payload = {
        "text": f"[{settings.ENVIRONMENT}] [{severity}] [{module}] {message}\nRequest ID: {request_id}\nContext: {context or {}}"
    }
    try:
        async with httpx.AsyncClient() as client:
            await client.post(webhook_url, json=payload, timeout=5)
        return True
    except httpx.HTTPError as e:
        log("ERROR", f"Failed to send Slack alert: {e}", module=module, request_id=request_id)
        return False
