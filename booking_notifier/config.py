# booking_notifier/config.py
"""
Configuration management using Pydantic Settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite+aiosqlite:///./notifications.db"
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000
    ENVIRONMENT: str = "development"
    SLACK_WEBHOOK_URL: Optional[str] = None
    # WhatsApp Cloud API (Meta Graph API)
    WHATSAPP_API_URL: str = "https://graph.facebook.com/v18.0"
    WHATSAPP_LANGUAGE_CODE: str = "en"
    # Country code prepended to bare 10-digit phone numbers (India only)
    DEFAULT_COUNTRY_CODE: str = "91"
    # Per-brand credentials
    SUITORGUY_PHONE_NUMBER_ID: Optional[str] = None
    SUITORGUY_ACCESS_TOKEN: Optional[str] = None
    SUITORGUY_BUSINESS_PHONE: Optional[str] = None
    ZORUCCI_PHONE_NUMBER_ID: Optional[str] = None
    ZORUCCI_ACCESS_TOKEN: Optional[str] = None
    ZORUCCI_BUSINESS_PHONE: Optional[str] = None

settings = Settings()
