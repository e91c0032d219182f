"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the operations console."""

    app_name: str = "Order Operations Console"
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./console.db")
    seed_menu: bool = getenv("SEED_MENU", "0") == "1"
    business_timezone: str = getenv("BUSINESS_TIMEZONE", "Europe/Amsterdam")
    pickup_minutes: int = int(getenv("PICKUP_MINUTES", "20"))
    delivery_minutes: int = int(getenv("DELIVERY_MINUTES", "45"))
    delivery_min_minutes: int = int(getenv("DELIVERY_MIN_MINUTES", "5"))
    delivery_max_minutes: int = int(getenv("DELIVERY_MAX_MINUTES", "120"))
    toast_seconds: float = float(getenv("TOAST_SECONDS", "5"))
    health_check_seconds: float = float(getenv("HEALTH_CHECK_SECONDS", "15"))
    reconnect_probability: float = float(getenv("RECONNECT_PROBABILITY", "0.05"))
    reconnect_seconds: float = float(getenv("RECONNECT_SECONDS", "2"))
    vat_rate_percent: int = int(getenv("VAT_RATE_PERCENT", "9"))
    staff_name: str = getenv("STAFF_NAME", "")
    audio_alerts: bool = getenv("AUDIO_ALERTS", "1") == "1"
    desktop_notifications: str = getenv("DESKTOP_NOTIFICATIONS", "default")


settings: Settings = Settings()
