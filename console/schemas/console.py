"""Console state schemas: toast, sync badge, preferences."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ToastRead(BaseModel):
    order_id: int
    message: str
    kind: str
    shown_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConsoleStatus(BaseModel):
    sync_status: str
    desktop_permission: str
    active_tab: str
    selected_order_id: int | None
    toast: ToastRead | None
    audio_enabled: bool
    staff_name: str


class PreferencesUpdate(BaseModel):
    staff_name: str | None = None
    audio_enabled: bool | None = None


class ConsoleEventsRead(BaseModel):
    events: list[dict[str, Any]]
