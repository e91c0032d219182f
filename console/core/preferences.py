"""Operator preferences injected into the console core."""

from __future__ import annotations

from dataclasses import dataclass

from console.core.config import Settings


@dataclass
class ConsolePreferences:
    """Per-console operator settings, owned by whoever builds the app."""

    staff_name: str = ""
    audio_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConsolePreferences":
        return cls(staff_name=settings.staff_name, audio_enabled=settings.audio_alerts)
