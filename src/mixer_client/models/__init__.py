"""Data models for mixer_client."""

from mixer_client.models.config import DeviceConfig, Settings
from mixer_client.models.mixer import MixerSettings, MixerValues, parse_settings, parse_values

__all__ = [
    "DeviceConfig",
    "Settings",
    "MixerSettings",
    "MixerValues",
    "parse_settings",
    "parse_values",
]
