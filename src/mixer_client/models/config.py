"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeviceConfig(BaseModel):
    """Mixer device connection configuration."""

    host: str = Field(default="192.168.4.1", description="Host (optionally host:port) of the mixer")
    control_path: str = Field(default="/control", description="Path of the device query interface")
    timeout: float = Field(default=1.0, gt=0, description="Request timeout in seconds")

    @property
    def base_url(self) -> str:
        """URL of the device query interface."""
        path = self.control_path if self.control_path.startswith("/") else f"/{self.control_path}"
        return f"http://{self.host}{path}"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="MIXER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    host: str = Field(default="192.168.4.1", description="Host (optionally host:port) of the mixer")
    control_path: str = Field(default="/control", description="Path of the device query interface")
    timeout: float = Field(default=1.0, gt=0, description="Request timeout in seconds")
    poll_interval: float = Field(default=0.5, gt=0, description="Seconds between poll ticks")
    liveness_threshold: float = Field(
        default=1.5,
        gt=0,
        description="Seconds without a successful response before the device counts as offline",
    )
    web_host: str = Field(default="0.0.0.0", description="Web surface host")
    web_port: int = Field(default=8080, description="Web surface port")
    log_level: str = Field(default="INFO", description="Logging level")

    def device_config(self, host: Optional[str] = None) -> DeviceConfig:
        """Build the device configuration, optionally overriding the host."""
        return DeviceConfig(
            host=host or self.host,
            control_path=self.control_path,
            timeout=self.timeout,
        )
