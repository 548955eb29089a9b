"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheConfig(BaseModel):
    """In-memory cache in front of the durable store."""
    ttl_seconds: float = Field(default=60.0, gt=0, description="Seconds before a cached value is re-read")


class StorageConfig(BaseModel):
    """Durable key-value store configuration."""
    model_config = ConfigDict(extra="ignore")  # Allow unknown fields for backwards compat

    path: str = "~/.lcdclock/storage.json"
    alarms_key: str = "alarms"
    settings_key: str = "@alarm_settings"


class NotificationConfig(BaseModel):
    """Notification delivery configuration."""
    enabled: bool = True
    alarm_title: str = "Alarm"
    snooze_title: str = "Snoozed Alarm"


class ResolverConfig(BaseModel):
    """Next-alarm resolver configuration."""
    offload: bool = True  # Run the resolver in a worker thread


class Config(BaseSettings):
    """Root configuration for lcdclock."""
    model_config = SettingsConfigDict(
        env_prefix="LCDCLOCK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @property
    def storage_path(self) -> Path:
        """Get expanded storage file path."""
        return Path(self.storage.path).expanduser()
