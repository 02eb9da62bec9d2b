"""
Configuration loader for channel tags.
Loads settings from config.json with fallback defaults.
"""

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from channel_tags.utils.exceptions import ConfigurationError


@dataclass
class ApiConfig:
    """Channel registration API configuration."""
    base_url: str = "https://device-api.urbanairship.com/api"
    timeout: float = 30.0
    connect_timeout: float = 10.0


@dataclass
class ChannelConfig:
    """Device channel identity and credentials."""
    channel_id: str = ""
    app_key: str = ""
    app_secret: str = ""
    device_type: str = "ios"
    opt_in: bool = True
    tag_registration_enabled: bool = True


@dataclass
class TagsConfig:
    """Tag validation configuration."""
    max_length: int = 127


@dataclass
class SyncConfig:
    """Background registration sync configuration."""
    check_interval: float = 1.0
    max_sync_attempts: int = 3


@dataclass
class StoreConfig:
    """Local tag store configuration."""
    enabled: bool = True
    path: str = "channel_tags.json"


@dataclass
class RetryConfig:
    """Retry configuration for registration API calls."""
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0


@dataclass
class Config:
    """Root configuration object."""
    api: ApiConfig = field(default_factory=ApiConfig)
    channel: ChannelConfig = field(default_factory=ChannelConfig)
    tags: TagsConfig = field(default_factory=TagsConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    def missing_credentials(self) -> list:
        """Names of channel settings required for remote registration that are unset."""
        return [
            f"channel.{name}"
            for name in ("channel_id", "app_key", "app_secret")
            if not getattr(self.channel, name)
        ]

    def validate(self) -> None:
        """
        Check that remote registration can be attempted.

        Raises:
            ConfigurationError: If channel credentials are missing
        """
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(missing)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config.json. If None, uses ./config.json.

    Returns:
        Config dataclass populated from JSON.
    """
    if config_path is None:
        config_path = Path.cwd() / "config.json"

    config = Config()

    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)

        # API
        if "api" in data:
            api = data["api"]
            config.api = ApiConfig(
                base_url=api.get("base_url", "https://device-api.urbanairship.com/api"),
                timeout=api.get("timeout", 30.0),
                connect_timeout=api.get("connect_timeout", 10.0),
            )

        # Channel
        if "channel" in data:
            ch = data["channel"]
            config.channel = ChannelConfig(
                channel_id=ch.get("channel_id", ""),
                app_key=ch.get("app_key", ""),
                app_secret=ch.get("app_secret", ""),
                device_type=ch.get("device_type", "ios"),
                opt_in=ch.get("opt_in", True),
                tag_registration_enabled=ch.get("tag_registration_enabled", True),
            )

        # Tags
        if "tags" in data:
            config.tags = TagsConfig(
                max_length=data["tags"].get("max_length", 127),
            )

        # Sync
        if "sync" in data:
            s = data["sync"]
            config.sync = SyncConfig(
                check_interval=s.get("check_interval", 1.0),
                max_sync_attempts=s.get("max_sync_attempts", 3),
            )

        # Store
        if "store" in data:
            st = data["store"]
            config.store = StoreConfig(
                enabled=st.get("enabled", True),
                path=st.get("path", "channel_tags.json"),
            )

        # Retry
        if "retry" in data:
            r = data["retry"]
            config.retry = RetryConfig(
                max_attempts=r.get("max_attempts", 3),
                base_delay=r.get("base_delay", 1.0),
                max_delay=r.get("max_delay", 30.0),
                exponential_base=r.get("exponential_base", 2.0),
            )

    return config


# Global config singleton, used by the CLI entry point only
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global config singleton, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Set global config singleton (for testing)."""
    global _config
    _config = config
