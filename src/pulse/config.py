# src/pulse/config.py
"""
Configuration loader for SoW Pulse.
Loads configuration from YAML files and environment variables.

Order (later wins): config/default.yaml, config/<PULSE_ENV>.yaml, env vars.
"""

from typing import Dict, Any, Optional
from pathlib import Path
from datetime import timedelta
import yaml
import os
from pydantic import BaseModel, ConfigDict, Field
import logging

from .dates import DateOrder

logger = logging.getLogger(__name__)


class LinearConfig(BaseModel):
    """Issue tracker (Linear) settings."""

    api_key: str = ""
    api_url: str = "https://api.linear.app/graphql"
    team_id: Optional[str] = None  # First team is used when unset
    fetch_limit: int = 50
    refresh_interval_minutes: int = 15
    timeout: float = 30.0


class SlackConfig(BaseModel):
    """Chat (Slack) settings."""

    bot_token: str = ""
    api_url: str = "https://slack.com/api"
    channel: str = "C07PWD53552"
    create_project_channels: bool = False
    channel_prefix: str = "proj-"
    timeout: float = 30.0


class UploadConfig(BaseModel):
    """SoW upload handling."""

    upload_dir: str = "uploads"
    max_bytes: int = 5 * 1024 * 1024


class TrackingConfig(BaseModel):
    """Milestone date tracking."""

    store_path: Optional[str] = None  # Memory only when unset
    reminder_dwell_hours: float = 48
    check_interval_seconds: int = 60
    date_order: DateOrder = DateOrder.MDY  # Slash dates are MM/DD/YYYY unless "dmy"

    @property
    def reminder_dwell(self) -> timedelta:
        return timedelta(hours=self.reminder_dwell_hours)


class NotificationConfig(BaseModel):
    """Overdue notification schedule."""

    overdue_summary_interval_hours: float = 24
    overdue_check_cron: str = "0 9 * * 1"  # Mondays at 9 AM
    overdue_check_on_startup: bool = True

    @property
    def overdue_summary_interval(self) -> timedelta:
        return timedelta(hours=self.overdue_summary_interval_hours)


class PulseConfig(BaseModel):
    """Main SoW Pulse configuration."""

    model_config = ConfigDict(extra="allow")

    # Environment
    environment: str = "development"
    debug: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Logging
    log_level: str = "INFO"

    # Background jobs
    scheduler_enabled: bool = True

    linear: LinearConfig = Field(default_factory=LinearConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursive dict update; nested sections merge instead of being replaced."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigLoader:
    """Load and manage SoW Pulse configuration."""

    def __init__(self, config_dir: str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
        """
        self.config_dir = Path(config_dir)
        self.config: Optional[PulseConfig] = None
        self.load()

    def load(self) -> PulseConfig:
        """Load configuration from YAML and environment variables."""

        env = os.getenv("PULSE_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        data = self._load_yaml(self.config_dir / "default.yaml")

        if config_file.exists():
            _merge(data, self._load_yaml(config_file))
        else:
            logger.warning(f"Config file not found: {config_file}, using defaults")

        _merge(data, self._load_from_env())
        data.setdefault("environment", env)

        self.config = PulseConfig(**data)

        logger.info(
            f"Configuration loaded (environment: {self.config.environment}, "
            f"linear key set: {bool(self.config.linear.api_key)}, "
            f"slack token set: {bool(self.config.slack.bot_token)})"
        )
        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
                return data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        linear = {}
        if api_key := os.getenv("LINEAR_API_KEY"):
            linear["api_key"] = api_key
        if team_id := os.getenv("LINEAR_TEAM_ID"):
            linear["team_id"] = team_id
        if linear:
            config["linear"] = linear

        slack = {}
        if token := os.getenv("SLACK_BOT_TOKEN"):
            slack["bot_token"] = token
        if channel := os.getenv("SLACK_CHANNEL"):
            slack["channel"] = channel
        if slack:
            config["slack"] = slack

        if store_path := os.getenv("TRACKING_STORE_PATH"):
            config["tracking"] = {"store_path": store_path}
        if upload_dir := os.getenv("UPLOAD_DIR"):
            config["uploads"] = {"upload_dir": upload_dir}

        if log_level := os.getenv("PULSE_LOG_LEVEL"):
            config["log_level"] = log_level.upper()
        if api_port := os.getenv("PULSE_API_PORT"):
            config["api_port"] = int(api_port)
        if scheduler := os.getenv("PULSE_SCHEDULER_ENABLED"):
            config["scheduler_enabled"] = _env_flag(scheduler)

        return config

    def get(self) -> PulseConfig:
        """Get current configuration."""
        if not self.config:
            self.load()
        return self.config


# Global config instance
_global_config_loader: Optional[ConfigLoader] = None


def get_config() -> PulseConfig:
    """Get the global SoW Pulse configuration."""
    global _global_config_loader
    if _global_config_loader is None:
        _global_config_loader = ConfigLoader()
    return _global_config_loader.get()


def initialize_config(config_dir: str = "config") -> PulseConfig:
    """Initialize the global configuration loader."""
    global _global_config_loader
    _global_config_loader = ConfigLoader(config_dir)
    return _global_config_loader.get()
