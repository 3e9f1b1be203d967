import yaml
import os
import logging
from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file or overrides are invalid."""
    pass


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///duewatch.db"


class SchedulerConfig(BaseModel):
    """
    Cadence of the periodic tasks.

    The scan runs on a fixed interval; cleanup runs once a day at
    cleanup_hour:cleanup_minute in the given timezone.
    """
    enabled: bool = True
    scan_interval_minutes: int = Field(default=15, gt=0)
    cleanup_hour: int = Field(default=2, ge=0, le=23)
    cleanup_minute: int = Field(default=0, ge=0, le=59)
    timezone: str = "Asia/Kolkata"
    # Overlapping scan runs are allowed; there is no lock between them
    max_overlapping_scans: int = Field(default=2, ge=1)


class ReminderConfig(BaseModel):
    notice_window_minutes: int = Field(default=120, gt=0)
    cooldown_hours: float = Field(default=12, ge=0)
    retention_days: int = Field(default=30, gt=0)


class EmailConfig(BaseModel):
    """SMTP settings for the email gateway."""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    from_email: Optional[str] = None  # Falls back to smtp_username
    from_name: str = "Expense Manager"
    use_tls: bool = True
    timeout_seconds: float = 30.0


class PushConfig(BaseModel):
    """
    Push gateway settings.

    Missing credentials are a normal state: the push channel then reports
    "not configured" instead of failing the dispatch.
    """
    provider: Literal["onesignal", "fcm", "none"] = "onesignal"
    onesignal_app_id: Optional[str] = None
    onesignal_api_key: Optional[str] = None
    onesignal_api_url: str = "https://onesignal.com/api/v1/notifications"
    fcm_server_key: Optional[str] = None
    fcm_api_url: str = "https://fcm.googleapis.com/fcm/send"
    fcm_topic_prefix: str = "user_"
    request_timeout_seconds: float = 30.0


class FormattingConfig(BaseModel):
    """Locale rules for amounts and dates shown to users."""
    currency_symbol: str = "₹"
    digit_grouping: Literal["indian", "international"] = "indian"
    decimal_places: int = Field(default=2, ge=0, le=4)
    timezone: str = "Asia/Kolkata"
    date_format: str = "%d/%m/%Y"
    datetime_format: str = "%d %B %Y at %I:%M %p"


class AppSection(BaseModel):
    name: str = "Expense Manager"
    frontend_url: str = "http://localhost:3000"


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    reminders: ReminderConfig = Field(default_factory=ReminderConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    push: PushConfig = Field(default_factory=PushConfig)
    formatting: FormattingConfig = Field(default_factory=FormattingConfig)
    app: AppSection = Field(default_factory=AppSection)
    web: WebConfig = Field(default_factory=WebConfig)


# (section, key) <- first environment variable that is set
ENV_OVERRIDES = {
    ('database', 'url'): ('DATABASE_URL',),
    ('email', 'smtp_server'): ('SMTP_SERVER', 'SMTP_HOST'),
    ('email', 'smtp_port'): ('SMTP_PORT',),
    ('email', 'smtp_username'): ('SMTP_USERNAME', 'SMTP_USER'),
    ('email', 'smtp_password'): ('SMTP_PASSWORD', 'SMTP_PASS'),
    ('email', 'from_email'): ('FROM_EMAIL',),
    ('push', 'onesignal_app_id'): ('ONESIGNAL_APP_ID',),
    ('push', 'onesignal_api_key'): ('ONESIGNAL_API_KEY',),
    ('push', 'fcm_server_key'): ('FCM_SERVER_KEY',),
    ('app', 'frontend_url'): ('FRONTEND_URL',),
}


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), env_names in ENV_OVERRIDES.items():
        for env_name in env_names:
            value = os.environ.get(env_name)
            if value:
                if not isinstance(data.get(section), dict):
                    data[section] = {}
                data[section][key] = value
                break
    return data


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another cwd), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config.yaml found, using defaults and environment overrides")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    data = _apply_env_overrides(data)

    try:
        return AppConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
