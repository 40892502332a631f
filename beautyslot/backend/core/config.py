"""
Configuration Management.

Two sources, nothing hardcoded:

    config/.env               secrets (Settings)
    config/settings/*.yaml    everything else (AppConfig)

Secrets:
    YCLIENTS_PARTNER_TOKEN, YCLIENTS_USER_LOGIN, YCLIENTS_USER_PASSWORD,
    YCLIENTS_COMPANY_ID, TELEGRAM_BOT_TOKEN, TELEGRAM_WEBHOOK_SECRET,
    TELEGRAM_ADMIN_CHAT_ID

YAML sections (one file each, validated by config_schema):
    application  - identity, server, CORS, salon timezone, pagination, timeouts
    logging      - level, handlers, masked fields
    features     - feature flags
    yclients     - API base, retry, circuit breaker, sync paging
    telegram     - webhook path, broadcast pacing, bot rate limits
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from beautyslot.backend.core.config_schema import (
    ApplicationSchema,
    FeaturesSchema,
    LoggingSchema,
    TelegramSchema,
    YClientsSchema,
)

PROJECT_MARKER = ".project_root"


def find_project_root() -> Path:
    """Walk up from the working directory to the folder holding ``.project_root``."""
    for directory in (Path.cwd(), *Path.cwd().parents):
        if (directory / PROJECT_MARKER).exists():
            return directory
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """Like find_project_root, but exits with a readable message."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """
    Read ``config/settings/<filename>``; an empty file yields ``{}``.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    config_path = find_project_root() / "config" / "settings" / filename
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """
    Secrets from config/.env.

    All optional: a blank value leaves the integration unconfigured, and
    its endpoints answer 503 rather than the app refusing to start.
    """

    yclients_partner_token: str = ""
    yclients_user_login: str = ""
    yclients_user_password: str = ""
    yclients_company_id: str = ""
    telegram_bot_token: str = ""
    telegram_webhook_secret: str = ""
    telegram_admin_chat_id: str = ""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def yclients_configured(self) -> bool:
        """Partner token plus company ID; the user token is optional."""
        return bool(self.yclients_partner_token and self.yclients_company_id)

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token)


def _load_section(schema_cls: type[BaseModel], filename: str) -> Any:
    try:
        return schema_cls(**load_yaml_config(filename))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    All YAML sections, validated on construction.

    A missing key, a wrong type or an unknown key fails here with the
    file name in the message.
    """

    application: ApplicationSchema
    logging: LoggingSchema
    features: FeaturesSchema
    yclients: YClientsSchema
    telegram: TelegramSchema

    SECTIONS: dict[str, type[BaseModel]] = {
        "application": ApplicationSchema,
        "logging": LoggingSchema,
        "features": FeaturesSchema,
        "yclients": YClientsSchema,
        "telegram": TelegramSchema,
    }

    def __init__(self) -> None:
        for name, schema_cls in self.SECTIONS.items():
            setattr(self, name, _load_section(schema_cls, f"{name}.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_server_base_url() -> tuple[str, float]:
    """
    URL of the locally configured server and the external-call timeout.

    Used by ``run.py --action health`` to check a running instance.
    """
    application = get_app_config().application
    base_url = f"http://{application.server.host}:{application.server.port}"
    return base_url, float(application.timeouts.external_api)
