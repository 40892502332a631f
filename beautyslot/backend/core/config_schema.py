"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
    FeaturesSchema     → features.yaml
    YClientsSchema     → yclients.yaml
    TelegramSchema     → telegram.yaml
"""

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class PaginationSchema(_StrictBase):
    default_limit: int
    max_limit: int


class TimeoutsSchema(_StrictBase):
    external_api: int
    health_check: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    timezone: str
    salon_name: str
    public_base_url: str
    server: ServerSchema
    cors: CorsSchema
    pagination: PaginationSchema
    timeouts: TimeoutsSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
    masked_fields: list[str] = []
    quiet_loggers: dict[str, str] = {}


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    channel_telegram_enabled: bool
    realtime_simulation_enabled: bool
    scheduler_enabled: bool
    reminders_enabled: bool
    api_detailed_errors: bool


# =============================================================================
# yclients.yaml
# =============================================================================


class RetrySchema(_StrictBase):
    max_attempts: int
    request_delay_seconds: float
    rate_limit_delay_seconds: float
    error_delay_seconds: float


class CircuitBreakerSchema(_StrictBase):
    fail_max: int
    timeout_duration: int


class SyncFetchSchema(_StrictBase):
    clients_page_size: int
    records_page_size: int
    records_days_back: int
    records_days_ahead: int


class YClientsSchema(_StrictBase):
    api_url: str
    token_ttl_hours: int
    retry: RetrySchema
    circuit_breaker: CircuitBreakerSchema
    sync: SyncFetchSchema


# =============================================================================
# telegram.yaml
# =============================================================================


class TelegramRateLimitSchema(_StrictBase):
    messages_per_minute: int
    window_seconds: int


class TelegramSchema(_StrictBase):
    webhook_path: str
    broadcast_delay_seconds: float
    menu_items_limit: int
    history_items_limit: int
    rate_limiting: TelegramRateLimitSchema
