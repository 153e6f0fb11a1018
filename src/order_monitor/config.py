"""Application configuration helpers for environment-driven settings."""

from __future__ import annotations

import logging
import os
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from order_monitor.detection.calendar import parse_holidays

LOGGER = logging.getLogger(__name__)

# UK bank holidays used when HOLIDAYS is not set at all.
DEFAULT_HOLIDAYS: tuple[date, ...] = (
    date(2025, 1, 1),
    date(2025, 4, 18),
    date(2025, 4, 21),
    date(2025, 5, 5),
    date(2025, 5, 26),
    date(2025, 8, 25),
    date(2025, 12, 25),
    date(2025, 12, 26),
    date(2026, 1, 1),
    date(2026, 4, 3),
    date(2026, 4, 6),
    date(2026, 5, 4),
    date(2026, 5, 25),
    date(2026, 8, 31),
    date(2026, 12, 25),
    date(2026, 12, 28),
    date(2027, 1, 1),
    date(2027, 3, 26),
    date(2027, 3, 29),
    date(2027, 5, 3),
    date(2027, 5, 31),
    date(2027, 8, 30),
    date(2027, 12, 27),
    date(2027, 12, 28),
)


class DatabaseSettings(BaseModel):
    """Settings required to connect to PostgreSQL."""

    host: str = "localhost"
    port: int = 5432
    name: str
    user: str
    password: str
    max_pool_size: int = Field(100, ge=1)
    command_timeout_seconds: int = Field(30, ge=0)

    def build_sqlalchemy_url(self) -> str:
        """Compose a SQLAlchemy connection URL."""

        return (
            f"postgresql+psycopg2://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.name}"
        )


class StatusRangeSettings(BaseModel):
    """Inclusive band of status identifiers sharing one threshold."""

    min_status_id: int
    max_status_id: int
    threshold_hours: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "StatusRangeSettings":
        if self.min_status_id > self.max_status_id:
            raise ValueError(
                f"status range min {self.min_status_id} is greater than max {self.max_status_id}"
            )
        return self


class ThresholdSettings(BaseModel):
    """Status ranges, thresholds and eligibility bounds for stuck detection."""

    prep: StatusRangeSettings = StatusRangeSettings(min_status_id=3001, max_status_id=3910, threshold_hours=6)
    facility: StatusRangeSettings = StatusRangeSettings(
        min_status_id=4001, max_status_id=5830, threshold_hours=48
    )
    default_threshold_hours: int = Field(24, ge=0)
    terminal_status_cutoff: int = 6400
    lookback_years: int = Field(2, ge=1)

    @model_validator(mode="after")
    def _check_overlap(self) -> "ThresholdSettings":
        if self.prep.min_status_id <= self.facility.max_status_id and self.facility.min_status_id <= self.prep.max_status_id:
            raise ValueError("prep and facility status ranges overlap")
        return self


class BusinessHoursSettings(BaseModel):
    """Business calendar configuration."""

    timezone: str = "Europe/London"
    start_hour: int = Field(0, ge=0, le=23)
    end_hour: int = Field(0, ge=0, le=24)
    holidays: Optional[str] = None

    @model_validator(mode="after")
    def _check_calendar(self) -> "BusinessHoursSettings":
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone '{self.timezone}'") from exc
        if self.end_hour and self.end_hour <= self.start_hour:
            raise ValueError(
                f"business day end hour {self.end_hour} must be after start hour {self.start_hour}"
            )
        return self

    def holiday_dates(self) -> list[date]:
        """Return the configured holidays, falling back to the built-in list when unset."""

        if self.holidays is None:
            return list(DEFAULT_HOLIDAYS)
        return sorted(parse_holidays(self.holidays))


class AlertSettings(BaseModel):
    """Alert notification settings."""

    enabled: bool = True
    recipients: list[str] = Field(default_factory=list)
    subject_prefix: str = "[Order Monitor]"
    sample_size: int = Field(10, ge=1)


class ScannerSettings(BaseModel):
    """Background scanner settings."""

    enabled: bool = True
    interval_minutes: int = Field(15, ge=1)
    batch_size: int = Field(1000, ge=1)


class AppSettings(BaseModel):
    """Aggregated application settings."""

    database: DatabaseSettings
    thresholds: ThresholdSettings = ThresholdSettings()
    business_hours: BusinessHoursSettings = BusinessHoursSettings()
    alerts: AlertSettings = AlertSettings()
    scanner: ScannerSettings = ScannerSettings()

    @model_validator(mode="after")
    def _check_alert_recipients(self) -> "AppSettings":
        if self.alerts.enabled and not self.alerts.recipients:
            raise ValueError("ALERT_RECIPIENTS is required when ALERTS_ENABLED is true")
        return self


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def _load_from_environment() -> AppSettings:
    """Load settings using environment variables and .env file."""

    module_path = Path(__file__).resolve()
    project_root = module_path.parents[2]
    dotenv_path = project_root / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=True, encoding="utf-8-sig")
    load_dotenv(override=False)  # Secondary search path (current working dir)
    try:
        database = DatabaseSettings(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            name=os.environ["POSTGRES_DB"],
            user=os.environ["POSTGRES_USER"],
            password=os.environ["POSTGRES_PASSWORD"],
            max_pool_size=int(os.getenv("DB_MAX_POOL_SIZE", "100")),
            command_timeout_seconds=int(os.getenv("DB_COMMAND_TIMEOUT", "30")),
        )
        thresholds = ThresholdSettings(
            prep=StatusRangeSettings(
                min_status_id=int(os.getenv("PREP_MIN_STATUS_ID", "3001")),
                max_status_id=int(os.getenv("PREP_MAX_STATUS_ID", "3910")),
                threshold_hours=int(os.getenv("PREP_THRESHOLD_HOURS", "6")),
            ),
            facility=StatusRangeSettings(
                min_status_id=int(os.getenv("FACILITY_MIN_STATUS_ID", "4001")),
                max_status_id=int(os.getenv("FACILITY_MAX_STATUS_ID", "5830")),
                threshold_hours=int(os.getenv("FACILITY_THRESHOLD_HOURS", "48")),
            ),
            default_threshold_hours=int(os.getenv("DEFAULT_THRESHOLD_HOURS", "24")),
            terminal_status_cutoff=int(os.getenv("TERMINAL_STATUS_CUTOFF", "6400")),
            lookback_years=int(os.getenv("LOOKBACK_YEARS", "2")),
        )
        business_hours = BusinessHoursSettings(
            timezone=os.getenv("BUSINESS_TIMEZONE", "Europe/London"),
            start_hour=int(os.getenv("BUSINESS_START_HOUR", "0")),
            end_hour=int(os.getenv("BUSINESS_END_HOUR", "0")),
            holidays=os.getenv("HOLIDAYS"),
        )
        alerts = AlertSettings(
            enabled=_env_bool("ALERTS_ENABLED", True),
            recipients=_env_list("ALERT_RECIPIENTS"),
            subject_prefix=os.getenv("ALERT_SUBJECT_PREFIX", "[Order Monitor]"),
            sample_size=int(os.getenv("ALERT_SAMPLE_SIZE", "10")),
        )
        scanner = ScannerSettings(
            enabled=_env_bool("SCANNER_ENABLED", True),
            interval_minutes=int(os.getenv("SCANNER_INTERVAL_MINUTES", "15")),
            batch_size=int(os.getenv("SCANNER_BATCH_SIZE", "1000")),
        )
        settings = AppSettings(
            database=database,
            thresholds=thresholds,
            business_hours=business_hours,
            alerts=alerts,
            scanner=scanner,
        )
    except KeyError as exc:
        missing = exc.args[0]
        raise RuntimeError(f"Missing required environment variable: {missing}") from exc
    except ValidationError as exc:
        raise RuntimeError(f"Environment configuration is invalid: {exc}") from exc
    except ValueError as exc:
        raise RuntimeError(f"Environment configuration has invalid numeric value: {exc}") from exc
    LOGGER.debug("Loaded settings (timezone=%s, lookback_years=%s)", business_hours.timezone, thresholds.lookback_years)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return cached application settings."""

    return _load_from_environment()
