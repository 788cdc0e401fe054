"""Centralized configuration management for the CBR Gateway.

This module provides a centralized configuration system that supports:
- Environment variable overrides
- Default values with validation
- Type safety using Pydantic
- Hierarchical configuration structure
"""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cbr_gateway.domain.services.date_coercion import DEFAULT_INPUT_FORMATS, DEFAULT_TIMEZONE


class SchemaEndpointsConfig(BaseModel):
    """WSDL endpoints of the bank's web services."""

    daily: str = Field(
        default="http://www.cbr.ru/DailyInfoWebServ/DailyInfo.asmx?WSDL",
        description="Daily data: currency and precious metal rates",
    )

    regions: str = Field(
        default="http://www.cbr.ru/RegionWebServ/regional.asmx?WSDL",
        description="Regional statistics: bank counts and details",
    )

    organizations: str = Field(
        default="http://www.cbr.ru/CreditInfoWebServ/CreditOrgInfo.asmx?WSDL",
        description="Credit organizations directory and search",
    )

    market: str = Field(
        default="http://www.cbr.ru/secinfo/secinfo.asmx?WSDL",
        description="Securities market information",
    )


class TimeoutConfig(BaseModel):
    """Timeout-related configuration."""

    wsdl_timeout: float = Field(
        default=30.0, gt=0, le=600, description="Timeout for loading WSDL documents in seconds"
    )

    operation_timeout: float = Field(
        default=30.0, gt=0, le=600, description="Timeout for remote operations in seconds"
    )


class DateConfig(BaseModel):
    """Date coercion configuration."""

    timezone: str = Field(
        default=DEFAULT_TIMEZONE, description="Timezone used to read Unix timestamps"
    )

    input_formats: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INPUT_FORMATS),
        min_length=1,
        description="strptime formats accepted for human-entered dates, tried in order",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is known to the tz database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v


class ResultConfig(BaseModel):
    """Result adapter configuration."""

    result_suffix: str = Field(
        default="Result", description="Suffix of the field holding a method's result"
    )

    xml_payload_fields: list[str] = Field(
        default_factory=lambda: ["any", "_value_1"],
        min_length=1,
        description="Sub-fields of the result that may carry the XML payload, in lookup order",
    )


class RateConfig(BaseModel):
    """Currency rate lookup configuration."""

    precision: int = Field(default=4, ge=0, le=10, description="Decimal places of unit rates")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    category: str = Field(default="cbr", description="Category tag attached to call logs")

    log_file_max_bytes: int = Field(
        default=10_485_760,  # 10MB
        ge=1_048_576,  # 1MB
        le=104_857_600,  # 100MB
        description="Maximum log file size in bytes",
    )

    log_backup_count: int = Field(
        default=5, ge=1, le=100, description="Number of backup log files to keep"
    )


class GatewayConfig(BaseSettings):
    """Main gateway configuration.

    All configuration values can be overridden using environment variables
    with the prefix CBR_GATEWAY_ (e.g., CBR_GATEWAY_TIMEOUTS__OPERATION_TIMEOUT).
    """

    model_config = SettingsConfigDict(
        env_prefix="CBR_GATEWAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-configurations
    schemas: SchemaEndpointsConfig = Field(default_factory=SchemaEndpointsConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    dates: DateConfig = Field(default_factory=DateConfig)
    results: ResultConfig = Field(default_factory=ResultConfig)
    rates: RateConfig = Field(default_factory=RateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Feature flags
    enable_metrics: bool = Field(default=True, description="Record Prometheus call metrics")

    def endpoints(self) -> dict[str, str]:
        """Get the schema identifier to endpoint mapping."""
        return self.schemas.model_dump()


@lru_cache(maxsize=1)
def get_config() -> GatewayConfig:
    """Get the singleton configuration instance.

    This function returns a cached configuration instance that reads from
    environment variables and configuration files.

    Returns:
        GatewayConfig: The configuration instance
    """
    return GatewayConfig()


def reload_config() -> GatewayConfig:
    """Reload configuration from environment.

    This clears the cache and creates a new configuration instance.

    Returns:
        GatewayConfig: The new configuration instance
    """
    get_config.cache_clear()
    return get_config()
