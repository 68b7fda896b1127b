"""
Configuration management using Pydantic Settings
Loads and validates environment variables from the environment or a .env file
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


MIB = 1024 * 1024


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Every value has a default except the certificate ARN, which the
    deploy command checks before starting a run.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # AWS Configuration
    aws_access_key_id: str = Field(
        default="",
        description="AWS Access Key ID (empty = default credential chain)"
    )
    aws_secret_access_key: str = Field(
        default="",
        description="AWS Secret Access Key (empty = default credential chain)"
    )
    aws_region: str = Field(
        default="us-east-1",
        description="Region of the website origin bucket"
    )
    ssl_cert_arn: str = Field(
        default="",
        description="ACM certificate ARN (must live in us-east-1 for CloudFront)"
    )

    # Deployment limits
    max_upload_size_bytes: int = Field(
        default=50 * MIB,
        gt=0,
        description="Ceiling on the total size of the content folder"
    )
    index_document: str = Field(
        default="index.html",
        description="Index document, also used as the error document"
    )
    upload_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Concurrent uploads while publishing content"
    )

    # CloudFront teardown polling
    edge_teardown_timeout_seconds: int = Field(
        default=900,
        gt=0,
        description="Upper bound on waiting for a disabled distribution to settle"
    )
    edge_wait_timeout_seconds: int = Field(
        default=1800,
        gt=0,
        description="Upper bound on waiting for a new distribution to deploy (deploy --wait)"
    )
    edge_poll_min_seconds: float = Field(
        default=5,
        ge=0,
        description="First backoff interval when polling distribution status"
    )
    edge_poll_max_seconds: float = Field(
        default=60,
        ge=0,
        description="Largest backoff interval when polling distribution status"
    )
    caller_reference_prefix: str = Field(
        default="sitedeploy",
        description="Prefix of the CloudFront CallerReference idempotency token"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_dir: str = Field(
        default="logs",
        description="Directory for daily log files"
    )
    log_to_file: bool = Field(
        default=True,
        description="Also write logs to a daily file in log_dir"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("aws_region", "index_document", "caller_reference_prefix")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value must not be empty")
        return v

    @model_validator(mode="after")
    def validate_poll_window(self) -> "Settings":
        if self.edge_poll_max_seconds < self.edge_poll_min_seconds:
            raise ValueError("edge_poll_max_seconds must be >= edge_poll_min_seconds")
        return self

    def has_static_credentials(self) -> bool:
        """Check if explicit AWS keys are configured"""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the settings singleton instance.
    Loads configuration from the environment (and .env if present) on first call.

    Returns:
        Settings instance

    Raises:
        pydantic.ValidationError: If environment variables are invalid
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings():
    """
    Reset the settings singleton (useful for testing)
    """
    global _settings
    _settings = None
