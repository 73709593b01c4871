"""
Configuration management using environment variables.
Handles the hosted platform endpoints, email provider and logging settings.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatformConfig(BaseSettings):
    """
    Configuration for the hosted backend platform and outbound email.
    Uses pydantic BaseSettings for environment variable management.
    """

    # Hosted platform (auth, REST, storage)
    supabase_url: str = Field(default="http://localhost:54321")
    supabase_service_role_key: str = Field(default="")
    supabase_anon_key: str = Field(default="")

    # Transactional email
    resend_api_key: str = Field(default="")
    resend_api_url: str = Field(default="https://api.resend.com")
    email_from: str = Field(default="HashEBooks <onboarding@resend.dev>")
    auth_email_from: str = Field(default="HashEBooks Support <onboarding@resend.dev>")
    send_email_hook_secret: str = Field(default="")

    # Outbound calls
    request_timeout: float = Field(default=10.0)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    debug: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Outbound calls must always be bounded."""
        if v < 1 or v > 60:
            raise ValueError("request_timeout must be between 1 and 60 seconds")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    @field_validator("supabase_url", "resend_api_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    def get_anon_key(self) -> str:
        """Public API key sent as `apikey`; the service key stands in when unset."""
        return self.supabase_anon_key or self.supabase_service_role_key


# Global configuration instance
config = PlatformConfig()
