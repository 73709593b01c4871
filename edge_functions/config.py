"""
HTTP surface and security settings for the edge functions.
"""

from typing import List

from pydantic_settings import BaseSettings


class FunctionsConfig(BaseSettings):
    """Edge function configuration settings."""

    # API Settings
    api_title: str = "HashEBooks Edge Functions"
    api_version: str = "1.0.0"
    api_description: str = "Privileged account and notification endpoints for the HashEBooks library"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Response timing floor applied to every handler exit
    min_response_ms: int = 200

    # Rate Limiting
    rate_limit_max_attempts: int = 3
    delete_user_window_seconds: int = 900  # 15 minutes
    welcome_email_window_seconds: int = 3600  # 1 hour

    # Deleting an account that holds the admin role is refused unless enabled
    allow_admin_target_deletion: bool = False

    # Accepted clock skew for signed platform hooks
    webhook_tolerance_seconds: int = 300

    # CORS Settings
    cors_origins: List[str] = ["*"]
    cors_allow_headers: List[str] = ["authorization", "x-client-info", "apikey", "content-type"]
    cors_platform_headers: List[str] = [
        "x-supabase-client-platform",
        "x-supabase-client-platform-version",
        "x-supabase-client-runtime",
        "x-supabase-client-runtime-version",
    ]

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore"
    }


# Global config instance
config = FunctionsConfig()
