"""
Application configuration loaded from environment variables.

Uses Pydantic Settings to:
1. Read from .env file automatically
2. Validate all required values exist at startup
3. Provide type-safe access throughout the app

Usage:
    from app.config import settings
    print(settings.DATABASE_URL)

Note: We use a custom Settings source that prefers .env values over
empty shell environment variables, so a blank SECRET_KEY="" exported by
some tool doesn't shadow the real value in the .env file.
"""

import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Environment variables set by serverless hosts. If any is present we are
# running on the hosted platform, not on a developer machine.
HOSTED_ENV_MARKERS = ("VERCEL", "AWS_LAMBDA_FUNCTION_VERSION")


class Settings(BaseSettings):
    """All application configuration in one place."""

    model_config = SettingsConfigDict(
        env_file=".env",        # Load from .env file
        env_file_encoding="utf-8",
        case_sensitive=True,     # ENV_VAR must match exactly
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def prefer_dotenv_over_empty_env(cls, data):
        """If an env var is empty but .env has a value, use the .env value."""
        from dotenv import dotenv_values

        dotenv_vals = dotenv_values(".env")
        for key, dotenv_value in dotenv_vals.items():
            if dotenv_value and (key not in data or not data.get(key)):
                data[key] = dotenv_value
        return data

    # --- Database ---
    DATABASE_URL: str

    # --- Security ---
    SECRET_KEY: str
    SESSION_COOKIE_NAME: str = "rsvp_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60
    ADMIN_BOOTSTRAP_TOKEN: str = ""  # Empty = admin bootstrap disabled

    # --- PDF rendering ---
    CHROMIUM_EXECUTABLE_PATH: str = ""
    PDF_RENDER_TIMEOUT_SECONDS: float = 60.0

    # --- Application ---
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOGGING_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:4321"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_hosted(self) -> bool:
        """True on the serverless host (or when explicitly in production)."""
        if any(os.environ.get(marker) for marker in HOSTED_ENV_MARKERS):
            return True
        return self.is_production


# Singleton instance, import this everywhere
settings = Settings()
