"""
Application Settings

This module provides a centralized settings class that loads environment
variables from the .env file and makes them available throughout the application.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load the .env file from the project root
# The project root is one level up from the veilsync folder
PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings:
    """
    Centralized settings class that provides access to all environment variables.
    Usage:
        from veilsync.settings import settings
        api_key = settings.GEMINI_API_KEY
    """

    # Google Gemini API Key
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    ANALYSIS_TEMPERATURE: float = _get_float("ANALYSIS_TEMPERATURE", 0.4)

    # Login gate (empty = any login is accepted)
    ACCESS_CODE: str = os.getenv("ACCESS_CODE", "")

    # Update checker
    UPDATE_CHECK_URL: str = os.getenv(
        "UPDATE_CHECK_URL",
        "https://api.github.com/repos/mvsdal/PhantomV-VeilSync/commits/main"
    )
    UPDATE_CHECK_INTERVAL_SECONDS: float = _get_float("UPDATE_CHECK_INTERVAL_SECONDS", 10 * 60)
    UPDATE_REQUEST_TIMEOUT_SECONDS: float = _get_float("UPDATE_REQUEST_TIMEOUT_SECONDS", 15)

    # Session
    INACTIVITY_TIMEOUT_SECONDS: float = _get_float("INACTIVITY_TIMEOUT_SECONDS", 5 * 60)

    # Multiplier applied to every scripted stage delay (0 = instant)
    SYNC_TIME_SCALE: float = _get_float("SYNC_TIME_SCALE", 1.0)

    # Frontend origins allowed by CORS (comma separated)
    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # Debug mode
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()


    @classmethod
    def validate(cls) -> None:
        """Validate that all required environment variables are set."""
        errors = []

        if not cls.GEMINI_API_KEY:
            errors.append("GEMINI_API_KEY is not set in .env file")
        if cls.SYNC_TIME_SCALE < 0:
            errors.append("SYNC_TIME_SCALE must not be negative")
        if cls.INACTIVITY_TIMEOUT_SECONDS <= 0:
            errors.append("INACTIVITY_TIMEOUT_SECONDS must be positive")
        if cls.UPDATE_CHECK_INTERVAL_SECONDS <= 0:
            errors.append("UPDATE_CHECK_INTERVAL_SECONDS must be positive")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


# Create a singleton instance for easy import
settings = Settings()
