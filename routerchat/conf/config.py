"""Configuration module for the chat service."""

import os
from pathlib import Path
from typing import Optional


class ConfigMeta(type):
    """Metaclass to prevent direct instantiation and enforce singleton attributes."""

    def __call__(cls, *args: object, **kwargs: object) -> None:
        """Prevent direct instantiation."""
        raise TypeError("Config cannot be instantiated directly. Use class attributes.")


class Config(metaclass=ConfigMeta):
    """Singleton configuration class. Access attributes directly via the class."""

    # =========================================================================
    # Path Configuration
    # =========================================================================
    BASE_DIR: Path = Path(__file__).parent.parent.parent

    # =========================================================================
    # Server Configuration
    # =========================================================================
    FLASK_PORT: int = int(os.getenv("PORT", "5000"))
    FLASK_HOST: str = os.getenv("HOST", "0.0.0.0")

    # =========================================================================
    # Database Configuration
    # =========================================================================
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'routerchat.db'}"
    )

    # =========================================================================
    # Identity Provider Configuration
    # =========================================================================
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    IDENTITY_TIMEOUT: float = float(os.getenv("IDENTITY_TIMEOUT", "10"))

    # =========================================================================
    # Completion Provider Configuration
    # =========================================================================
    OPENROUTER_API_BASE_URL: str = os.getenv(
        "OPENROUTER_API_BASE_URL", "https://openrouter.ai/api/v1"
    )
    OPENROUTER_REFERER: str = os.getenv("OPENROUTER_REFERER", "http://localhost:5000")
    OPENROUTER_APP_TITLE: str = "AI Chat Platform"

    # Name of the settings row holding the provider credential
    OPENROUTER_API_KEY_SETTING: str = "openrouter_api_key"
    # Only used to seed the settings store on startup
    OPENROUTER_API_KEY: Optional[str] = os.getenv("OPENROUTER_API_KEY")

    PROVIDER_MAX_TOKENS: int = int(os.getenv("PROVIDER_MAX_TOKENS", "1000"))
    PROVIDER_TEMPERATURE: float = float(os.getenv("PROVIDER_TEMPERATURE", "0.7"))
    PROVIDER_TIMEOUT: float = float(os.getenv("PROVIDER_TIMEOUT", "60"))

    # =========================================================================
    # Chat Configuration
    # =========================================================================
    SESSION_TITLE_MAX_LENGTH: int = 50
    DEFAULT_SESSION_TITLE: str = "New Chat"
    TOKEN_ESTIMATE_CHARS_PER_TOKEN: int = 4  # Rough estimate for user turns
