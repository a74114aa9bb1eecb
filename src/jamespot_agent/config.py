"""Configuration settings for the application."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    DEBUG: bool = False
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical

    # Jamespot backend
    JAMESPOT_URL: str = ""
    JAMESPOT_EMAIL: str = ""
    JAMESPOT_PASSWORD: str = ""

    # Seeded as the first transcript message when set
    SYSTEM_PROMPT: str | None = None

    # LLM Configuration
    LLM_PROVIDER: str = "openai"  # Options: openai, safebrain, anthropic
    LLM_MODEL: str | None = None
    LLM_TEMPERATURE: float = 0.0
    LLM_MAX_TOKENS: int | None = None
    LLM_MAX_ROUNDTRIPS: int = 25
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None

    # Safebrain (OpenAI-compatible proxy)
    SAFEBRAIN_API_KEY: str | None = None
    SAFEBRAIN_INSTANCE: str | None = None
    SAFEBRAIN_BOT_ID: str | None = None
    SAFEBRAIN_GROUP_ID: str | None = None
    SAFEBRAIN_BASE_URL: str | None = None
    SAFEBRAIN_MODEL: str | None = None

    # Other API Keys
    UNSPLASH_ACCESS_KEY: str | None = None

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
