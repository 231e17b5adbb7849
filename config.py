from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Towing guide configuration.
    Loads from environment variables or .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Generative backend
    GOOGLE_API_KEY: str = ""
    DEFAULT_MODEL: str = "gemini-2.5-flash"  # or llama3.2 through a local Ollama
    LLM_TEMPERATURE: float = 0.2
    SUGGESTION_TEMPERATURE: float = 0.0
    LLM_MAX_RETRIES: int = 0

    # Search box suggestions
    SUGGESTION_LIMIT: int = 50

    # auto.dev plate decoder
    AUTODEV_API_KEY: str = ""
    AUTODEV_API_URL: str = "https://api.auto.dev/v1/plate-decoder"
    PLATE_DECODER_TIMEOUT: float = 15.0

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"


settings = Settings()
