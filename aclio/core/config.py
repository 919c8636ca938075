# aclio/core/config.py

from pathlib import Path
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Aclio API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    PORT: int = 3001

    # LLM Proxy Configuration
    GROQ_API_KEY: Optional[str] = None
    LLM_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_S: float = 60.0

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:3000",
        "http://127.0.0.1:8080",
    ]

    # Local storage (key-value store) Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./aclio.db"

    # Client Configuration
    API_BASE_URL: str = "https://aclio-production.up.railway.app/api"
    CLIENT_TIMEOUT_S: float = 60.0
    OFFLINE_MAX_RETRIES: int = 3

    @field_validator("GROQ_API_KEY")
    @classmethod
    def blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def api_key_configured(self) -> bool:
        return bool(self.GROQ_API_KEY)

# Create a global settings instance
settings = Settings()
