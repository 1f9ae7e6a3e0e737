from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Theater Seating Sync'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Database (any async SQLAlchemy URL; aiosqlite by default)
    DATABASE_URL_ASYNC: str = 'sqlite+aiosqlite:///./seating.db'
    DB_ECHO: bool = False

    # SSE / Broadcast Hub
    SSE_HEARTBEAT_INTERVAL: float = 30.0  # seconds between keepalive frames
    SSE_SUBSCRIBER_BUFFER_SIZE: int = 100  # full buffer == failed delivery

    # Seat sync client
    SEATING_API_BASE_URL: str = 'http://localhost:8000'
    CLIENT_DEBOUNCE_SECONDS: float = 1.0
    CLIENT_RECONNECT_DELAY_SECONDS: float = 5.0
    CLIENT_REQUEST_TIMEOUT: float = 10.0


settings = Settings()  # type: ignore
