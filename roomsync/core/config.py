"""
Application settings.
Loaded from environment variables or a local .env file.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Redis (the shared store every client reads and writes)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_URL: Optional[str] = None  # e.g. redis://cache:6379/0, wins over host/port/db
    REDIS_MAX_CONNECTIONS: int = 10
    KEY_PREFIX: str = "roomsync:"
    SESSION_TTL: int = 86400  # 24 hours in seconds

    # Demo-grade password digest. Not a security control.
    PASSWORD_SALT: str = "_salted"

    # Synchronizer timing, in seconds
    MESSAGE_POLL_INTERVAL: float = 1.0
    ROOM_LIST_POLL_INTERVAL: float = 2.0
    HEARTBEAT_INTERVAL: float = 5.0

    # Keep only the newest N messages per room. Unset keeps everything.
    MESSAGE_RETENTION: Optional[int] = None

    # Optional
    DEBUG: bool = False
    PROJECT_NAME: str = "RoomSync Chat"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @property
    def redis_target(self) -> str:
        if self.REDIS_URL:
            return self.REDIS_URL
        return f"{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
