import os
from functools import lru_cache

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Service settings read from the environment (and `.env`).

    Values are read when the object is built, so tests can set env vars
    and construct a fresh instance.
    """

    def __init__(self):
        self.database_url: str = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
        self.database_name: str = os.getenv("DATABASE_NAME", "chatroom")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.port: int = int(os.getenv("PORT", "5000"))
        self.reaper_interval_ms: int = int(os.getenv("REAPER_INTERVAL_MS", "15000"))
        self.stale_after_ms: int = int(os.getenv("STALE_AFTER_MS", "10000"))
        self.reaper_enabled: bool = os.getenv("REAPER_ENABLED", "true").lower() in {"1", "true", "yes"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
