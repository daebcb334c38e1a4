import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Explicitly load .env file before defining Settings
env_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
load_dotenv(env_path)

class Settings(BaseSettings):
    PROJECT_NAME: str = "NotePad Share"
    API_STR: str = "/api"

    # Database
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./notepad.db"

    # Reserved keys in the blob namespace
    CONFIG_KEY: str = "_sys_admin_config"
    SHARES_DB_KEY: str = "_sys_shares.json"

    # Session
    SESSION_COOKIE_NAME: str = "np_sess"
    SESSION_HEADER_NAME: str = "X-Access-Token"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7
    SESSION_COOKIE_SECURE: bool = True

    # Notes
    NOTE_ID_LENGTH: int = 8
    CONTENT_LIST_LIMIT: int = 100

    # Share index writes are compare-and-swap; attempts before giving up
    SHARE_INDEX_MAX_RETRIES: int = 3
    # Seconds a sqlite connection waits for a competing writer's lock
    SQLITE_BUSY_TIMEOUT: float = 5.0

    LOG_LEVEL: str = "INFO"

    # Optional headless setup, see initial_data.py
    ADMIN_USERNAME: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    @property
    def RESERVED_KEYS(self) -> frozenset:
        return frozenset((self.CONFIG_KEY, self.SHARES_DB_KEY))

    class Config:
        case_sensitive = True

settings = Settings()
