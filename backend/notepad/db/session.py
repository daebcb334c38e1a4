from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from notepad.core.config import settings


def engine_options(uri: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if uri.startswith("sqlite"):
        # Background view counts write from worker threads; share index
        # writers wait on the file lock instead of failing with "database is locked"
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT,
        }
    return options


engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, **engine_options(settings.SQLALCHEMY_DATABASE_URI))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
