from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie, APIKeyHeader
from sqlalchemy.orm import Session

from notepad import crud
from notepad.core.config import settings
from notepad.core.security import verify_session_token
from notepad.db.session import SessionLocal
from notepad.schemas.auth import AdminConfig

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
session_header = APIKeyHeader(name=settings.SESSION_HEADER_NAME, auto_error=False)


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    # Background tasks outlive the request session and open their own
    return SessionLocal


def get_admin_config(db: Session = Depends(get_db)) -> Optional[AdminConfig]:
    return crud.admin.get(db)


def get_session_token(
    cookie_token: Optional[str] = Depends(session_cookie),
    header_token: Optional[str] = Depends(session_header),
) -> Optional[str]:
    # Cookie wins over the header
    return cookie_token or header_token


def get_current_admin(
    token: Optional[str] = Depends(get_session_token),
    config: Optional[AdminConfig] = Depends(get_admin_config),
) -> AdminConfig:
    if not verify_session_token(token, config):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return config
