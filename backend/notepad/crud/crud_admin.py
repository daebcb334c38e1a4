import json
import logging
import time
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from notepad.core.config import settings
from notepad.core.errors import StoreFailure
from notepad.crud.crud_blob import blob
from notepad.schemas.auth import AdminConfig

logger = logging.getLogger(__name__)


class CRUDAdmin:
    def get(self, db: Session) -> Optional[AdminConfig]:
        body = blob.get(db, key=settings.CONFIG_KEY)
        if body is None:
            return None
        try:
            return AdminConfig.model_validate(json.loads(body))
        except (ValueError, ValidationError) as exc:
            raise StoreFailure("Admin config is unreadable") from exc

    def create(self, db: Session, *, username: str, password: str) -> Optional[AdminConfig]:
        """
        Write the admin config once. Returns None if it already exists;
        there is no update path.
        """
        config = AdminConfig(username=username, password=password, created_at=int(time.time() * 1000))
        body = json.dumps(config.model_dump(by_alias=True), ensure_ascii=False).encode("utf-8")
        if not blob.put_if_version(db, key=settings.CONFIG_KEY, body=body, expected_version=None):
            return None
        logger.info("Admin account %s configured", username)
        return config

    def authenticate(self, db: Session, *, username: str, password: str) -> Optional[AdminConfig]:
        config = self.get(db)
        if config is None:
            return None
        if username != config.username or password != config.password:
            return None
        return config


admin = CRUDAdmin()
