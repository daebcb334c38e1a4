import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import Row, select, insert, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notepad.core.errors import StoreFailure
from notepad.models.blob import BlobObject

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Blob store %s failed: %s", action, exc)
        raise StoreFailure(f"Blob store {action} failed") from exc


class CRUDBlob:
    """
    Key -> bytes store on top of a single table.

    All statements are Core-level and bypass the session identity map.
    """

    def __init__(self, model):
        self.model = model

    def get_versioned(self, db: Session, *, key: str) -> Tuple[Optional[bytes], Optional[int]]:
        with _store_errors(db, "read"):
            row = db.execute(
                select(self.model.body, self.model.version).where(self.model.key == key)
            ).first()
        if row is None:
            return None, None
        return row.body, row.version

    def get(self, db: Session, *, key: str) -> Optional[bytes]:
        body, _ = self.get_versioned(db, key=key)
        return body

    def get_text(self, db: Session, *, key: str) -> Optional[str]:
        body = self.get(db, key=key)
        if body is None:
            return None
        return body.decode("utf-8", errors="replace")

    def put(self, db: Session, *, key: str, body: bytes) -> None:
        """Unconditional write, last writer wins."""
        with _store_errors(db, "write"):
            result = db.execute(
                update(self.model)
                .where(self.model.key == key)
                .values(body=body, size=len(body), version=self.model.version + 1,
                        uploaded_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                db.execute(insert(self.model).values(key=key, body=body, size=len(body), version=1))
            db.commit()

    def put_if_version(
        self, db: Session, *, key: str, body: bytes, expected_version: Optional[int]
    ) -> bool:
        """
        Conditional write. ``expected_version`` None means the key must not
        exist yet. Returns False when another writer got there first.
        """
        with _store_errors(db, "write"):
            if expected_version is None:
                try:
                    db.execute(insert(self.model).values(key=key, body=body, size=len(body), version=1))
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return False
                return True

            result = db.execute(
                update(self.model)
                .where(self.model.key == key, self.model.version == expected_version)
                .values(body=body, size=len(body), version=expected_version + 1,
                        uploaded_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                db.rollback()
                return False
            db.commit()
            return True

    def delete(self, db: Session, *, key: str) -> bool:
        with _store_errors(db, "delete"):
            result = db.execute(
                delete(self.model)
                .where(self.model.key == key)
                .execution_options(synchronize_session=False)
            )
            db.commit()
        return result.rowcount > 0

    def list_objects(
        self, db: Session, *, exclude: Iterable[str] = (), limit: int = 100
    ) -> List[Row]:
        """Rows of (key, size, uploaded_at) ordered by key."""
        exclude = list(exclude)
        query = select(self.model.key, self.model.size, self.model.uploaded_at)
        if exclude:
            query = query.where(self.model.key.notin_(exclude))
        with _store_errors(db, "list"):
            return db.execute(query.order_by(self.model.key).limit(limit)).all()


blob = CRUDBlob(BlobObject)
