import hmac
import json
import logging
import time
import uuid
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from notepad.core.config import settings
from notepad.core.errors import (
    InvalidLink, LinkNotFound, LinkExpired, LinkExhausted, SourceMissing, StoreFailure,
)
from notepad.crud.crud_blob import blob
from notepad.schemas.share import (
    ShareDescriptor, ShareCreate, ShareInfo, ShareResolution, ResolveState,
)

logger = logging.getLogger(__name__)

ShareEntries = Dict[str, ShareDescriptor]


def now_ms() -> int:
    return int(time.time() * 1000)


class ShareIndex:
    """
    The share index is one JSON record in the blob store, token -> descriptor.

    Every mutation rewrites the whole record. Writes are conditional on the
    version that was read; when another writer got in between, the mutation
    is applied again to a fresh read.
    """

    def __init__(self, db: Session, *, key: Optional[str] = None, max_retries: Optional[int] = None):
        self.db = db
        self.key = key or settings.SHARES_DB_KEY
        self.max_retries = max_retries or settings.SHARE_INDEX_MAX_RETRIES

    def load(self) -> Tuple[ShareEntries, Optional[int]]:
        body, version = blob.get_versioned(self.db, key=self.key)
        if body is None:
            return {}, None
        try:
            raw = json.loads(body)
            if not isinstance(raw, dict):
                raise ValueError("share index is not an object")
            entries = {token: ShareDescriptor.model_validate(info) for token, info in raw.items()}
        except (ValueError, ValidationError) as exc:
            logger.error("Share index %s is unreadable: %s", self.key, exc)
            raise StoreFailure("Share index is unreadable") from exc
        return entries, version

    def scan(self) -> ShareEntries:
        entries, _ = self.load()
        return entries

    def get(self, token: str) -> Optional[ShareDescriptor]:
        return self.scan().get(token)

    def mutate(self, fn: Callable[[ShareEntries], bool]) -> ShareEntries:
        """
        Read-modify-write. ``fn`` edits the entries in place and returns
        whether anything changed; nothing is written when it returns False.
        """
        for attempt in range(1, self.max_retries + 1):
            entries, version = self.load()
            if not fn(entries):
                return entries
            if blob.put_if_version(self.db, key=self.key, body=self._dump(entries), expected_version=version):
                return entries
            logger.warning("Share index changed concurrently, retrying (%d/%d)", attempt, self.max_retries)
        raise StoreFailure("Share index update kept conflicting with other writers")

    def put(self, token: str, descriptor: ShareDescriptor) -> None:
        def _put(entries: ShareEntries) -> bool:
            entries[token] = descriptor
            return True

        self.mutate(_put)

    def delete(self, token: str) -> bool:
        return self.delete_many([token]) > 0

    def delete_many(self, tokens: Iterable[str]) -> int:
        tokens = set(tokens)
        return self.delete_where(lambda token, _: token in tokens)

    def delete_where(self, predicate: Callable[[str, ShareDescriptor], bool]) -> int:
        removed = []

        def _delete(entries: ShareEntries) -> bool:
            removed.clear()
            for token in [t for t, d in entries.items() if predicate(t, d)]:
                del entries[token]
                removed.append(token)
            return bool(removed)

        self.mutate(_delete)
        return len(removed)

    @staticmethod
    def _dump(entries: ShareEntries) -> bytes:
        data = {token: d.model_dump(by_alias=True) for token, d in entries.items()}
        return json.dumps(data, ensure_ascii=False).encode("utf-8")


class CRUDShare:
    def index(self, db: Session) -> ShareIndex:
        return ShareIndex(db)

    def get_by_token(self, db: Session, *, token: str) -> Optional[ShareDescriptor]:
        return self.index(db).get(token)

    def create(self, db: Session, *, obj_in: ShareCreate) -> str:
        token = str(uuid.uuid4())
        created = now_ms()
        expire_seconds = obj_in.expire or 0

        descriptor = ShareDescriptor(
            file_id=obj_in.file_id,
            password=obj_in.password or "",
            expire=created + expire_seconds * 1000 if expire_seconds else None,
            max_visits=obj_in.max_visits or 0,
            views=0,
            created=created,
        )
        self.index(db).put(token, descriptor)
        logger.info("Share %s created for %s", token, obj_in.file_id)
        return token

    def resolve(
        self, db: Session, *, token: Optional[str], password: Optional[str] = None, raw: bool = False
    ) -> ShareResolution:
        """
        Validate a share token and load its content.

        Order matters: expiry, then the visit limit, then the password, so a
        locked link that is also used up reports the limit. Does not count
        the view; callers schedule ``record_view`` once content is served.
        """
        if not token:
            raise InvalidLink()

        descriptor = self.get_by_token(db, token=token)
        if descriptor is None:
            raise LinkNotFound()

        now = now_ms()
        if not descriptor.is_reachable(now):
            if descriptor.is_expired(now):
                raise LinkExpired()
            raise LinkExhausted()

        if descriptor.password and not _password_matches(password, descriptor.password):
            return ShareResolution(
                state=ResolveState.NEEDS_PASSWORD,
                token=token,
                file_id=descriptor.file_id,
                raw=raw,
                password_rejected=password is not None,
            )

        content = None
        if descriptor.file_id not in settings.RESERVED_KEYS:
            content = blob.get_text(db, key=descriptor.file_id)
        if content is None:
            raise SourceMissing()

        return ShareResolution(
            state=ResolveState.CONTENT,
            token=token,
            file_id=descriptor.file_id,
            raw=raw,
            content=content,
        )

    def record_view(self, db: Session, *, token: str) -> bool:
        counted = []

        def _increment(entries: ShareEntries) -> bool:
            counted.clear()
            descriptor = entries.get(token)
            if descriptor is None:
                return False
            entries[token] = descriptor.model_copy(update={"views": descriptor.views + 1})
            counted.append(token)
            return True

        self.index(db).mutate(_increment)
        return bool(counted)

    def list_active(self, db: Session) -> List[ShareInfo]:
        """
        Live shares in index order. Time-expired entries are pruned from the
        index as a side effect; visit-exhausted ones are kept.
        """
        now = now_ms()
        pruned = []

        def _prune(entries: ShareEntries) -> bool:
            pruned.clear()
            for token in [t for t, d in entries.items() if d.expire is not None and d.expire < now]:
                del entries[token]
                pruned.append(token)
            return bool(pruned)

        entries = self.index(db).mutate(_prune)
        if pruned:
            logger.info("Pruned %d expired share(s)", len(pruned))
        return [
            ShareInfo(token=token, **descriptor.model_dump())
            for token, descriptor in entries.items()
        ]

    def remove(self, db: Session, *, token: str) -> bool:
        removed = self.index(db).delete(token)
        if removed:
            logger.info("Share %s deleted", token)
        return removed

    def remove_many(self, db: Session, *, tokens: Iterable[str]) -> int:
        count = self.index(db).delete_many(tokens)
        logger.info("Batch delete removed %d share(s)", count)
        return count

    def remove_by_file(self, db: Session, *, file_id: str) -> int:
        count = self.index(db).delete_where(lambda _, d: d.file_id == file_id)
        if count:
            logger.info("Removed %d share(s) pointing at %s", count, file_id)
        return count


def _password_matches(supplied: Optional[str], expected: str) -> bool:
    if supplied is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def record_view_detached(session_factory: Callable[[], Session], token: str) -> None:
    """
    Post-response view increment. Runs on its own session against a fresh
    read of the index; failures are logged and never reach the client.
    """
    db = session_factory()
    try:
        share.record_view(db, token=token)
    except StoreFailure as exc:
        logger.warning("View count update for share %s failed: %s", token, exc)
    finally:
        db.close()


share = CRUDShare()
