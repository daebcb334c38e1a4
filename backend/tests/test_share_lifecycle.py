import pytest

from notepad import crud
from notepad.core.errors import (
    InvalidLink, LinkExhausted, LinkExpired, LinkNotFound, SourceMissing, StoreFailure,
)
from notepad.crud import crud_share
from notepad.crud.crud_share import ShareIndex, now_ms
from notepad.schemas import ResolveState, ShareCreate, ShareDescriptor


def put_share(db, token, file_id="note.js", **fields):
    fields.setdefault("created", now_ms())
    ShareIndex(db).put(token, ShareDescriptor(file_id=file_id, **fields))


def save_note(db, key="note.js", text="console.log(1)"):
    crud.blob.put(db, key=key, body=text.encode("utf-8"))


def test_create_writes_fresh_descriptor(db):
    before = now_ms()
    token = crud.share.create(
        db, obj_in=ShareCreate(fileId="note.js", password="pw", expire=3600, maxVisits=2)
    )

    descriptor = crud.share.get_by_token(db, token=token)
    assert descriptor.file_id == "note.js"
    assert descriptor.password == "pw"
    assert descriptor.views == 0
    assert descriptor.max_visits == 2
    assert before <= descriptor.created <= now_ms()
    assert descriptor.expire == descriptor.created + 3600 * 1000


def test_create_without_expiry_never_expires(db):
    save_note(db)
    token = crud.share.create(db, obj_in=ShareCreate(fileId="note.js", expire=0, maxVisits=0))

    descriptor = crud.share.get_by_token(db, token=token)
    assert descriptor.expire is None
    assert not descriptor.is_expired(now_ms() + 10 ** 12)
    assert crud.share.resolve(db, token=token).state == ResolveState.CONTENT


def test_create_generates_distinct_tokens(db):
    tokens = {crud.share.create(db, obj_in=ShareCreate(fileId="note.js")) for _ in range(5)}
    assert len(tokens) == 5
    assert set(ShareIndex(db).scan()) == tokens


def test_resolve_missing_token(db):
    with pytest.raises(InvalidLink) as exc:
        crud.share.resolve(db, token=None)
    assert exc.value.status_code == 400


def test_resolve_unknown_token(db):
    with pytest.raises(LinkNotFound) as exc:
        crud.share.resolve(db, token="nope")
    assert exc.value.status_code == 404


def test_expired_wins_over_remaining_views(db):
    save_note(db)
    put_share(db, "t", expire=now_ms() - 1000, max_visits=5, views=0)

    with pytest.raises(LinkExpired) as exc:
        crud.share.resolve(db, token="t")
    assert exc.value.status_code == 410


def test_exhausted_without_password(db):
    save_note(db)
    put_share(db, "t", max_visits=1, views=1)

    with pytest.raises(LinkExhausted) as exc:
        crud.share.resolve(db, token="t")
    assert exc.value.status_code == 410


def test_exhausted_reported_before_password_prompt(db):
    save_note(db)
    put_share(db, "t", password="secret", max_visits=3, views=3)

    with pytest.raises(LinkExhausted):
        crud.share.resolve(db, token="t")


def test_password_flow(db):
    save_note(db, text="hidden")
    put_share(db, "t", password="secret")

    locked = crud.share.resolve(db, token="t")
    assert locked.state == ResolveState.NEEDS_PASSWORD
    assert not locked.password_rejected

    wrong = crud.share.resolve(db, token="t", password="wrong")
    assert wrong.state == ResolveState.NEEDS_PASSWORD
    assert wrong.password_rejected

    unlocked = crud.share.resolve(db, token="t", password="secret")
    assert unlocked.state == ResolveState.CONTENT
    assert unlocked.content == "hidden"
    assert crud.share.get_by_token(db, token="t").views == 0


def test_source_missing_does_not_consume_view(db):
    put_share(db, "t", file_id="gone.js", max_visits=1)

    with pytest.raises(SourceMissing) as exc:
        crud.share.resolve(db, token="t")
    assert exc.value.status_code == 404
    assert crud.share.get_by_token(db, token="t").views == 0


def test_reserved_keys_are_never_served(db, admin):
    put_share(db, "t", file_id="_sys_admin_config")

    with pytest.raises(SourceMissing):
        crud.share.resolve(db, token="t")


def test_raw_flag_is_carried_through(db):
    save_note(db)
    put_share(db, "t")

    assert crud.share.resolve(db, token="t", raw=True).raw
    assert not crud.share.resolve(db, token="t").raw


def test_record_view_increments_live_index(db):
    put_share(db, "t")

    assert crud.share.record_view(db, token="t")
    assert crud.share.record_view(db, token="t")
    assert crud.share.get_by_token(db, token="t").views == 2


def test_record_view_skips_deleted_share(db):
    put_share(db, "t")
    crud.share.remove(db, token="t")

    assert not crud.share.record_view(db, token="t")
    assert ShareIndex(db).scan() == {}


def test_record_view_detached_swallows_store_failure(session_factory, monkeypatch):
    def boom(db, *, token):
        raise StoreFailure("down")

    monkeypatch.setattr(crud_share.share, "record_view", boom)
    crud_share.record_view_detached(session_factory, "t")


def test_list_prunes_expired_once(db):
    now = now_ms()
    put_share(db, "old", expire=now - 1000)
    put_share(db, "live", expire=now + 60000)
    put_share(db, "used", max_visits=1, views=1)

    first = crud.share.list_active(db)
    assert [s.token for s in first] == ["live", "used"]
    assert "old" not in ShareIndex(db).scan()

    second = crud.share.list_active(db)
    assert second == first


def test_list_without_expired_entries_does_not_write(db):
    put_share(db, "live")
    _, version = crud.blob.get_versioned(db, key="_sys_shares.json")

    crud.share.list_active(db)

    assert crud.blob.get_versioned(db, key="_sys_shares.json")[1] == version


def test_delete_is_idempotent(db):
    put_share(db, "t")

    assert crud.share.remove(db, token="t")
    assert not crud.share.remove(db, token="t")
    assert crud.share.get_by_token(db, token="t") is None


def test_batch_delete_with_partial_existence(db):
    put_share(db, "a")
    put_share(db, "b")
    put_share(db, "c")

    assert crud.share.remove_many(db, tokens=["a", "c", "missing"]) == 2
    assert set(ShareIndex(db).scan()) == {"b"}


def test_cascade_delete_by_file_id(db):
    put_share(db, "a", file_id="f1")
    put_share(db, "b", file_id="f1")
    put_share(db, "c", file_id="f2")

    assert crud.share.remove_by_file(db, file_id="f1") == 2
    assert set(ShareIndex(db).scan()) == {"c"}


def test_mutation_retries_after_concurrent_write(db, session_factory):
    put_share(db, "a", file_id="a.js")
    other = session_factory()
    calls = []

    def add_c(entries):
        calls.append(len(entries))
        if len(calls) == 1:
            crud.share.create(other, obj_in=ShareCreate(fileId="b.js"))
        entries["c"] = ShareDescriptor(file_id="c.js", created=now_ms())
        return True

    try:
        ShareIndex(db).mutate(add_c)
    finally:
        other.close()

    assert calls == [1, 2]
    files = sorted(d.file_id for d in ShareIndex(db).scan().values())
    assert files == ["a.js", "b.js", "c.js"]


def test_mutation_gives_up_after_max_retries(db, session_factory):
    put_share(db, "a")
    other = session_factory()

    def always_conflicting(entries):
        crud.share.create(other, obj_in=ShareCreate(fileId="x.js"))
        entries.clear()
        return True

    try:
        with pytest.raises(StoreFailure):
            ShareIndex(db, max_retries=2).mutate(always_conflicting)
    finally:
        other.close()


def test_unreadable_index_is_a_store_failure(db):
    crud.blob.put(db, key="_sys_shares.json", body=b"not json")

    with pytest.raises(StoreFailure):
        crud.share.list_active(db)


def test_reachability_matches_expiry_and_visit_limit():
    now = now_ms()
    assert ShareDescriptor(file_id="f", created=0).is_reachable(now)
    assert ShareDescriptor(file_id="f", expire=now + 1000, max_visits=2, views=1, created=0).is_reachable(now)
    assert not ShareDescriptor(file_id="f", expire=now - 1, created=0).is_reachable(now)
    assert not ShareDescriptor(file_id="f", max_visits=2, views=2, created=0).is_reachable(now)
    assert ShareDescriptor(file_id="f", max_visits=0, views=99, created=0).is_reachable(now)
