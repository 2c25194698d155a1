from datetime import timedelta

import pytest

from conftest import register
from core.database import AsyncSessionLocal
from core.exceptions import InvalidStateError, PersistenceError
from core.time import utcnow
from models.refresh_token import RevocationReason
from services.user import token as token_module
from services.user.token import MAX_TOKEN_GENERATION_ATTEMPTS, token_service


async def _issue(user_id, now=None):
    async with AsyncSessionLocal() as db:
        record = await token_service.issue(db, user_id, now=now)
        await db.commit()
        return record


async def _lookup(token):
    async with AsyncSessionLocal() as db:
        return await token_service.lookup(db, token)


async def _rotate(token):
    async with AsyncSessionLocal() as db:
        record = await token_service.lookup(db, token)
        new_record = await token_service.rotate(db, record)
        await db.commit()
        return new_record


async def _revoke(token):
    async with AsyncSessionLocal() as db:
        record = await token_service.lookup(db, token)
        await token_service.revoke(db, record, RevocationReason.REVOKED)
        await db.commit()
        return record


async def _revoke_all(user_id):
    async with AsyncSessionLocal() as db:
        count = await token_service.revoke_all_active_for_user(db, user_id, RevocationReason.LOGGED_OUT)
        await db.commit()
        return count


async def _list(user_id):
    async with AsyncSessionLocal() as db:
        return await token_service.list_for_user(db, user_id)


@pytest.fixture()
def user_id(client):
    return register(client)["user"]["id"]


def test_issue_then_lookup(run, user_id):
    record = run(_issue, user_id)
    found = run(_lookup, record.token)

    assert found is not None
    assert found.user_id == user_id
    assert found.is_active is True
    assert found.expires_at - found.created_at == timedelta(days=7)
    assert found.revoked_at is None
    assert found.reason_revoked is None
    assert found.replaced_by_token is None


def test_lookup_unknown_token(run, user_id):
    assert run(_lookup, "not-a-token") is None


def test_every_issue_creates_a_new_record(run, user_id):
    first = run(_issue, user_id)
    second = run(_issue, user_id)

    assert first.id != second.id
    assert first.token != second.token
    # 회원가입 때 발급된 것 포함
    assert len(run(_list, user_id)) == 3


def test_rotate_revokes_predecessor_and_links_successor(run, user_id):
    old = run(_issue, user_id)
    new = run(_rotate, old.token)

    old_after = run(_lookup, old.token)
    new_after = run(_lookup, new.token)

    assert old_after.is_active is False
    assert old_after.reason_revoked == "Refreshed"
    assert old_after.replaced_by_token == new.token
    assert new_after.is_active is True
    assert new_after.user_id == user_id
    assert new.token != old.token


def test_rotate_of_revoked_token_fails(run, user_id):
    old = run(_issue, user_id)
    run(_rotate, old.token)

    with pytest.raises(InvalidStateError):
        run(_rotate, old.token)


def test_revoke_sets_reason_once(run, user_id):
    record = run(_issue, user_id)
    revoked = run(_revoke, record.token)

    assert revoked.reason_revoked == "Revoked without replacement"
    assert revoked.revoked_at is not None

    with pytest.raises(InvalidStateError):
        run(_revoke, record.token)

    stored = run(_lookup, record.token)
    assert stored.reason_revoked == "Revoked without replacement"
    assert stored.replaced_by_token is None


def test_expired_token_is_inactive_and_cannot_be_revoked(run, user_id):
    record = run(_issue, user_id, utcnow() - timedelta(days=8))
    stored = run(_lookup, record.token)

    assert stored.is_expired is True
    assert stored.is_revoked is False
    assert stored.is_active is False

    with pytest.raises(InvalidStateError):
        run(_revoke, record.token)


def test_revoke_all_active_for_user(run, user_id, client):
    other_id = register(client, email="b@x.com", username="bob")["user"]["id"]
    first = run(_issue, user_id)
    second = run(_issue, user_id)
    already_revoked = run(_issue, user_id)
    run(_revoke, already_revoked.token)
    other = run(_issue, other_id)

    # 회원가입 토큰 + first + second
    assert run(_revoke_all, user_id) == 3

    for token in (first.token, second.token):
        stored = run(_lookup, token)
        assert stored.is_active is False
        assert stored.reason_revoked == "Logged out"

    assert run(_lookup, already_revoked.token).reason_revoked == "Revoked without replacement"
    assert run(_lookup, other.token).is_active is True
    assert run(_revoke_all, user_id) == 0


def test_list_for_user_newest_first(run, user_id):
    older = run(_issue, user_id, utcnow() - timedelta(days=1))
    newer = run(_issue, user_id)

    records = run(_list, user_id)
    ids = [r.id for r in records]
    assert ids.index(newer.id) < ids.index(older.id)


def test_issue_regenerates_colliding_token(run, user_id, monkeypatch):
    existing = run(_issue, user_id)
    candidates = iter([existing.token, "fresh-refresh-token"])
    monkeypatch.setattr(token_module, "create_refresh_token", lambda: next(candidates))

    record = run(_issue, user_id)

    assert record.token == "fresh-refresh-token"
    assert run(_lookup, existing.token).id == existing.id


def test_issue_gives_up_after_repeated_collisions(run, user_id, monkeypatch):
    existing = run(_issue, user_id)
    monkeypatch.setattr(token_module, "create_refresh_token", lambda: existing.token)

    with pytest.raises(PersistenceError):
        run(_issue, user_id)

    # 실패한 발급은 레코드를 남기지 않는다
    assert len(run(_list, user_id)) == 2
    assert MAX_TOKEN_GENERATION_ATTEMPTS == 3
