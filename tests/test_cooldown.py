from datetime import timedelta

import pytest

from arena.config import settings
from arena.core.exceptions import DuplicateVote
from arena.services import cooldown_service

from conftest import T0

VOTER = "anon:abc"
SCOPE = "contest-1:artwork-1"


def test_eligible_without_record(db):
    assert cooldown_service.is_eligible(db, VOTER, SCOPE, T0)
    assert cooldown_service.remaining(db, VOTER, SCOPE, T0) == timedelta(0)


def test_record_blocks_until_period_elapses(db):
    cooldown_service.record_vote(db, VOTER, SCOPE, T0)
    db.commit()

    assert not cooldown_service.is_eligible(db, VOTER, SCOPE, T0 + timedelta(hours=1))
    assert not cooldown_service.is_eligible(db, VOTER, SCOPE, T0 + timedelta(hours=23, minutes=59))
    assert cooldown_service.remaining(db, VOTER, SCOPE, T0 + timedelta(hours=1)) == timedelta(hours=23)

    # now - last_vote_at >= period
    assert cooldown_service.is_eligible(db, VOTER, SCOPE, T0 + timedelta(hours=24))


def test_other_keys_are_independent(db):
    cooldown_service.record_vote(db, VOTER, SCOPE, T0)
    db.commit()

    assert cooldown_service.is_eligible(db, "anon:other", SCOPE, T0)
    assert cooldown_service.is_eligible(db, VOTER, "contest-1:artwork-2", T0)


def test_conditional_write_rejects_vote_inside_window(db):
    cooldown_service.record_vote(db, VOTER, SCOPE, T0)
    db.commit()

    with pytest.raises(DuplicateVote) as exc:
        cooldown_service.record_vote(db, VOTER, SCOPE, T0 + timedelta(hours=2))
    db.rollback()

    assert exc.value.retry_after == 22 * 3600
    assert exc.value.next_eligible_at == T0 + timedelta(hours=24)
    assert exc.value.headers() == {"Retry-After": str(22 * 3600)}

    record = cooldown_service.get_record(db, VOTER, SCOPE)
    assert record.last_vote_at == T0
    assert record.vote_count == 1


def test_record_overwrites_after_window(db):
    cooldown_service.record_vote(db, VOTER, SCOPE, T0)
    db.commit()
    cooldown_service.record_vote(db, VOTER, SCOPE, T0 + timedelta(hours=25))
    db.commit()
    db.expire_all()

    record = cooldown_service.get_record(db, VOTER, SCOPE)
    assert record.last_vote_at == T0 + timedelta(hours=25)
    assert record.vote_count == 2
    assert cooldown_service.next_eligible_at(record) == T0 + timedelta(hours=49)


def test_cooldown_period_follows_settings(db, monkeypatch):
    monkeypatch.setattr(settings, "vote_cooldown_hours", 1)
    cooldown_service.record_vote(db, VOTER, SCOPE, T0)
    db.commit()

    assert cooldown_service.is_eligible(db, VOTER, SCOPE, T0 + timedelta(hours=1))


def test_scope_key_policy(monkeypatch):
    assert cooldown_service.scope_key("c1", "a1") == "c1:a1"

    monkeypatch.setattr(settings, "cooldown_scope", "contest")
    assert cooldown_service.scope_key("c1", "a1") == "c1"
    assert cooldown_service.scope_key("c1", "a2") == "c1"
