from datetime import timedelta

import pytest

from arena.core.exceptions import DuplicateVote, UnknownEntry
from arena.models import Vote
from arena.services import contest_service, ledger_service

from conftest import T0, WEEK


def _vote(artwork_id, contest_id, voter="anon:abc", sequence=1):
    return Vote(
        artwork_id=artwork_id,
        contest_id=contest_id,
        voter_key=voter,
        scope_key=f"{contest_id}:{artwork_id}",
        sequence=sequence,
        voted_at=T0 + timedelta(hours=1),
    )


def test_append_and_tally(db, make_contest, make_artwork):
    contest = make_contest()
    artwork = make_artwork(contest)

    vote_id = ledger_service.append(db, _vote(artwork.id, contest.id, "anon:a"))
    ledger_service.append(db, _vote(artwork.id, contest.id, "anon:b"))
    db.commit()

    assert vote_id
    assert ledger_service.tally(db, artwork.id) == 2
    assert ledger_service.contest_vote_count(db, contest.id) == 2


def test_tallies_include_unvoted_artworks(db, make_contest, make_artwork, add_votes):
    contest = make_contest()
    first = make_artwork(contest)
    second = make_artwork(contest)
    add_votes(first, 3)

    assert ledger_service.tallies(db, contest.id) == {first.id: 3, second.id: 0}


def test_unknown_artwork(db, make_contest):
    contest = make_contest()

    with pytest.raises(UnknownEntry):
        ledger_service.append(db, _vote("missing", contest.id))


def test_artwork_from_another_contest(db, make_contest, make_artwork):
    first = make_contest()
    second = make_contest(start=T0 + WEEK, week_number=11)
    artwork = make_artwork(first)

    with pytest.raises(UnknownEntry):
        ledger_service.append(db, _vote(artwork.id, second.id))


def test_archived_contest_rejects_append(db, make_contest, make_artwork):
    contest = make_contest()
    artwork = make_artwork(contest)
    contest_service.tick(db, T0 + WEEK)

    with pytest.raises(UnknownEntry):
        ledger_service.append(db, _vote(artwork.id, contest.id))


def test_unique_constraint_is_last_resort(db, make_contest, make_artwork):
    contest = make_contest()
    artwork = make_artwork(contest)
    ledger_service.append(db, _vote(artwork.id, contest.id, sequence=1))
    db.commit()

    with pytest.raises(DuplicateVote):
        ledger_service.append(db, _vote(artwork.id, contest.id, sequence=1))
    db.rollback()

    assert ledger_service.tally(db, artwork.id) == 1


def test_voters_newest_first(db, make_contest, make_artwork):
    contest = make_contest()
    artwork = make_artwork(contest)
    early = _vote(artwork.id, contest.id, "anon:early")
    late = _vote(artwork.id, contest.id, "anon:late")
    late.voted_at = T0 + timedelta(hours=5)
    ledger_service.append(db, early)
    ledger_service.append(db, late)
    db.commit()

    assert [v.voter_key for v in ledger_service.voters(db, artwork.id)] == ["anon:late", "anon:early"]
