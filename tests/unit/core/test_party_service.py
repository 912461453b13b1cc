"""Tests for PartyService: full game flow, side effects, locking."""
import threading

import pytest

from core.exceptions import (
    ClaimantCannotVote,
    CommitMismatch,
    DuplicateVote,
    NotPartyMember,
    PartyNotFound,
    StageLocked,
)
from core.party_service import PartyService
from core.store import PartyStore
from models import ClaimStatus, PartyStage

from conftest import RecordingNotifier, fixed_clock


class ExplodingRepository:
    def save(self, snapshot):
        raise RuntimeError("disk full")


class ExplodingNotifier:
    def notify_party_changed(self, party_id):
        raise ConnectionError("socket gone")


def test_end_to_end_scenario(service, store, make_batch, prediction_of):
    view = service.create_party("p1", "P1")
    assert view.code == "ABC234"
    party_id = view.id

    service.join_party("ABC234", "p2", "P2")
    service.join_party("abc234", "p3", "P3")

    secrets = {}
    members = ["p1", "p2", "p3"]
    for index, author_id in enumerate(members):
        drafts, pairs = make_batch(author_id, [m for m in members if m != author_id])
        result = service.submit_predictions(party_id, author_id, drafts)
        assert len(result.prediction_refs) == 5
        for ref, (text, salt) in zip(result.prediction_refs, pairs):
            secrets[ref.id] = (author_id, text, salt)

        expected = PartyStage.ACTIVE if index == len(members) - 1 else PartyStage.COLLECTING
        assert result.party.stage == expected

    prediction_id, text, salt = prediction_of(secrets, "p1")
    claim = service.create_claim(party_id, "p1", prediction_id, text, salt)

    first = service.cast_vote(party_id, claim.claim_id, "p2", "yes")
    assert first.status == ClaimStatus.OPEN
    assert first.yes_votes == 1

    second = service.cast_vote(party_id, claim.claim_id, "p3", "yes")
    assert second.status == ClaimStatus.APPROVED
    assert (second.yes_votes, second.no_votes) == (2, 0)

    final = service.get_party(party_id, "p1")
    scores = {member.id: member.score for member in final.members}
    assert scores == {"p1": 1, "p2": 0, "p3": 0}


def test_commit_mismatch_creates_no_claim(service, active_party, prediction_of):
    party_id, secrets = active_party
    prediction_id, text, salt = prediction_of(secrets, "p1")

    with pytest.raises(CommitMismatch):
        service.create_claim(party_id, "p1", prediction_id, text, "wrong-salt")

    assert service.get_party(party_id, "p1").claims == []


def test_claimant_vote_and_duplicate_vote(service, active_party, prediction_of):
    party_id, secrets = active_party
    prediction_id, text, salt = prediction_of(secrets, "p1")
    claim = service.create_claim(party_id, "p1", prediction_id, text, salt)

    with pytest.raises(ClaimantCannotVote):
        service.cast_vote(party_id, claim.claim_id, "p1", "yes")

    service.cast_vote(party_id, claim.claim_id, "p2", "no")
    with pytest.raises(DuplicateVote):
        service.cast_vote(party_id, claim.claim_id, "p2", "no")


def test_get_party_is_members_only(service):
    view = service.create_party("p1", "P1")

    with pytest.raises(NotPartyMember):
        service.get_party(view.id, "stranger")
    with pytest.raises(NotPartyMember):
        service.get_party(view.id, "")
    with pytest.raises(PartyNotFound):
        service.get_party("party_missing", "p1")


def test_join_unknown_code_and_locked_party(service, active_party):
    with pytest.raises(PartyNotFound):
        service.join_party("ZZZZZZ", "p9", "Nine")
    with pytest.raises(StageLocked):
        service.join_party("ABC234", "p9", "Nine")


def test_every_mutation_persists_and_notifies(service, repository, notifier):
    view = service.create_party("p1", "P1")
    service.join_party(view.code, "p2", "P2")

    assert notifier.notified == [view.id, view.id]
    assert [snapshot["id"] for snapshot in repository.saved] == [view.id, view.id]
    assert [m["id"] for m in repository.saved[-1]["members"]] == ["p1", "p2"]


def test_failed_mutation_has_no_side_effects(service, repository, notifier):
    view = service.create_party("p1", "P1")
    repository.saved.clear()
    notifier.notified.clear()

    with pytest.raises(NotPartyMember):
        service.submit_predictions(view.id, "stranger", [])

    assert repository.saved == []
    assert notifier.notified == []


def test_side_effect_failures_do_not_reach_the_caller(make_batch, caplog):
    service = PartyService(
        PartyStore(),
        repository=ExplodingRepository(),
        notifier=ExplodingNotifier(),
        clock=fixed_clock,
    )

    view = service.create_party("p1", "P1")
    service.join_party(view.code, "p2", "P2")
    drafts, _ = make_batch("p1", ["p2"])
    result = service.submit_predictions(view.id, "p1", drafts)

    assert len(result.prediction_refs) == 5
    assert [member.id for member in service.get_party(view.id, "p1").members] == ["p1", "p2"]
    assert "Post-commit hook persist failed" in caplog.text
    assert "Post-commit hook notify failed" in caplog.text


def test_concurrent_votes_finalize_exactly_once(store, make_batch):
    members = [f"p{index}" for index in range(1, 10)]
    service = PartyService(store, notifier=RecordingNotifier(), clock=fixed_clock)
    view = service.create_party("p1", "P1")
    for member_id in members[1:]:
        service.join_party(view.code, member_id, member_id)

    secrets = {}
    for author_id in members:
        drafts, pairs = make_batch(author_id, [m for m in members if m != author_id])
        result = service.submit_predictions(view.id, author_id, drafts)
        for ref, pair in zip(result.prediction_refs, pairs):
            secrets.setdefault(author_id, (ref.id, pair))

    prediction_id, (text, salt) = secrets["p1"]
    claim = service.create_claim(view.id, "p1", prediction_id, text, salt)

    errors = []
    barrier = threading.Barrier(len(members) - 1)

    def vote(voter_id):
        barrier.wait()
        try:
            service.cast_vote(view.id, claim.claim_id, voter_id, "yes")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=vote, args=(voter_id,)) for voter_id in members[1:]]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # 8 eligible voters, majority 5: the rest arrive after approval
    party = store.get(view.id)
    assert party.claims[0].status == ClaimStatus.APPROVED
    assert len(party.claims[0].votes) == 5
    assert len(errors) == 3
    assert party.scores["p1"] == 1


def test_flush_writes_every_party(service):
    class Collector:
        def __init__(self):
            self.parties = []

        def save_all(self, parties):
            self.parties = list(parties)
            return len(self.parties)

    service.create_party("p1", "P1")
    collector = Collector()

    assert service.flush(collector) == 1
    assert collector.parties[0].members[0].id == "p1"
