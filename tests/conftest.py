"""
Pytest configuration and shared fixtures for the iknowur backend tests.

Testing Standards:
- Unit tests go in tests/unit/, HTTP-level tests in tests/integration/
- Post-commit hooks run inline (no executor) so their effects are visible
  right after the call returns
- Commit hashes are computed with the real commit service
"""
from typing import Dict, List, Tuple

import pytest

from core import party_manager
from core.party import Party, PredictionDraft
from core.party_service import PartyService
from core.store import PartyStore
from services.commit_service import hash_commit

FIXED_TIMESTAMP = "2026-10-18T12:00:00.000Z"


def fixed_clock() -> str:
    return FIXED_TIMESTAMP


class RecordingRepository:
    """Stands in for PartyRepository; keeps every snapshot it is asked to save."""

    def __init__(self):
        self.saved: List[dict] = []

    def save(self, snapshot):
        self.saved.append(snapshot)


class RecordingNotifier:
    def __init__(self):
        self.notified: List[str] = []

    def notify_party_changed(self, party_id):
        self.notified.append(party_id)


@pytest.fixture
def store() -> PartyStore:
    return PartyStore()


@pytest.fixture
def repository() -> RecordingRepository:
    return RecordingRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store, repository, notifier) -> PartyService:
    return PartyService(
        store,
        repository=repository,
        notifier=notifier,
        clock=fixed_clock,
        code_generator=lambda: "ABC234",
    )


@pytest.fixture
def make_party(store):
    """Build a party directly on the store: first id creates, the rest join."""

    def _make(*member_ids: str) -> Party:
        creator, *others = member_ids
        party = party_manager.create_party(store, creator, creator.upper(), clock=fixed_clock)
        for member_id in others:
            party_manager.join_party(party, member_id, member_id.upper(), clock=fixed_clock)
        return party

    return _make


@pytest.fixture
def make_batch():
    """
    Build five drafts for ``author_id`` rotating over ``target_ids``.

    Returns (drafts, secrets) where secrets[i] is the (text, salt) pair
    committed in drafts[i].
    """

    def _make(author_id: str, target_ids: List[str]) -> Tuple[List[PredictionDraft], List[Tuple[str, str]]]:
        drafts = []
        secrets = []
        for index in range(5):
            target_id = target_ids[index % len(target_ids)]
            text = f"{author_id} thinks {target_id} will do thing #{index}"
            salt = f"salt-{author_id}-{index}"
            drafts.append(PredictionDraft(
                target_id=target_id,
                ciphertext=f"cipher-{author_id}-{index}",
                iv=f"iv-{index}",
                commit_hash=hash_commit(text, salt),
            ))
            secrets.append((text, salt))
        return drafts, secrets

    return _make


@pytest.fixture
def active_party(service, make_batch):
    """
    P1 creates, P2 and P3 join, everyone submits; the party is active.

    Returns (party_id, secrets) where secrets maps prediction id to its
    (author_id, text, salt).
    """
    members = ["p1", "p2", "p3"]
    view = service.create_party("p1", "Player One")
    party_id = view.id
    service.join_party(view.code, "p2", "Player Two")
    service.join_party(view.code, "p3", "Player Three")

    secrets: Dict[str, Tuple[str, str, str]] = {}
    for author_id in members:
        targets = [member for member in members if member != author_id]
        drafts, pairs = make_batch(author_id, targets)
        result = service.submit_predictions(party_id, author_id, drafts)
        for ref, (text, salt) in zip(result.prediction_refs, pairs):
            secrets[ref.id] = (author_id, text, salt)

    return party_id, secrets


def first_prediction_of(secrets, author_id: str) -> Tuple[str, str, str]:
    for prediction_id, (author, text, salt) in secrets.items():
        if author == author_id:
            return prediction_id, text, salt
    raise AssertionError(f"no prediction for {author_id}")


@pytest.fixture
def prediction_of():
    return first_prediction_of
