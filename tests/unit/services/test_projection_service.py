"""Unit tests for the per-viewer projection."""
from core import claim_manager, prediction_ledger
from models import PartyStage
from services.projection_service import project_for_viewer


def _submit_all(party, make_batch):
    secrets = {}
    member_ids = [member.id for member in party.members]
    for author_id in member_ids:
        targets = [member_id for member_id in member_ids if member_id != author_id]
        drafts, pairs = make_batch(author_id, targets)
        created = prediction_ledger.submit_predictions(party, author_id, drafts)
        for prediction, pair in zip(created, pairs):
            secrets[prediction.id] = pair
    return secrets


def test_author_sees_own_commit_payload_others_do_not(make_party, make_batch):
    party = make_party("p1", "p2")
    _submit_all(party, make_batch)

    view = project_for_viewer(party, "p1")

    own = [prediction for prediction in view.predictions if prediction.author_id == "p1"]
    other = [prediction for prediction in view.predictions if prediction.author_id == "p2"]
    assert len(own) == 5 and len(other) == 5
    for prediction in own:
        assert prediction.ciphertext is not None
        assert prediction.iv is not None
        assert prediction.algorithm == "AES-GCM"
        assert prediction.commit_hash is not None
    for prediction in other:
        assert prediction.ciphertext is None
        assert prediction.iv is None
        assert prediction.algorithm is None
        assert prediction.commit_hash is None
        assert prediction.author_name == "P2"
        assert prediction.target_name == "P1"


def test_members_show_scores_and_submission_status(make_party, make_batch):
    party = make_party("p1", "p2")
    drafts, _ = make_batch("p1", ["p2"])
    prediction_ledger.submit_predictions(party, "p1", drafts)
    party.scores["p2"] = -1

    view = project_for_viewer(party, "p2")

    members = {member.id: member for member in view.members}
    assert members["p1"].submitted_predictions is True
    assert members["p2"].submitted_predictions is False
    assert members["p2"].score == -1
    assert view.prediction_limit == 5
    assert view.stage == PartyStage.COLLECTING


def test_claims_and_votes_are_public(make_party, make_batch):
    party = make_party("p1", "p2", "p3")
    secrets = _submit_all(party, make_batch)
    prediction = next(p for p in party.predictions if p.author_id == "p1")
    text, salt = secrets[prediction.id]
    claim = claim_manager.create_claim(party, "p1", prediction.id, text, salt)
    claim_manager.cast_vote(party, claim.id, "p2", "yes")

    view = project_for_viewer(party, "p3")

    assert len(view.claims) == 1
    claim_view = view.claims[0]
    assert claim_view.revealed_text == text
    assert claim_view.claimant_name == "P1"
    assert claim_view.prediction_target_id == prediction.target_id
    assert [vote.voter_name for vote in claim_view.votes] == ["P2"]
    assert claim_view.yes_votes == 1


def test_projection_does_not_modify_party(make_party, make_batch):
    party = make_party("p1", "p2")
    _submit_all(party, make_batch)
    before = party.model_dump()

    project_for_viewer(party, "p2")

    assert party.model_dump() == before


def test_camel_case_serialisation(make_party):
    party = make_party("p1", "p2")
    data = project_for_viewer(party, "p1").model_dump(by_alias=True, mode="json")
    assert data["predictionLimit"] == 5
    assert data["members"][0]["submittedPredictions"] is False
    assert "createdAt" in data
