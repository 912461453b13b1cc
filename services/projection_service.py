"""
Viewer projection.

Builds what one member is allowed to see of a party. Commit payloads
(ciphertext, iv, algorithm, commit hash) stay with the prediction's author;
claims, votes, scores and submission status are public to every member.
Read-only: the party is never modified.
"""
from typing import Dict

from core.party import PREDICTIONS_PER_MEMBER, Party
from schemas import ClaimView, MemberView, PartyView, PredictionView, VoteView

UNKNOWN_NAME = "Unknown"


def project_for_viewer(party: Party, viewer_id: str) -> PartyView:
    names: Dict[str, str] = {member.id: member.name for member in party.members}

    def name_of(member_id) -> str:
        return names.get(member_id, UNKNOWN_NAME)

    predictions = []
    for prediction in party.predictions:
        view = PredictionView(
            id=prediction.id,
            author_id=prediction.author_id,
            author_name=name_of(prediction.author_id),
            target_id=prediction.target_id,
            target_name=name_of(prediction.target_id),
            claim_status=prediction.claim_status,
            created_at=prediction.created_at,
        )
        if prediction.author_id == viewer_id:
            view.ciphertext = prediction.ciphertext
            view.iv = prediction.iv
            view.algorithm = prediction.algorithm
            view.commit_hash = prediction.commit_hash
        predictions.append(view)

    claims = []
    for claim in party.claims:
        prediction = party.find_prediction(claim.prediction_id)
        target_id = prediction.target_id if prediction else None
        claims.append(ClaimView(
            id=claim.id,
            prediction_id=claim.prediction_id,
            prediction_target_id=target_id,
            prediction_target_name=name_of(target_id),
            claimant_id=claim.claimant_id,
            claimant_name=name_of(claim.claimant_id),
            status=claim.status,
            revealed_text=claim.revealed_text,
            yes_votes=claim.yes_votes,
            no_votes=claim.no_votes,
            votes=[
                VoteView(
                    voter_id=vote.voter_id,
                    voter_name=name_of(vote.voter_id),
                    vote=vote.vote,
                    voted_at=vote.voted_at,
                )
                for vote in claim.votes
            ],
            created_at=claim.created_at,
            resolved_at=claim.resolved_at,
        ))

    members = [
        MemberView(
            id=member.id,
            name=member.name,
            joined_at=member.joined_at,
            submitted_predictions=party.has_submitted(member.id),
            score=party.scores.get(member.id, 0),
        )
        for member in party.members
    ]

    return PartyView(
        id=party.id,
        code=party.code,
        stage=party.stage,
        created_at=party.created_at,
        activated_at=party.activated_at,
        prediction_limit=PREDICTIONS_PER_MEMBER,
        members=members,
        predictions=predictions,
        claims=claims,
    )
