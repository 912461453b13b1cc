"""
Party aggregate

Party 是唯一的 aggregate root：Member、Prediction、Claim、Vote 都只屬於一個
Party，不跨 Party 共用。所有欄位都可以 JSON 化，方便存成 snapshot。
"""
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from models import ClaimStatus, PartyStage, PredictionClaimStatus, VoteChoice

PREDICTIONS_PER_MEMBER = 5


class Member(BaseModel):
    id: str
    name: str
    joined_at: str


class Prediction(BaseModel):
    id: str
    author_id: str
    target_id: str
    ciphertext: str
    iv: str
    algorithm: str = "AES-GCM"
    commit_hash: str
    claim_status: PredictionClaimStatus = PredictionClaimStatus.AVAILABLE
    created_at: str


class Vote(BaseModel):
    voter_id: str
    vote: VoteChoice
    voted_at: str


class Claim(BaseModel):
    id: str
    prediction_id: str
    claimant_id: str
    revealed_text: str
    salt: str
    verified: bool = True
    status: ClaimStatus = ClaimStatus.OPEN
    votes: List[Vote] = Field(default_factory=list)
    yes_votes: int = 0
    no_votes: int = 0
    created_at: str
    resolved_at: Optional[str] = None

    def has_voted(self, voter_id: str) -> bool:
        return any(vote.voter_id == voter_id for vote in self.votes)


class PredictionDraft(BaseModel):
    """
    One entry of a submission batch as sent by the client.

    Everything is optional here; the ledger decides what is missing so the
    caller gets a proper error kind instead of a schema failure.
    """
    target_id: Optional[str] = None
    ciphertext: Optional[str] = None
    iv: Optional[str] = None
    commit_hash: Optional[str] = None
    algorithm: Optional[str] = None


class Party(BaseModel):
    id: str
    code: str
    stage: PartyStage = PartyStage.COLLECTING
    created_at: str
    activated_at: Optional[str] = None
    members: List[Member] = Field(default_factory=list)
    predictions: List[Prediction] = Field(default_factory=list)
    claims: List[Claim] = Field(default_factory=list)
    scores: Dict[str, int] = Field(default_factory=dict)
    submitted_by: Set[str] = Field(default_factory=set)

    def find_member(self, member_id: Optional[str]) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def is_member(self, member_id: Optional[str]) -> bool:
        return self.find_member(member_id) is not None

    def find_prediction(self, prediction_id: Optional[str]) -> Optional[Prediction]:
        for prediction in self.predictions:
            if prediction.id == prediction_id:
                return prediction
        return None

    def find_claim(self, claim_id: Optional[str]) -> Optional[Claim]:
        for claim in self.claims:
            if claim.id == claim_id:
                return claim
        return None

    def has_submitted(self, member_id: str) -> bool:
        return member_id in self.submitted_by

    def adjust_score(self, member_id: str, delta: int) -> int:
        self.scores[member_id] = self.scores.get(member_id, 0) + delta
        return self.scores[member_id]
