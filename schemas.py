"""
Request / response schemas

JSON 一律使用 camelCase（playerId, commitHash ...），Python 端維持 snake_case。
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models import ClaimStatus, PartyStage, PredictionClaimStatus, VoteChoice


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============ Requests ============

class PartyCreate(CamelModel):
    player_id: Optional[str] = None
    name: Optional[str] = None


class PartyJoin(CamelModel):
    party_code: Optional[str] = None
    player_id: Optional[str] = None
    name: Optional[str] = None


class PredictionDraftIn(CamelModel):
    target_id: Optional[str] = None
    ciphertext: Optional[str] = None
    iv: Optional[str] = None
    commit_hash: Optional[str] = None
    algorithm: Optional[str] = None


class PredictionSubmit(CamelModel):
    player_id: Optional[str] = None
    predictions: Optional[List[Optional[PredictionDraftIn]]] = None


class ClaimCreate(CamelModel):
    player_id: Optional[str] = None
    prediction_id: Optional[str] = None
    revealed_text: Optional[str] = None
    salt: Optional[str] = None


class VoteCast(CamelModel):
    player_id: Optional[str] = None
    vote: Optional[str] = None


# ============ Views ============

class MemberView(CamelModel):
    id: str
    name: str
    joined_at: str
    submitted_predictions: bool
    score: int


class PredictionView(CamelModel):
    id: str
    author_id: str
    author_name: str
    target_id: str
    target_name: str
    claim_status: PredictionClaimStatus
    created_at: str
    # 只有作者本人看得到
    ciphertext: Optional[str] = None
    iv: Optional[str] = None
    algorithm: Optional[str] = None
    commit_hash: Optional[str] = None


class VoteView(CamelModel):
    voter_id: str
    voter_name: str
    vote: VoteChoice
    voted_at: str


class ClaimView(CamelModel):
    id: str
    prediction_id: str
    prediction_target_id: Optional[str] = None
    prediction_target_name: str
    claimant_id: str
    claimant_name: str
    status: ClaimStatus
    revealed_text: str
    yes_votes: int
    no_votes: int
    votes: List[VoteView]
    created_at: str
    resolved_at: Optional[str] = None


class PartyView(CamelModel):
    id: str
    code: str
    stage: PartyStage
    created_at: str
    activated_at: Optional[str] = None
    prediction_limit: int
    members: List[MemberView]
    predictions: List[PredictionView]
    claims: List[ClaimView]


# ============ Responses ============

class PartyResponse(CamelModel):
    party: PartyView
    player_id: str


class PredictionRef(CamelModel):
    id: str
    target_id: str


class PredictionSubmitResponse(CamelModel):
    prediction_refs: List[PredictionRef]
    party: PartyView


class ClaimResponse(CamelModel):
    claim_id: str
    party: PartyView


class VoteResponse(CamelModel):
    status: ClaimStatus
    yes_votes: int
    no_votes: int
    party: PartyView


class HealthResponse(CamelModel):
    ok: bool
    at: str
