"""
Claim API Endpoints

重點：
1. create_claim 只在建立時驗證一次 commit
2. cast_vote 投完立即嘗試結算，達到多數就不必等所有人
3. 結果一律以回傳的 party 為準，通知只是提示客戶端重新讀取
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from api.dependencies import get_party_service
from api.errors import to_http_exception
from core.exceptions import PartyGameException
from core.party_service import PartyService
from schemas import ClaimCreate, ClaimResponse, VoteCast, VoteResponse

router = APIRouter(prefix="/api/parties", tags=["claims"])
logger = logging.getLogger(__name__)


@router.post("/{party_id}/claims", response_model=ClaimResponse, status_code=201)
def create_claim(
    party_id: str,
    claim_data: ClaimCreate,
    service: PartyService = Depends(get_party_service)
):
    """
    揭露自己的 prediction，開啟 Claim

    前置條件：
    - Party stage 必須是 active
    - 只有 prediction 作者可以 claim，且每則只能一次
    - hash(revealedText + "::" + salt) 必須等於當初的 commitHash

    返回：
        - claimId
        - party: claimant 視角的 Party
    """
    try:
        result = service.create_claim(
            party_id,
            claim_data.player_id,
            claim_data.prediction_id,
            claim_data.revealed_text,
            claim_data.salt
        )
        return ClaimResponse(claim_id=result.claim_id, party=result.party)

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create claim: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{party_id}/claims/{claim_id}/votes", response_model=VoteResponse)
def cast_vote(
    party_id: str,
    claim_id: str,
    vote_data: VoteCast,
    service: PartyService = Depends(get_party_service)
):
    """
    對 Claim 投票（yes / no）

    返回：
        - status: open / approved / rejected
        - yesVotes, noVotes
        - party: 投票者視角的 Party
    """
    try:
        result = service.cast_vote(party_id, claim_id, vote_data.player_id, vote_data.vote)
        return VoteResponse(
            status=result.status,
            yes_votes=result.yes_votes,
            no_votes=result.no_votes,
            party=result.party
        )

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to cast vote: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
