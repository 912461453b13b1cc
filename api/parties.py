"""
Party API Endpoints

職責：
1. 建立 Party
2. 查詢 Party（依查詢者做 projection）
"""
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from api.dependencies import get_party_service
from api.errors import to_http_exception
from core.exceptions import PartyGameException
from core.party_service import PartyService
from schemas import PartyCreate, PartyResponse

router = APIRouter(prefix="/api/parties", tags=["parties"])
logger = logging.getLogger(__name__)


@router.post("", response_model=PartyResponse, status_code=201)
def create_party(party_data: PartyCreate, service: PartyService = Depends(get_party_service)):
    """
    建立 Party（建立者為第一位成員）

    返回：
        - party: 建立者視角的 Party
        - playerId: 建立者 id
    """
    try:
        party = service.create_party(party_data.player_id, party_data.name)
        return PartyResponse(party=party, player_id=party_data.player_id)

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create party: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{party_id}", response_model=PartyResponse)
def get_party(
    party_id: str,
    player_id: str = Query("", alias="playerId"),
    service: PartyService = Depends(get_party_service)
):
    """
    取得 Party 目前狀態

    前置條件：
    - 查詢者必須是成員（否則 403）

    客戶端收到 partyChanged 通知後應該重新呼叫這個 endpoint，這裡永遠是最新狀態。
    """
    try:
        party = service.get_party(party_id, player_id)
        return PartyResponse(party=party, player_id=player_id)

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get party {party_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
