"""
Player API Endpoints

職責：
1. 玩家以 join code 加入 Party
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from api.dependencies import get_party_service
from api.errors import to_http_exception
from core.exceptions import InvalidRequest, PartyGameException
from core.party_service import PartyService
from schemas import PartyJoin, PartyResponse

router = APIRouter(prefix="/api/parties", tags=["players"])
logger = logging.getLogger(__name__)


@router.post("/join", response_model=PartyResponse)
def join_party(player_data: PartyJoin, service: PartyService = Depends(get_party_service)):
    """
    加入 Party（玩家 endpoint）

    前置條件：
    - Party 必須存在
    - Party stage 必須是 collecting

    流程：
    1. 透過 join code 找到 Party（不分大小寫）
    2. 新玩家加入；同一個 playerId 再次加入只更新名稱
    3. 返回該玩家視角的 Party
    """
    try:
        if not player_data.party_code or not player_data.player_id or not player_data.name:
            raise InvalidRequest("partyCode, playerId, name are required")

        party = service.join_party(player_data.party_code, player_data.player_id, player_data.name)
        return PartyResponse(party=party, player_id=player_data.player_id)

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to join party: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
