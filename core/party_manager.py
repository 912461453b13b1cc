"""
Party Manager：管理 Party 的成員與 stage

職責：
1. 建立 Party（建立者為唯一成員）
2. 加入 Party（或以同一 id 重新加入並更新名稱）
3. 判斷是否可以從 COLLECTING 進入 ACTIVE

所有函式只操作記憶體內的 aggregate；鎖與 side effect 由 PartyService 負責。
"""
import logging
from typing import Callable, Optional

from core.exceptions import InvalidRequest, StageLocked
from core.party import Member, Party
from core.state_machine import PartyStateMachine
from core.store import PartyStore
from models import PartyStage
from services.clock_service import current_timestamp
from services.naming_service import clean_display_name, create_id, generate_party_code

logger = logging.getLogger(__name__)


def create_party(
    store: PartyStore,
    player_id: Optional[str],
    name: Optional[str],
    *,
    clock: Callable[[], str] = current_timestamp,
    code_generator: Callable[[], str] = generate_party_code,
    id_factory: Callable[[str], str] = create_id
) -> Party:
    """
    建立新 Party（建立者自動成為成員，分數 0）

    異常：
        InvalidRequest: 缺少 player_id 或 name
    """
    clean_name = clean_display_name(name)
    if not player_id or not clean_name:
        raise InvalidRequest("playerId and name are required")

    def build(code: str) -> Party:
        now = clock()
        return Party(
            id=id_factory("party"),
            code=code,
            stage=PartyStage.COLLECTING,
            created_at=now,
            members=[Member(id=player_id, name=clean_name, joined_at=now)],
            scores={player_id: 0},
        )

    party = store.create(build, code_generator)
    logger.info(f"Created party {party.id} with code {party.code} by {player_id}")
    return party


def join_party(
    party: Party,
    player_id: Optional[str],
    name: Optional[str],
    *,
    clock: Callable[[], str] = current_timestamp
) -> Member:
    """
    加入 Party

    前置條件：
    - Party stage 必須是 COLLECTING（啟動後連重新加入都不行）

    行為：
    - 新成員：加入成員列表，分數 0
    - 已是成員：只更新顯示名稱（冪等）

    異常：
        InvalidRequest: 缺少 player_id 或 name
        StageLocked: Party 已經啟動
    """
    clean_name = clean_display_name(name)
    if not player_id or not clean_name:
        raise InvalidRequest("partyCode, playerId, name are required")

    if party.stage != PartyStage.COLLECTING:
        raise StageLocked(f"Party {party.code} is already active, joining is locked")

    member = party.find_member(player_id)
    if member is not None:
        member.name = clean_name
        logger.info(f"Player {player_id} rejoined party {party.id} as {clean_name}")
        return member

    member = Member(id=player_id, name=clean_name, joined_at=clock())
    party.members.append(member)
    party.scores.setdefault(player_id, 0)
    logger.info(f"Player {player_id} ({clean_name}) joined party {party.id}")
    return member


def is_ready_to_activate(party: Party) -> bool:
    """COLLECTING、至少 2 人、每個人都交了 predictions"""
    if party.stage != PartyStage.COLLECTING:
        return False
    if len(party.members) < 2:
        return False
    return all(party.has_submitted(member.id) for member in party.members)


def advance_stage_if_ready(
    party: Party,
    *,
    clock: Callable[[], str] = current_timestamp
) -> bool:
    """
    條件滿足時把 Party 轉成 ACTIVE

    每次成功提交 predictions 後呼叫；條件不滿足或已是 ACTIVE 時不做任何事。

    返回：
        True 如果這次呼叫觸發了轉換
    """
    if not is_ready_to_activate(party):
        return False

    PartyStateMachine.transition(party, PartyStage.ACTIVE, clock())
    return True
