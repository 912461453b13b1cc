"""
Party 狀態機

所有 stage 變更都經過這裡。目前只有一條合法路徑：

    COLLECTING -> ACTIVE

ACTIVE 是終點，stage 永遠不會倒退。
"""
import logging

from core.exceptions import InvalidStateTransition
from core.party import Party
from models import PartyStage

logger = logging.getLogger(__name__)


class PartyStateMachine:

    ALLOWED_TRANSITIONS = {
        PartyStage.COLLECTING: {PartyStage.ACTIVE},
        PartyStage.ACTIVE: set(),
    }

    @classmethod
    def can_transition(cls, current: PartyStage, target: PartyStage) -> bool:
        return target in cls.ALLOWED_TRANSITIONS.get(current, set())

    @classmethod
    def transition(cls, party: Party, target: PartyStage, at: str) -> Party:
        """
        轉換 Party stage

        參數：
            party: Party（呼叫者必須持有該 Party 的鎖）
            target: 目標 stage
            at: 轉換時間（ISO-8601）

        異常：
            InvalidStateTransition: 不在 ALLOWED_TRANSITIONS 內
        """
        if not cls.can_transition(party.stage, target):
            raise InvalidStateTransition(
                f"Cannot move party {party.id} from {party.stage.value} to {target.value}"
            )

        previous = party.stage
        party.stage = target
        if target == PartyStage.ACTIVE:
            party.activated_at = at

        logger.info(f"Party {party.id} stage changed: {previous.value} -> {target.value}")
        return party
