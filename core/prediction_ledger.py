"""
Prediction Ledger：每位成員一次、剛好五則的 commit-reveal predictions

整批驗證完才寫入：任何一則不合法，整批都不會留下紀錄。
"""
import logging
from typing import Callable, List, Optional, Sequence

from core.exceptions import (
    AlreadySubmitted,
    InvalidBatchSize,
    InvalidCommitFormat,
    InvalidRequest,
    InvalidTarget,
    NotPartyMember,
    SelfTargetNotAllowed,
    SubmissionClosed,
)
from core.party import PREDICTIONS_PER_MEMBER, Party, Prediction, PredictionDraft
from core.party_manager import advance_stage_if_ready
from models import PartyStage, PredictionClaimStatus
from services.clock_service import current_timestamp
from services.commit_service import is_valid_commit_hash
from services.naming_service import create_id

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "AES-GCM"


def _validate_draft(party: Party, author_id: str, draft: Optional[PredictionDraft]) -> PredictionDraft:
    if draft is None or not (draft.target_id and draft.ciphertext and draft.iv and draft.commit_hash):
        raise InvalidRequest("targetId, ciphertext, iv, commitHash are required")

    if not party.is_member(draft.target_id):
        raise InvalidTarget(f"invalid targetId: {draft.target_id}")

    if draft.target_id == author_id:
        raise SelfTargetNotAllowed("self-target prediction is not allowed")

    if not is_valid_commit_hash(draft.commit_hash):
        raise InvalidCommitFormat("commitHash must be 64-char sha256 hex")

    return draft


def submit_predictions(
    party: Party,
    author_id: Optional[str],
    batch: Optional[Sequence[Optional[PredictionDraft]]],
    *,
    clock: Callable[[], str] = current_timestamp,
    id_factory: Callable[[str], str] = create_id
) -> List[Prediction]:
    """
    提交 predictions（每位成員只能一次）

    前置條件（依序檢查）：
    1. Party stage 必須是 COLLECTING
    2. author 必須是成員
    3. author 尚未提交過
    4. batch 剛好五則

    每則：
    - targetId / ciphertext / iv / commitHash 必填
    - target 必須是成員，且不能是自己
    - commitHash 必須是 64 位十六進位

    效果：
    - 新增五筆 Prediction（claim_status=AVAILABLE，commit_hash 轉小寫）
    - 標記 author 已提交
    - 呼叫 advance_stage_if_ready

    返回：
        新建立的 Prediction 列表

    異常：
        SubmissionClosed, NotPartyMember, AlreadySubmitted, InvalidBatchSize,
        InvalidRequest, InvalidTarget, SelfTargetNotAllowed, InvalidCommitFormat
    """
    # 1. 前置條件
    if party.stage != PartyStage.COLLECTING:
        raise SubmissionClosed("prediction submission is closed")

    if not party.is_member(author_id):
        raise NotPartyMember(author_id, "submit predictions")

    if party.has_submitted(author_id):
        raise AlreadySubmitted("already submitted")

    if batch is None or len(batch) != PREDICTIONS_PER_MEMBER:
        raise InvalidBatchSize(f"exactly {PREDICTIONS_PER_MEMBER} predictions are required")

    # 2. 逐則驗證，全部通過才寫入
    drafts = [_validate_draft(party, author_id, draft) for draft in batch]

    created = [
        Prediction(
            id=id_factory("pred"),
            author_id=author_id,
            target_id=draft.target_id,
            ciphertext=draft.ciphertext,
            iv=draft.iv,
            algorithm=draft.algorithm or DEFAULT_ALGORITHM,
            commit_hash=draft.commit_hash.lower(),
            claim_status=PredictionClaimStatus.AVAILABLE,
            created_at=clock(),
        )
        for draft in drafts
    ]

    # 3. 寫入
    party.predictions.extend(created)
    party.submitted_by.add(author_id)
    logger.info(f"Player {author_id} submitted {len(created)} predictions in party {party.id}")

    # 4. 檢查是否可以啟動
    advance_stage_if_ready(party, clock=clock)

    return created
