"""
Claim Manager：揭露 prediction、投票、結算

職責：
1. create_claim：作者揭露 (text, salt)，驗證 commit 後開啟 Claim
2. cast_vote：其他成員投 yes / no
3. maybe_finalize_claim：達到多數即結算並調整分數

狀態：
    Claim:       OPEN -> APPROVED / REJECTED
    Prediction:  AVAILABLE -> PENDING -> SCORED / REJECTED

結算只會發生一次：離開 OPEN 之前一定先檢查 status，分數只在那一次轉換時調整。
"""
import logging
from typing import Callable, Optional

from core.exceptions import (
    AlreadyFinalized,
    AlreadyUsed,
    ClaimantCannotVote,
    ClaimNotFound,
    CommitMismatch,
    DuplicateVote,
    InvalidRequest,
    InvalidVote,
    NotActiveYet,
    NotAuthor,
    NotPartyMember,
    PredictionNotFound,
)
from core.party import Claim, Party, Vote
from models import ClaimStatus, PartyStage, PredictionClaimStatus, VoteChoice
from services.clock_service import current_timestamp
from services.commit_service import to_well_formed, verify_commit
from services.naming_service import create_id
from services.tally_service import calculate_vote_summary, decide_claim_outcome

logger = logging.getLogger(__name__)


def create_claim(
    party: Party,
    claimant_id: Optional[str],
    prediction_id: Optional[str],
    revealed_text: Optional[str],
    salt: Optional[str],
    *,
    clock: Callable[[], str] = current_timestamp,
    id_factory: Callable[[str], str] = create_id
) -> Claim:
    """
    開啟 Claim（揭露自己的 prediction）

    前置條件（依序檢查）：
    1. Party stage 必須是 ACTIVE
    2. claimant 必須是成員
    3. prediction 必須存在
    4. claimant 必須是 prediction 作者
    5. prediction 必須是 AVAILABLE（每則只能 claim 一次）
    6. revealed_text 與 salt 必填
    7. hash(revealed_text + "::" + salt) 必須等於 commit hash

    效果：
    - 新增 OPEN 的 Claim（沒有票）
    - prediction.claim_status -> PENDING

    異常：
        NotActiveYet, NotPartyMember, PredictionNotFound, NotAuthor,
        AlreadyUsed, InvalidRequest, CommitMismatch
    """
    if party.stage != PartyStage.ACTIVE:
        raise NotActiveYet("party is not active yet")

    if not party.is_member(claimant_id):
        raise NotPartyMember(claimant_id, "create claims")

    prediction = party.find_prediction(prediction_id)
    if prediction is None:
        raise PredictionNotFound(prediction_id)

    if prediction.author_id != claimant_id:
        raise NotAuthor("only prediction author can claim")

    if prediction.claim_status != PredictionClaimStatus.AVAILABLE:
        raise AlreadyUsed("prediction already used")

    if not revealed_text or not salt:
        raise InvalidRequest("revealedText and salt are required")

    # commit 只在這裡驗證一次，用原始字串（不 trim）
    if not verify_commit(str(revealed_text), str(salt), prediction.commit_hash):
        logger.warning(f"Commit verification failed for prediction {prediction.id} in party {party.id}")
        raise CommitMismatch("commit verification failed")

    claim = Claim(
        id=id_factory("claim"),
        prediction_id=prediction.id,
        claimant_id=claimant_id,
        revealed_text=to_well_formed(str(revealed_text)).strip(),
        salt=to_well_formed(str(salt)),
        verified=True,
        status=ClaimStatus.OPEN,
        created_at=clock(),
    )
    party.claims.append(claim)
    prediction.claim_status = PredictionClaimStatus.PENDING

    logger.info(f"Claim {claim.id} opened by {claimant_id} for prediction {prediction.id}")
    return claim


def cast_vote(
    party: Party,
    claim_id: Optional[str],
    voter_id: Optional[str],
    vote: Optional[str],
    *,
    clock: Callable[[], str] = current_timestamp
) -> Claim:
    """
    對 OPEN 的 Claim 投票，投完立即嘗試結算

    前置條件（依序檢查）：
    1. voter 必須是成員
    2. claim 必須存在
    3. claim 必須是 OPEN
    4. voter 不能是 claimant
    5. vote 必須是 "yes" 或 "no"
    6. 同一位 voter 只能投一次

    返回：
        更新後的 Claim（status 可能已經結算）

    異常：
        NotPartyMember, ClaimNotFound, AlreadyFinalized, ClaimantCannotVote,
        InvalidVote, DuplicateVote
    """
    if not party.is_member(voter_id):
        raise NotPartyMember(voter_id, "vote")

    claim = party.find_claim(claim_id)
    if claim is None:
        raise ClaimNotFound(claim_id)

    if claim.status != ClaimStatus.OPEN:
        raise AlreadyFinalized("claim is already finalized")

    if claim.claimant_id == voter_id:
        raise ClaimantCannotVote("claimant cannot vote on their own claim")

    try:
        choice = VoteChoice(vote)
    except ValueError:
        raise InvalidVote("vote must be yes or no")

    if claim.has_voted(voter_id):
        raise DuplicateVote("already voted")

    claim.votes.append(Vote(voter_id=voter_id, vote=choice, voted_at=clock()))
    maybe_finalize_claim(party, claim, clock=clock)
    return claim


def maybe_finalize_claim(
    party: Party,
    claim: Claim,
    *,
    clock: Callable[[], str] = current_timestamp
) -> Optional[ClaimStatus]:
    """
    依目前票數嘗試結算 Claim

    規則（eligible = 成員數 - 1，majority = eligible // 2 + 1）：
    - yes >= majority：APPROVED，prediction -> SCORED，claimant +1
    - no >= majority 或所有人都投完：REJECTED，prediction -> REJECTED，claimant -1
    - 其他：維持 OPEN

    冪等：claim 不是 OPEN 時直接返回 None，不會重複加減分。

    返回：
        這次結算出的狀態，沒有結算則為 None
    """
    if claim.status != ClaimStatus.OPEN:
        return None

    prediction = party.find_prediction(claim.prediction_id)
    if prediction is None:
        logger.warning(f"Claim {claim.id} references missing prediction {claim.prediction_id}")
        return None

    yes, no = calculate_vote_summary(claim.votes)
    claim.yes_votes = yes
    claim.no_votes = no

    eligible_voters = len(party.members) - 1
    outcome = decide_claim_outcome(yes, no, len(claim.votes), eligible_voters)
    if outcome is None:
        return None

    claim.status = outcome
    claim.resolved_at = clock()
    if outcome == ClaimStatus.APPROVED:
        prediction.claim_status = PredictionClaimStatus.SCORED
        score = party.adjust_score(claim.claimant_id, 1)
    else:
        prediction.claim_status = PredictionClaimStatus.REJECTED
        score = party.adjust_score(claim.claimant_id, -1)

    logger.info(
        f"Claim {claim.id} {outcome.value} ({yes} yes / {no} no), "
        f"{claim.claimant_id} score is now {score}"
    )
    return outcome
