"""
計票服務：Claim 的多數決邏輯

純計算邏輯，不改變 Claim 的狀態（由 claim_manager 負責）
"""
from typing import Iterable, Optional, Tuple

from models import ClaimStatus, VoteChoice


def calculate_vote_summary(votes: Iterable) -> Tuple[int, int]:
    """
    統計 yes / no 票數

    參數：
        votes: Vote 列表

    返回：
        (yes, no)
    """
    yes = 0
    no = 0
    for vote in votes:
        if vote.vote == VoteChoice.YES:
            yes += 1
        elif vote.vote == VoteChoice.NO:
            no += 1
    return yes, no


def majority_threshold(eligible_voters: int) -> int:
    """
    嚴格多數門檻

    範例：
        1 位可投票者 -> 1
        2 位 -> 2
        4 位 -> 3
    """
    return eligible_voters // 2 + 1


def decide_claim_outcome(
    yes: int,
    no: int,
    votes_cast: int,
    eligible_voters: int
) -> Optional[ClaimStatus]:
    """
    依目前票數決定 Claim 結果

    規則：
    - yes 達到多數：APPROVED（不必等所有人投完）
    - no 達到多數，或所有可投票者都投完了：REJECTED
    - 其他：None，繼續等票

    參數：
        yes: yes 票數
        no: no 票數
        votes_cast: 已投票數
        eligible_voters: 可投票人數（成員數 - 1，claimant 不能投）

    返回：
        ClaimStatus.APPROVED / ClaimStatus.REJECTED / None
    """
    majority = majority_threshold(eligible_voters)

    if yes >= majority:
        return ClaimStatus.APPROVED

    all_voted = votes_cast >= eligible_voters
    if no >= majority or all_voted:
        return ClaimStatus.REJECTED

    return None
