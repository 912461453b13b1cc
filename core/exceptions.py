"""
自定義異常類別

Every rule violation a caller can trigger is one of these. Each carries a
``kind`` (the stable error name the API returns) and is always raised before
the party is touched, so a failed request never leaves a half-applied change.
"""


class PartyGameException(Exception):
    """所有遊戲異常的基類"""
    kind = "InvalidRequest"


class InvalidRequest(PartyGameException):
    """缺少必要欄位"""
    kind = "InvalidRequest"


# ============ 查無資料 ============

class ResourceNotFound(PartyGameException):
    kind = "NotFound"


class PartyNotFound(ResourceNotFound):
    def __init__(self, party_ref):
        self.party_ref = party_ref
        super().__init__(f"Party {party_ref} not found")


class PredictionNotFound(ResourceNotFound):
    def __init__(self, prediction_id):
        self.prediction_id = prediction_id
        super().__init__(f"Prediction {prediction_id} not found")


class ClaimNotFound(ResourceNotFound):
    def __init__(self, claim_id):
        self.claim_id = claim_id
        super().__init__(f"Claim {claim_id} not found")


# ============ 權限 ============

class AccessDenied(PartyGameException):
    kind = "Forbidden"


class NotPartyMember(AccessDenied):
    """只有 party 成員可以操作"""
    def __init__(self, player_id, action="access this party"):
        self.player_id = player_id
        super().__init__(f"Only party members can {action}")


class NotAuthor(AccessDenied):
    """只有 prediction 作者可以 claim"""
    kind = "NotAuthor"


# ============ 階段相關 ============

class StageError(PartyGameException):
    """目前階段不允許此操作"""
    pass


class StageLocked(StageError):
    """Party 已啟動，不再接受加入"""
    kind = "StageLocked"


class SubmissionClosed(StageError):
    kind = "SubmissionClosed"


class NotActiveYet(StageError):
    kind = "NotActiveYet"


class InvalidStateTransition(StageError):
    """非法的狀態轉換（stage machine 內部保護）"""
    kind = "InvalidStateTransition"


# ============ Prediction 相關 ============

class AlreadySubmitted(PartyGameException):
    kind = "AlreadySubmitted"


class InvalidBatchSize(PartyGameException):
    kind = "InvalidBatchSize"


class InvalidTarget(PartyGameException):
    kind = "InvalidTarget"


class SelfTargetNotAllowed(PartyGameException):
    kind = "SelfTargetNotAllowed"


class InvalidCommitFormat(PartyGameException):
    kind = "InvalidCommitFormat"


# ============ Claim 相關 ============

class AlreadyUsed(PartyGameException):
    """每個 prediction 只能 claim 一次（不論結果）"""
    kind = "AlreadyUsed"


class CommitMismatch(PartyGameException):
    """揭露內容與 commit hash 不符"""
    kind = "CommitMismatch"


# ============ Vote 相關 ============

class AlreadyFinalized(PartyGameException):
    kind = "AlreadyFinalized"


class ClaimantCannotVote(PartyGameException):
    kind = "ClaimantCannotVote"


class InvalidVote(PartyGameException):
    kind = "InvalidVote"


class DuplicateVote(PartyGameException):
    kind = "DuplicateVote"
