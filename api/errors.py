"""
遊戲異常 -> HTTPException

NotFound -> 404，Forbidden / NotAuthor -> 403，其餘 -> 400。
"""
from fastapi import HTTPException

from core.exceptions import AccessDenied, PartyGameException, ResourceNotFound


def to_http_exception(exc: PartyGameException) -> HTTPException:
    if isinstance(exc, ResourceNotFound):
        status_code = 404
    elif isinstance(exc, AccessDenied):
        status_code = 403
    else:
        status_code = 400
    return HTTPException(
        status_code=status_code,
        detail={"error": exc.kind, "message": str(exc)}
    )
