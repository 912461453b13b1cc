"""
Prediction API Endpoints

Ciphertext / iv 由客戶端加密後送來，伺服器只保存與轉發，不解密。
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from api.dependencies import get_party_service
from api.errors import to_http_exception
from core.exceptions import PartyGameException
from core.party import PredictionDraft
from core.party_service import PartyService
from schemas import PredictionSubmit, PredictionSubmitResponse

router = APIRouter(prefix="/api/parties", tags=["predictions"])
logger = logging.getLogger(__name__)


@router.post(
    "/{party_id}/predictions/submit",
    response_model=PredictionSubmitResponse,
    status_code=201
)
def submit_predictions(
    party_id: str,
    submission: PredictionSubmit,
    service: PartyService = Depends(get_party_service)
):
    """
    提交五則 predictions（每位成員一次）

    返回：
        - predictionRefs: [{id, targetId}]，讓客戶端對應本地草稿
        - party: 提交者視角的 Party（最後一位提交後 stage 會變成 active）
    """
    try:
        batch = None
        if submission.predictions is not None:
            batch = [
                PredictionDraft(**item.model_dump()) if item is not None else None
                for item in submission.predictions
            ]

        result = service.submit_predictions(party_id, submission.player_id, batch)

        logger.info(
            f"Predictions accepted for player {submission.player_id} "
            f"in party {party_id} (stage={result.party.stage.value})"
        )
        return PredictionSubmitResponse(
            prediction_refs=result.prediction_refs,
            party=result.party
        )

    except PartyGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to submit predictions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
