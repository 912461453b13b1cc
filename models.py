"""
Enumerations and the persistence table.

The Party aggregate itself lives in memory (core/party.py); the database only
keeps one JSON snapshot per party so the store can be rebuilt on startup.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, JSON, String

from database import Base


class PartyStage(str, enum.Enum):
    """Party 階段：只能 COLLECTING -> ACTIVE"""
    COLLECTING = "collecting"
    ACTIVE = "active"


class PredictionClaimStatus(str, enum.Enum):
    """Prediction 的 claim 狀態：AVAILABLE -> PENDING -> SCORED / REJECTED"""
    AVAILABLE = "available"
    PENDING = "pending"
    SCORED = "scored"
    REJECTED = "rejected"


class ClaimStatus(str, enum.Enum):
    """Claim 狀態：OPEN -> APPROVED / REJECTED"""
    OPEN = "open"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoteChoice(str, enum.Enum):
    YES = "yes"
    NO = "no"


def _utcnow():
    return datetime.now(timezone.utc)


class PartyRecord(Base):
    __tablename__ = "parties"

    id = Column(String(64), primary_key=True)
    code = Column(String(6), unique=True, index=True, nullable=False)
    stage = Column(String(16), nullable=False)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
