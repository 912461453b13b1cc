"""
Party snapshot persistence

每個 Party 存成一列 JSON snapshot（PartyRecord）。啟動時整批載入；每次變更後
upsert 該 Party。載入時遇到損毀的資料，視為空 store，不讓服務起不來。
"""
import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.party import Party
from database import transactional
from models import PartyRecord

logger = logging.getLogger(__name__)


def _to_record(snapshot: Dict[str, Any]) -> PartyRecord:
    return PartyRecord(
        id=snapshot["id"],
        code=snapshot["code"],
        stage=snapshot["stage"],
        data=snapshot,
    )


@transactional
def upsert_snapshots(db: Session, snapshots: Iterable[Dict[str, Any]]) -> int:
    count = 0
    for snapshot in snapshots:
        db.merge(_to_record(snapshot))
        count += 1
    return count


class PartyRepository:

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def load_all(self) -> List[Party]:
        """
        載入所有 Party

        返回：
            Party 列表；任何一筆 snapshot 損毀時返回空列表
        """
        db = self._session_factory()
        try:
            records = db.query(PartyRecord).all()
            parties = [Party.model_validate(record.data) for record in records]
        except (SQLAlchemyError, ValidationError, TypeError, ValueError) as e:
            logger.error(f"Party snapshot load failed, starting with an empty store: {e}", exc_info=True)
            return []
        finally:
            db.close()

        logger.info(f"Loaded {len(parties)} parties from snapshot")
        return parties

    def save(self, snapshot: Dict[str, Any]) -> None:
        """
        Upsert 一個 Party 的 snapshot

        參數：
            snapshot: Party.model_dump(mode="json") 的結果
        """
        db = self._session_factory()
        try:
            upsert_snapshots(db, [snapshot])
        finally:
            db.close()

    def save_all(self, parties: Iterable[Party]) -> int:
        """所有 Party 在同一個 transaction 內 upsert"""
        db = self._session_factory()
        try:
            return upsert_snapshots(db, [party.model_dump(mode="json") for party in parties])
        finally:
            db.close()
