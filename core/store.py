"""
Party Store：所有 Party aggregate 的記憶體內集合

職責：
1. 以 id 保存 Party
2. 維護 code -> id 索引，保證 join code 唯一
3. 啟動時從 snapshot 載入
"""
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

from core.exceptions import PartyNotFound
from core.party import Party
from services.naming_service import generate_party_code, normalize_party_code

logger = logging.getLogger(__name__)


class PartyStore:

    def __init__(self):
        self._parties: Dict[str, Party] = {}
        self._code_index: Dict[str, str] = {}
        self._lock = threading.RLock()

    def create(
        self,
        factory: Callable[[str], Party],
        code_generator: Callable[[], str] = generate_party_code
    ) -> Party:
        """
        建立新 Party（含唯一的 join code）

        流程：
        1. 生成 code，和現有 Party 撞號就重抽
        2. 用 factory(code) 建立 Party
        3. 寫入 store 與 code 索引

        整段在 store lock 內，兩個同時建立的 Party 不會拿到同一個 code。
        """
        with self._lock:
            code = code_generator()
            while code in self._code_index:
                logger.warning(f"Party code collision detected, regenerating: {code}")
                code = code_generator()

            party = factory(code)
            self._parties[party.id] = party
            self._code_index[party.code] = party.id
            return party

    def get(self, party_id: Optional[str]) -> Optional[Party]:
        with self._lock:
            return self._parties.get(party_id)

    def require(self, party_id: Optional[str]) -> Party:
        """
        透過 id 取得 Party

        異常：
            PartyNotFound: Party 不存在
        """
        party = self.get(party_id)
        if party is None:
            raise PartyNotFound(party_id)
        return party

    def get_by_code(self, code: Optional[str]) -> Optional[Party]:
        with self._lock:
            party_id = self._code_index.get(normalize_party_code(code))
            return self._parties.get(party_id) if party_id else None

    def require_by_code(self, code: Optional[str]) -> Party:
        party = self.get_by_code(code)
        if party is None:
            raise PartyNotFound(f"with code {normalize_party_code(code)}")
        return party

    def code_in_use(self, code: str) -> bool:
        with self._lock:
            return normalize_party_code(code) in self._code_index

    def all(self) -> List[Party]:
        with self._lock:
            return list(self._parties.values())

    def load(self, parties: Iterable[Party]) -> int:
        """
        從 snapshot 載入 Party（啟動時呼叫一次）

        重複的 id 或 code 只保留第一筆，其餘記 warning 後跳過。

        返回：
            實際載入的 Party 數量
        """
        loaded = 0
        with self._lock:
            for party in parties:
                if party.id in self._parties or party.code in self._code_index:
                    logger.warning(f"Skipping duplicate party {party.id} (code {party.code}) in snapshot")
                    continue
                self._parties[party.id] = party
                self._code_index[party.code] = party.id
                loaded += 1
        return loaded

    def __len__(self) -> int:
        with self._lock:
            return len(self._parties)
