"""
並發控制工具

每個 Party 一把 threading.Lock。submit / claim / vote 都是對同一個 aggregate
的 read-modify-write，必須在同一把鎖內完成；不同 Party 之間互不影響。
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class PartyLockRegistry:
    """Party id -> Lock（lazy 建立，永不移除）"""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, party_id: str) -> threading.Lock:
        """
        取得某個 Party 的鎖

        參數：
            party_id: Party id

        返回：
            同一個 party_id 永遠拿到同一把 Lock
        """
        with self._guard:
            lock = self._locks.get(party_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[party_id] = lock
            return lock

    @contextmanager
    def hold(self, party_id: str) -> Iterator[None]:
        """
        鎖定一個 Party（critical section）

        範例：
            with locks.hold(party.id):
                submit_predictions(party, author_id, batch)

        注意：
            - threading.Lock 不可重入，critical section 內不要再 hold 同一個 party
            - 等待沒有 timeout，所有 critical section 都只做記憶體內操作
        """
        lock = self.lock_for(party_id)
        with lock:
            yield
