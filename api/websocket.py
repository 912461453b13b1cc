"""
WebSocket：Party 變更通知

客戶端連上 /ws 後送出 {"type": "joinParty", "partyId": ...} 訂閱某個 Party。
每次 Party 變更，伺服器廣播 {"type": "partyChanged", "partyId", "at"}，
客戶端收到後重新 GET /api/parties/{partyId}。

通知是 best-effort：送不到就算了，狀態永遠可以重新讀取。
"""
import asyncio
import logging
import threading
from typing import Dict, Optional, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from api.dependencies import get_party_service
from core.party_service import PartyService
from services.clock_service import current_timestamp

router = APIRouter(tags=["websocket"])
logger = logging.getLogger(__name__)


class PartyConnectionManager:
    """
    Party id -> 訂閱中的 WebSocket

    notify_party_changed 會從 request 的 worker thread 呼叫，
    所以把 broadcast 排進 event loop，不在呼叫端等待。
    """

    def __init__(self):
        self._rooms: Dict[str, Set[WebSocket]] = {}
        self._guard = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def is_bound(self) -> bool:
        return self._loop is not None and not self._loop.is_closed()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def subscribe(self, party_id: str, websocket: WebSocket) -> None:
        with self._guard:
            self._rooms.setdefault(party_id, set()).add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._guard:
            for party_id in list(self._rooms):
                sockets = self._rooms[party_id]
                sockets.discard(websocket)
                if not sockets:
                    del self._rooms[party_id]

    def subscribers(self, party_id: str) -> Set[WebSocket]:
        with self._guard:
            return set(self._rooms.get(party_id, set()))

    async def broadcast(self, party_id: str, message: dict) -> int:
        """
        廣播給所有訂閱者

        返回：
            成功送出的數量；送失敗的連線直接移除
        """
        delivered = 0
        for websocket in self.subscribers(party_id):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.info(f"Dropping websocket for party {party_id}: {e}")
                self.disconnect(websocket)
        return delivered

    def notify_party_changed(self, party_id: str) -> None:
        if not self.is_bound():
            return
        if not self.subscribers(party_id):
            return

        message = {"type": "partyChanged", "partyId": party_id, "at": current_timestamp()}
        asyncio.run_coroutine_threadsafe(self.broadcast(party_id, message), self._loop)


manager = PartyConnectionManager()


@router.websocket("/ws")
async def party_websocket(websocket: WebSocket, service: PartyService = Depends(get_party_service)):
    """
    訂閱 Party 變更通知

    只處理 joinParty；不存在的 Party、非 JSON 或 binary frame 直接忽略。
    連線結束（不論原因）都會取消所有訂閱。
    """
    await websocket.accept()
    manager.bind_loop(asyncio.get_running_loop())

    try:
        while True:
            try:
                data = await websocket.receive_json()
            except (ValueError, KeyError):
                # KeyError: binary frame 沒有 "text"
                continue
            if not isinstance(data, dict) or data.get("type") != "joinParty":
                continue

            party_id = data.get("partyId")
            if not party_id or service.store.get(party_id) is None:
                continue

            manager.subscribe(party_id, websocket)
            logger.info(f"WebSocket subscribed to party {party_id}")

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
