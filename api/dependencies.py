from fastapi.requests import HTTPConnection

from core.party_service import PartyService


def get_party_service(connection: HTTPConnection) -> PartyService:
    """
    FastAPI dependency：取得 lifespan 建立的 PartyService

    HTTP 與 WebSocket endpoint 共用；測試時用 app.dependency_overrides 換掉
    """
    return connection.app.state.party_service
