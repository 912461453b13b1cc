import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import Base, SessionLocal, engine, settings
from api import parties, players, predictions, claims, websocket
from core.party_service import PartyService
from core.repository import PartyRepository
from core.side_effects import PostCommitDispatcher
from core.store import PartyStore
from schemas import HealthResponse
from services.clock_service import current_timestamp

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def shutdown_party_service(service: PartyService, dispatcher: PostCommitDispatcher, repository) -> None:
    """等待未完成的 hooks，最後整批寫回；寫回失敗只記錄，不中斷關機"""
    dispatcher.shutdown(wait=True)
    try:
        service.flush(repository)
    except Exception as e:
        logger.error(f"Final flush failed: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立資料表，從 snapshot 重建 store
    Base.metadata.create_all(bind=engine)

    repository = PartyRepository(SessionLocal)
    store = PartyStore()
    store.load(repository.load_all())

    executor = None
    if settings.async_side_effects:
        # 單一 worker：snapshot 依變更順序寫入
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="post-commit")
    dispatcher = PostCommitDispatcher(executor)

    websocket.manager.bind_loop(asyncio.get_running_loop())
    app.state.party_service = PartyService(
        store,
        repository=repository,
        notifier=websocket.manager,
        dispatcher=dispatcher,
    )
    logger.info(f"Party service ready with {len(store)} parties")

    yield

    # Shutdown
    shutdown_party_service(app.state.party_service, dispatcher, repository)


app = FastAPI(
    title="iknowur API",
    description="Backend API for the iknowur commit-reveal prediction party game",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(parties.router)
app.include_router(players.router)
app.include_router(predictions.router)
app.include_router(claims.router)
app.include_router(websocket.router)


@app.get("/api/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True, at=current_timestamp())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
