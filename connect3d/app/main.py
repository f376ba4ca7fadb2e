import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from connect3d.app.api.self_play import router as self_play_router
from connect3d.app.core.config import Settings, load_settings
from connect3d.app.core.events import GameEvents
from connect3d.app.engine.search import AlphaBetaSearch
from connect3d.app.engine.win_detector import LineWinDetector
from connect3d.app.schemas.game_schema import MoveRequest, MoveResponse
from connect3d.app.services.move_channel import MoveChannel
from connect3d.app.services.self_play_runner import SelfPlayRunner

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


async def log_game_complete(session, winner, winning_line):
    if winner:
        logger.info(f"🏆 Session {session.id}: player {winner} wins with {winning_line}")
    else:
        logger.info(f"Session {session.id} ended without a winner after {len(session.state.moves)} moves")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    # Wiring: one detector, injected everywhere terminal checks happen
    win_detector = LineWinDetector()
    searcher = AlphaBetaSearch(win_detector, depth=settings.engine.search_depth)
    channel = MoveChannel(searcher)
    events = GameEvents()
    events.subscribe_complete(log_game_complete)
    runner = SelfPlayRunner(
        channel,
        win_detector,
        events,
        default_delay=settings.self_play.delay,
        max_sessions=settings.self_play.max_sessions,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Shutdown: let running sessions finish their current move
        await runner.shutdown()

    app = FastAPI(title="Connect Four 3D Engine", lifespan=lifespan)
    app.state.settings = settings
    app.state.move_channel = channel
    app.state.self_play_runner = runner

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(self_play_router, prefix="/selfplay", tags=["Self-Play"])

    @app.post("/move", response_model=MoveResponse)
    async def request_move(payload: MoveRequest, request: Request):
        """One request, one response: a move token, null when none exists, or 400 for a bad state."""
        response = await request.app.state.move_channel.request(payload.state, payload.genotype)
        if response.error:
            raise HTTPException(status_code=400, detail=response.error)
        return response

    @app.get("/config")
    async def get_config(request: Request):
        return request.app.state.settings.model_dump()

    return app


app = create_app()
