"""
Self-Play Runner - Background Continuous Play

Plays AI vs AI sessions in the background through the move channel. Each
session owns its state outright; nothing here is shared between sessions.
The loop is cooperative: after every move it waits `delay` seconds, and a stop
request is honoured before the next move is requested, never mid-search.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, Optional, Tuple

from connect3d.app.core.events import GameEvents
from connect3d.app.engine.constants import FALLBACK_DELAY, MAX_DELAY, MIN_DELAY
from connect3d.app.engine.evaluator import Genotype
from connect3d.app.engine.game import BoardRegion, GameState
from connect3d.app.engine.notation import format_move, parse_move
from connect3d.app.engine.win_detector import WinDetector, require_detector
from connect3d.app.schemas.game_schema import GameStatePayload, MoveRecord, SelfPlayResponse
from connect3d.app.services.move_channel import MoveChannel

logger = logging.getLogger(__name__)


class SessionStatus:
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    STALLED = "STALLED"  # no move came back, or it was rejected


class SelfPlaySession:
    """Driver-side state for one game: the authoritative GameState lives here."""

    def __init__(self, session_id: str, win_length: int, delay: float, genotype: Optional[Genotype] = None):
        self.id = session_id
        self.win_length = win_length
        self.delay = min(delay, MAX_DELAY) if delay >= MIN_DELAY else FALLBACK_DELAY
        self.genotype = genotype
        self.state = GameState()
        self.region = BoardRegion(-1, 1, -1, 1)
        self.status = SessionStatus.IDLE
        self.winner: Optional[int] = None
        self.winning_line: Optional[List[Tuple[int, int, int]]] = None
        self.stop_requested = False
        self.stop_event = asyncio.Event()  # wakes the between-moves wait

    @property
    def is_finished(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.STALLED)

    def serialize(self) -> str:
        return GameStatePayload.from_state(self.state, self.win_length).model_dump_json(by_alias=True)

    def to_response(self) -> SelfPlayResponse:
        last = self.state.moves[-1] if self.state.moves else None
        return SelfPlayResponse(
            id=self.id,
            status=self.status,
            current_player=self.state.current_player,
            winner=self.winner,
            winning_line=self.winning_line,
            moves=[MoveRecord(x=m.x, y=m.y, z=m.z, player=m.player) for m in self.state.moves],
            region=self.region.as_dict(),
            last_move=format_move(last.x, last.y, last.z) if last else None,
        )


class SelfPlayRunner:
    def __init__(self, channel: MoveChannel, win_detector: WinDetector, events: GameEvents,
                 default_delay: float = FALLBACK_DELAY, max_sessions: int = 8):
        self.channel = channel
        self.win_detector = require_detector(win_detector)
        self.events = events
        self.default_delay = default_delay
        self.max_sessions = max_sessions
        self.sessions: Dict[str, SelfPlaySession] = {}
        self.running_tasks: Dict[str, asyncio.Task] = {}  # session_id -> asyncio.Task

    def create_session(self, win_length: int, delay: Optional[float] = None,
                       genotype: Optional[Genotype] = None) -> SelfPlaySession:
        if len(self.sessions) >= self.max_sessions:
            self._evict_finished()
        if len(self.sessions) >= self.max_sessions:
            raise ValueError(f"Session limit reached ({self.max_sessions})")

        session = SelfPlaySession(
            uuid.uuid4().hex,
            win_length,
            self.default_delay if delay is None else delay,
            genotype,
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: str) -> SelfPlaySession:
        session = self.sessions.get(session_id)
        if session is None:
            raise KeyError(session_id)
        return session

    def is_running(self, session_id: str) -> bool:
        return session_id in self.running_tasks

    async def start(self, session_id: str):
        """Starts the background loop for a session (no-op if already running or finished)."""
        session = self.get_session(session_id)
        if session.is_finished or session_id in self.running_tasks:
            return
        session.stop_requested = False
        session.stop_event.clear()
        session.status = SessionStatus.RUNNING
        logger.info(f"🚀 Starting self-play for session {session_id}")
        self.running_tasks[session_id] = asyncio.create_task(self._loop(session))

    def stop(self, session_id: str):
        """Asks the loop to stop before its next move request. Ends a pending delay at once."""
        session = self.get_session(session_id)
        session.stop_requested = True
        session.stop_event.set()

    async def step(self, session_id: str) -> SelfPlaySession:
        """Plays exactly one move. Refused while the background loop owns the session."""
        session = self.get_session(session_id)
        if session_id in self.running_tasks:
            raise ValueError(f"Session {session_id} is running; stop it before stepping")
        if not session.is_finished:
            await self._play_one(session)
        return session

    async def shutdown(self):
        for session_id in list(self.running_tasks):
            self.stop(session_id)
        tasks = list(self.running_tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _loop(self, session: SelfPlaySession):
        """The main loop that plays until a win, a stall, or a stop request."""
        try:
            while not session.stop_requested:
                await self._play_one(session)
                if session.is_finished:
                    logger.info(f"🏁 Session {session.id} finished: {session.status}")
                    break
                await self._wait_between_moves(session)
        except Exception as e:
            logger.error(f"❌ Self-play error (session {session.id}): {e}")
            session.status = SessionStatus.STALLED
        finally:
            if not session.is_finished:
                session.status = SessionStatus.IDLE
            self.running_tasks.pop(session.id, None)

    async def _wait_between_moves(self, session: SelfPlaySession):
        """Sleeps `delay` seconds, cut short by stop()."""
        try:
            await asyncio.wait_for(session.stop_event.wait(), timeout=session.delay)
        except asyncio.TimeoutError:
            pass

    async def _play_one(self, session: SelfPlaySession):
        response = await self.channel.request(session.serialize(), session.genotype)

        if response.error:
            logger.warning(f"Session {session.id}: move request failed: {response.error}")
            session.status = SessionStatus.STALLED
            await self.events.notify_complete(session, None, None)
            return

        if response.move is None:
            session.status = SessionStatus.STALLED
            await self.events.notify_complete(session, None, None)
            return

        x, y, _ = parse_move(response.move)
        if not session.state.is_valid_move(x, y):
            # Re-validated on the driver side. The search is deterministic, so a retry would repeat it
            logger.warning(f"Session {session.id}: rejected move {response.move}")
            session.status = SessionStatus.STALLED
            await self.events.notify_complete(session, None, None)
            return

        player = session.state.current_player
        z = session.state.next_z(x, y)
        session.state = session.state.play(x, y, player)
        await self.events.notify_move(session, session.state.moves[-1])

        line = self.win_detector.check_win(session.state, x, y, z, player, session.win_length)
        if line:
            session.winner = player
            session.winning_line = line
            session.status = SessionStatus.COMPLETED
            await self.events.notify_complete(session, player, line)
            return

        session.region = session.region.expanded_to(x, y)

    def _evict_finished(self):
        for session_id, session in list(self.sessions.items()):
            if session.is_finished and session_id not in self.running_tasks:
                del self.sessions[session_id]
