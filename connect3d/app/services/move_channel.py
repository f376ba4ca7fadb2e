"""
Move Channel - Request/Response Bridge to the Search

Drivers hand over a serialized state (plus an optional genotype) and await
exactly one answer: a move token, "no move", or an error for that request.
Each request is keyed by its own id and resolved through its own future, so
concurrent callers never receive each other's results. The search itself runs
in a worker thread and never blocks the event loop.
"""

import asyncio
import logging
import random
import uuid
from concurrent.futures import Executor
from typing import Dict, Optional

from connect3d.app.engine.ai import MalformedStateError, get_ai_move
from connect3d.app.engine.evaluator import Genotype
from connect3d.app.engine.search import AlphaBetaSearch
from connect3d.app.schemas.game_schema import MoveResponse

logger = logging.getLogger(__name__)


class MoveChannel:
    def __init__(self, searcher: AlphaBetaSearch, executor: Optional[Executor] = None, rng: Optional[random.Random] = None):
        self.searcher = searcher
        self.executor = executor  # None -> loop default thread pool
        self.rng = rng or random.Random()
        self.pending: Dict[str, asyncio.Future] = {}  # request_id -> Future

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    async def request(self, state_text: str, genotype: Optional[Genotype] = None) -> MoveResponse:
        """Submit one move request and wait for its response."""
        request_id = uuid.uuid4().hex
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self.pending[request_id] = future

        # Own searcher + rng per request: node counters and fallback draws stay independent
        searcher = AlphaBetaSearch(self.searcher.win_detector, self.searcher.depth)
        rng = random.Random(self.rng.random())

        try:
            work = loop.run_in_executor(self.executor, get_ai_move, state_text, genotype, searcher, rng)
            work.add_done_callback(lambda done: self._resolve(request_id, done))
            return await future
        finally:
            self.pending.pop(request_id, None)

    def _resolve(self, request_id: str, done: asyncio.Future):
        """Turns the worker outcome into this request's response."""
        future = self.pending.get(request_id)
        error = None if done.cancelled() else done.exception()
        if future is None or future.done():
            # Caller went away (cancelled); nothing to deliver
            if error is not None:
                logger.debug(f"Dropped failure for abandoned request {request_id}: {error}")
            return

        if done.cancelled():
            future.set_result(MoveResponse(request_id=request_id, error="Request cancelled"))
            return

        if error is None:
            future.set_result(MoveResponse(request_id=request_id, move=done.result()))
        elif isinstance(error, MalformedStateError):
            logger.warning(f"Rejected move request {request_id}: {error}")
            future.set_result(MoveResponse(request_id=request_id, error=str(error)))
        else:
            logger.exception(f"Search failed for request {request_id}", exc_info=error)
            future.set_result(MoveResponse(request_id=request_id, error=f"Search failed: {error}"))
