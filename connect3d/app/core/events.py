"""
Game Events - in-process pub/sub for self-play sessions

Listeners are async callables registered per event name and awaited in
subscription order. A listener that raises is logged and skipped; the
session that emitted the event never sees the failure.
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Awaitable[None]]

MOVE_PLAYED = "move_played"      # (session, move)
GAME_COMPLETE = "game_complete"  # (session, winner, winning_line)


class GameEvents:
    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, event: str, callback: Listener):
        self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Listener):
        """No-op when the callback was never subscribed."""
        try:
            self._listeners[event].remove(callback)
        except ValueError:
            pass

    def subscribe_complete(self, callback: Listener):
        """callback(session, winner, winning_line) - winner is None for a stall"""
        self.subscribe(GAME_COMPLETE, callback)

    def subscribe_move(self, callback: Listener):
        self.subscribe(MOVE_PLAYED, callback)

    async def emit(self, event: str, *args) -> int:
        """Returns how many listeners handled the event without raising."""
        delivered = 0
        for listener in list(self._listeners.get(event, ())):
            try:
                await listener(*args)
                delivered += 1
            except Exception as e:
                logger.error(f"Listener for {event} failed: {e}")
        return delivered

    async def notify_move(self, session, move):
        return await self.emit(MOVE_PLAYED, session, move)

    async def notify_complete(self, session, winner, winning_line):
        return await self.emit(GAME_COMPLETE, session, winner, winning_line)
