"""
Terminal detection.

Search and the tuner receive a WinDetector at construction time instead of
probing for one at call time: a missing detector silently drops wins.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .constants import WIN_DIRECTIONS
from .game import GameState

Cell = Tuple[int, int, int]


class WinDetector(ABC):
    """Reports whether the piece at (x, y, z) completes a line."""

    @abstractmethod
    def check_win(self, state: GameState, x: int, y: int, z: int, player: int, win_length: int) -> Optional[List[Cell]]:
        """Winning line coordinates in line order, or None."""
        pass


class LineWinDetector(WinDetector):
    """Scans all 13 undirected 3D axes through the placed piece."""

    def check_win(self, state: GameState, x: int, y: int, z: int, player: int, win_length: int) -> Optional[List[Cell]]:
        board = state.board_map()
        for dx, dy, dz in WIN_DIRECTIONS:
            forward = self._run(board, x, y, z, dx, dy, dz, player, win_length)
            backward = self._run(board, x, y, z, -dx, -dy, -dz, player, win_length)
            if 1 + len(forward) + len(backward) >= win_length:
                return list(reversed(backward)) + [(x, y, z)] + forward
        return None

    @staticmethod
    def _run(board: Dict[Cell, int], x: int, y: int, z: int,
             dx: int, dy: int, dz: int, player: int, win_length: int) -> List[Cell]:
        cells = []
        for n in range(1, win_length):
            cell = (x + n * dx, y + n * dy, z + n * dz)
            if board.get(cell) != player:
                break
            cells.append(cell)
        return cells


def require_detector(win_detector: Optional[WinDetector]) -> WinDetector:
    """Guards constructors that cannot work without terminal detection."""
    if win_detector is None:
        raise ValueError("A WinDetector is required: searching without one misses terminal wins")
    return win_detector
