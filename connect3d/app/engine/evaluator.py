from typing import Optional

from pydantic import BaseModel

from .constants import EVAL_DIRECTIONS, WEIGHT_KEYS
from .game import GameState


class Genotype(BaseModel):
    """Relative value of each direction class in the heuristic."""
    w_plane: float = 1.0
    w_vertical: float = 1.0
    w_3d_a: float = 1.0
    w_3d_b: float = 1.0

    def weight(self, key: str) -> float:
        return getattr(self, key, 1.0)

    def as_tuple(self):
        return tuple(getattr(self, key) for key in WEIGHT_KEYS)


DEFAULT_GENOTYPE = Genotype()


def evaluate_state(state: GameState, genotype: Optional[Genotype], player: int, win_length: int) -> float:
    """
    Weighted sum of squared run lengths through every piece.

    For each piece and each of the 9 scored directions, the same-player run
    through it (capped at win_length - 1 cells per side) contributes
    weight * count**2: added for `player`, subtracted for the opponent.
    An empty board scores exactly 0.
    """
    genotype = genotype or DEFAULT_GENOTYPE
    board = state.board_map()
    score = 0.0

    for m in state.moves:
        sign = 1 if m.player == player else -1
        for (dx, dy, dz), key in EVAL_DIRECTIONS:
            count = 1
            # Forward
            for i in range(1, win_length):
                if board.get((m.x + i * dx, m.y + i * dy, m.z + i * dz)) == m.player:
                    count += 1
                else:
                    break
            # Backward
            for i in range(1, win_length):
                if board.get((m.x - i * dx, m.y - i * dy, m.z - i * dz)) == m.player:
                    count += 1
                else:
                    break
            score += sign * genotype.weight(key) * (count * count)

    return score
