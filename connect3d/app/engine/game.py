import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from .constants import ORTHOGONAL_STEPS, PLAYERS

# Logger setup
logger = logging.getLogger(__name__)

Column = Tuple[int, int]


class IllegalMoveError(ValueError):
    """Raised when a move list breaks gravity or player numbering."""


class Move(NamedTuple):
    x: int
    y: int
    z: int
    player: int


class BoardRegion:
    """
    Axis-aligned rectangle around the played columns.
    Only bounds the candidate scan; legality itself is adjacency-based.
    """

    def __init__(self, min_x: int = 0, max_x: int = 0, min_y: int = 0, max_y: int = 0):
        self.min_x = min_x
        self.max_x = max_x
        self.min_y = min_y
        self.max_y = max_y

    @classmethod
    def from_moves(cls, moves: Iterable[Move]) -> "BoardRegion":
        """Smallest rectangle containing every played (x, y). Origin-only when empty."""
        xs, ys = [], []
        for m in moves:
            xs.append(m.x)
            ys.append(m.y)
        if not xs:
            return cls()
        return cls(min(xs), max(xs), min(ys), max(ys))

    def expanded_to(self, x: int, y: int) -> "BoardRegion":
        """
        Grows the grid symmetrically when a piece lands on its edge,
        the same way the interactive board grows. Returns a NEW region.
        """
        min_x, max_x, min_y, max_y = self.min_x, self.max_x, self.min_y, self.max_y
        if x == max_x:
            max_x += 1
            min_x = -max_x
        if x == min_x:
            min_x -= 1
            max_x = -min_x
        if y == max_y:
            max_y += 1
            min_y = -max_y
        if y == min_y:
            min_y -= 1
            max_y = -min_y
        return BoardRegion(min_x, max_x, min_y, max_y)

    def as_dict(self) -> Dict[str, int]:
        return {"minX": self.min_x, "maxX": self.max_x, "minY": self.min_y, "maxY": self.max_y}

    def __eq__(self, other):
        if not isinstance(other, BoardRegion):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return f"BoardRegion(x=[{self.min_x}, {self.max_x}], y=[{self.min_y}, {self.max_y}])"


class GameState:
    def __init__(self, moves: Tuple[Move, ...] = (), cell_heights: Optional[Dict[Column, int]] = None):
        """
        Snapshot of a game. Treat as immutable: play() hands back a NEW state,
        so sibling branches of the search never see each other's pieces.
        moves: play order. cell_heights: (x, y) -> pieces stacked there.
        """
        self.moves = tuple(moves)
        self.cell_heights: Dict[Column, int] = dict(cell_heights) if cell_heights else {}

    @classmethod
    def from_moves(cls, moves: Iterable[Move]) -> "GameState":
        """
        Rebuilds a state by replaying recorded moves.
        Every z must match the column height at the time it was played.
        """
        state = cls()
        for m in moves:
            if m.player not in PLAYERS:
                raise IllegalMoveError(f"Invalid player {m.player} at ({m.x},{m.y},{m.z})")
            expected_z = state.next_z(m.x, m.y)
            if m.z != expected_z:
                raise IllegalMoveError(
                    f"Move ({m.x},{m.y},{m.z}) breaks gravity: column height is {expected_z}"
                )
            state = state.play(m.x, m.y, m.player)
        return state

    @property
    def current_player(self) -> int:
        """Player to move in a two-player game (1 moves first)."""
        return (len(self.moves) % 2) + 1

    def next_z(self, x: int, y: int) -> int:
        return self.cell_heights.get((x, y), 0)

    def play(self, x: int, y: int, player: int) -> "GameState":
        """Returns a NEW state with the piece dropped into column (x, y)."""
        z = self.next_z(x, y)
        heights = dict(self.cell_heights)
        heights[(x, y)] = z + 1
        return GameState(self.moves + (Move(x, y, z, player),), heights)

    def get_valid_moves(self, region: BoardRegion) -> List[Column]:
        """
        Candidate columns inside the region padded by one ring.
        A column qualifies only if some played column sits orthogonally next to it;
        having a piece in it is not enough on its own.
        """
        if not self.moves:
            return [(0, 0)]

        candidates = []
        for x in range(region.min_x - 1, region.max_x + 2):
            for y in range(region.min_y - 1, region.max_y + 2):
                if self._touches_footprint(x, y):
                    candidates.append((x, y))
        return candidates

    def is_valid_move(self, x: int, y: int) -> bool:
        """Driver-side legality: same adjacency rule as the candidate scan, without a region bound."""
        if not self.moves:
            return x == 0 and y == 0
        return self._touches_footprint(x, y)

    def _touches_footprint(self, x: int, y: int) -> bool:
        for dx, dy in ORTHOGONAL_STEPS:
            if (x + dx, y + dy) in self.cell_heights:
                return True
        return False

    def board_map(self) -> Dict[Tuple[int, int, int], int]:
        """(x, y, z) -> player, for O(1) line scans."""
        return {(m.x, m.y, m.z): m.player for m in self.moves}

    def __len__(self):
        return len(self.moves)

    def __repr__(self):
        return f"GameState(moves={len(self.moves)}, columns={len(self.cell_heights)})"
