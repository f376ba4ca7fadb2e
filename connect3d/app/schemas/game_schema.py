from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Tuple

from connect3d.app.engine.constants import DEFAULT_WIN_LENGTH, MAX_DELAY
from connect3d.app.engine.evaluator import Genotype
from connect3d.app.engine.game import GameState, Move


class MoveRecord(BaseModel):
    # Drivers attach their own metadata to moves; ignore it
    model_config = ConfigDict(extra='ignore')

    x: int
    y: int
    z: int
    player: int


class GameStatePayload(BaseModel):
    """Serialized GameState as exchanged with drivers (camelCase on the wire)."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    moves: List[MoveRecord] = Field(default_factory=list)
    # "x,y" -> stack height. Optional: rebuilt from moves when absent.
    cell_heights: Optional[Dict[str, int]] = Field(default=None, alias="cellHeights")
    win_length: int = Field(default=DEFAULT_WIN_LENGTH, alias="winLength", ge=2)

    def to_state(self) -> GameState:
        """
        Replays the moves and cross-checks cellHeights.
        Raises ValueError when the payload contradicts itself.
        """
        state = GameState.from_moves(Move(m.x, m.y, m.z, m.player) for m in self.moves)
        if self.cell_heights is not None:
            declared = {parse_column_key(k): v for k, v in self.cell_heights.items() if v}
            if declared != state.cell_heights:
                raise ValueError("cellHeights does not match the recorded moves")
        return state

    @classmethod
    def from_state(cls, state: GameState, win_length: int = DEFAULT_WIN_LENGTH) -> "GameStatePayload":
        return cls(
            moves=[MoveRecord(x=m.x, y=m.y, z=m.z, player=m.player) for m in state.moves],
            cell_heights={f"{x},{y}": h for (x, y), h in state.cell_heights.items()},
            win_length=win_length,
        )


def parse_column_key(key: str) -> Tuple[int, int]:
    parts = key.split(",")
    if len(parts) != 2:
        raise ValueError(f"Malformed column key: {key!r}")
    return int(parts[0]), int(parts[1])


class MoveRequest(BaseModel):
    # Raw JSON text, exactly what the driver serialized
    state: str
    genotype: Optional[Genotype] = None


class MoveResponse(BaseModel):
    request_id: str
    move: Optional[str] = None  # "x1,y0,z0", None when no move exists
    error: Optional[str] = None


class SelfPlayCreate(BaseModel):
    win_length: int = Field(default=DEFAULT_WIN_LENGTH, ge=2)
    delay: Optional[float] = Field(default=None, le=MAX_DELAY)  # seconds, config default when omitted
    genotype: Optional[Genotype] = None


class SelfPlayResponse(BaseModel):
    id: str
    status: str
    current_player: int
    winner: Optional[int] = None
    winning_line: Optional[List[Tuple[int, int, int]]] = None
    moves: List[MoveRecord]
    region: Dict[str, int]
    last_move: Optional[str] = None
