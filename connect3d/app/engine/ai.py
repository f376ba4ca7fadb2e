import logging
import random
from typing import Optional

from connect3d.app.engine.evaluator import Genotype
from connect3d.app.engine.notation import format_move
from connect3d.app.engine.search import AlphaBetaSearch
from connect3d.app.schemas.game_schema import GameStatePayload

logger = logging.getLogger(__name__)


class MalformedStateError(ValueError):
    """The serialized state could not be turned into a GameState."""


def load_state(state_text: str):
    """Parses driver JSON into (GameState, win_length)."""
    try:
        payload = GameStatePayload.model_validate_json(state_text)
        return payload.to_state(), payload.win_length
    except ValueError as e:
        # pydantic's ValidationError is a ValueError too
        raise MalformedStateError(f"Invalid game state: {e}") from e


def get_ai_move(
    state_text: str,
    genotype: Optional[Genotype] = None,
    searcher: AlphaBetaSearch = None,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """
    One-shot move request: serialized state in, move token out.
    Returns None when no legal move exists. Raises MalformedStateError.
    """
    if searcher is None:
        raise ValueError("get_ai_move needs a configured AlphaBetaSearch")

    state, win_length = load_state(state_text)

    if not state.moves:
        return format_move(0, 0, 0)

    move = searcher.choose_move(state, genotype, win_length, rng)
    if move is None:
        logger.info("No legal move for a %d-move state", len(state.moves))
        return None

    logger.debug("Player %d plays %s (%d nodes)", move.player, format_move(move.x, move.y, move.z), searcher.nodes)
    return format_move(move.x, move.y, move.z)
