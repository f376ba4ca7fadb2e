# connect3d/app/engine/search.py
import math
import random
from typing import NamedTuple, Optional

from .constants import DEFAULT_SEARCH_DEPTH, DEFAULT_WIN_LENGTH, LOSS_SCORE, WIN_SCORE
from .evaluator import Genotype, evaluate_state
from .game import BoardRegion, GameState, Move
from .win_detector import WinDetector, require_detector


class SearchResult(NamedTuple):
    score: float
    move: Optional[Move]


class AlphaBetaSearch:
    def __init__(self, win_detector: WinDetector, depth: int = DEFAULT_SEARCH_DEPTH):
        if depth < 0:
            raise ValueError(f"Search depth must be >= 0, got {depth}")
        self.win_detector = require_detector(win_detector)
        self.depth = depth
        self.nodes = 0

    def choose_move(
        self,
        state: GameState,
        genotype: Optional[Genotype] = None,
        win_length: int = DEFAULT_WIN_LENGTH,
        rng: Optional[random.Random] = None,
    ) -> Optional[Move]:
        """
        Root entry point. Picks a move for the player whose turn it is.
        Falls back to a random candidate when the search records no move,
        and returns None only when there is nothing legal to play.
        """
        self.nodes = 0
        ai_player = state.current_player
        region = BoardRegion.from_moves(state.moves)

        result = self.minimax(
            state, region, self.depth, True, ai_player, win_length, genotype, -math.inf, math.inf
        )
        if result.move is not None:
            return result.move

        candidates = state.get_valid_moves(region)
        if not candidates:
            return None
        x, y = (rng or random).choice(candidates)
        return Move(x, y, state.next_z(x, y), ai_player)

    def minimax(
        self,
        state: GameState,
        region: BoardRegion,
        depth: int,
        maximizing: bool,
        ai_player: int,
        win_length: int,
        genotype: Optional[Genotype],
        alpha: float,
        beta: float,
    ) -> SearchResult:
        self.nodes += 1

        # 1. Leaf
        if depth == 0:
            return SearchResult(evaluate_state(state, genotype, ai_player, win_length), None)

        # 2. Nothing to play: neutral
        candidates = state.get_valid_moves(region)
        if not candidates:
            return SearchResult(0, None)

        mover = ai_player if maximizing else (2 if ai_player == 1 else 1)
        best_score = -math.inf if maximizing else math.inf
        best_move = None

        # 3. Recursive Search. The region stays fixed for the whole tree.
        for x, y in candidates:
            child = state.play(x, y, mover)
            move = child.moves[-1]

            # An immediate win ends the scan outright, it is not just a cutoff
            if self.win_detector.check_win(child, x, y, move.z, mover, win_length):
                return SearchResult(WIN_SCORE if maximizing else LOSS_SCORE, move)

            result = self.minimax(
                child, region, depth - 1, not maximizing, ai_player, win_length, genotype, alpha, beta
            )

            # Strict comparison: the first move reaching the extreme keeps it
            if maximizing:
                if result.score > best_score:
                    best_score = result.score
                    best_move = move
                alpha = max(alpha, result.score)
            else:
                if result.score < best_score:
                    best_score = result.score
                    best_move = move
                beta = min(beta, result.score)

            if beta <= alpha:
                break  # Cutoff

        return SearchResult(best_score, best_move)
