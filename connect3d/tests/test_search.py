import math
import random
import unittest
from connect3d.app.engine.constants import LOSS_SCORE, WIN_SCORE
from connect3d.app.engine.game import BoardRegion, GameState, Move
from connect3d.app.engine.search import AlphaBetaSearch
from connect3d.app.engine.win_detector import LineWinDetector


def build(moves):
    return GameState.from_moves([Move(*m) for m in moves])


class TestAlphaBetaSearch(unittest.TestCase):
    def setUp(self):
        self.search = AlphaBetaSearch(LineWinDetector(), depth=2)

    def test_takes_immediate_win_first_in_scan_order(self):
        """
        Scenario: P1 to move with (0,0,0)..(2,0,0). Both (-1,0) and (3,0) win;
        the scan reaches (-1,0) first, so that is the answer.
        """
        state = build([
            (0, 0, 0, 1), (0, 1, 0, 2),
            (1, 0, 0, 1), (1, 1, 0, 2),
            (2, 0, 0, 1), (2, 2, 0, 2),
        ])
        region = BoardRegion.from_moves(state.moves)

        result = self.search.minimax(state, region, 2, True, 1, 4, None, -math.inf, math.inf)

        self.assertEqual(result.score, WIN_SCORE)
        self.assertEqual(result.move, Move(-1, 0, 0, 1))

    def test_immediate_win_across_regions(self):
        state = build([
            (0, 0, 0, 1), (0, 1, 0, 2),
            (1, 0, 0, 1), (1, 1, 0, 2),
            (2, 0, 0, 1), (2, 2, 0, 2),
        ])
        regions = [
            BoardRegion.from_moves(state.moves),
            BoardRegion(-3, 5, -3, 5),
            BoardRegion(0, 0, 0, 0),
            BoardRegion(2, 2, -1, 0),
        ]
        for region in regions:
            result = self.search.minimax(state, region, 2, True, 1, 4, None, -math.inf, math.inf)
            self.assertEqual(result.score, WIN_SCORE, region)
            self.assertIn((result.move.x, result.move.y), [(-1, 0), (3, 0)])

    def test_blocks_single_threat(self):
        """
        Scenario: P2 holds (0,1,0)..(2,1,0) and P1 already covers (-1,1).
        Anything but (3,1) lets P2 win next turn.
        """
        state = build([
            (-1, 1, 0, 1), (0, 1, 0, 2),
            (0, 0, 0, 1), (1, 1, 0, 2),
            (2, -1, 0, 1), (2, 1, 0, 2),
        ])
        self.assertEqual(state.current_player, 1)

        move = self.search.choose_move(state)

        self.assertEqual(move, Move(3, 1, 0, 1))

    def test_minimizing_side_reports_opponent_win(self):
        state = build([
            (0, 0, 0, 2), (5, 5, 0, 1),
            (1, 0, 0, 2), (5, 6, 0, 1),
            (2, 0, 0, 2),
        ])
        region = BoardRegion.from_moves(state.moves)
        result = self.search.minimax(state, region, 1, False, 1, 4, None, -math.inf, math.inf)
        self.assertEqual(result.score, LOSS_SCORE)
        self.assertEqual(result.move.player, 2)

    def test_leaf_returns_evaluation(self):
        state = build([(0, 0, 0, 1)])
        result = self.search.minimax(state, BoardRegion(), 0, True, 1, 4, None, -math.inf, math.inf)
        self.assertEqual(result.score, 9)
        self.assertIsNone(result.move)

    def test_no_candidates_scores_zero(self):
        state = build([(0, 0, 0, 1)])
        result = self.search.minimax(
            state, BoardRegion(100, 100, 100, 100), 2, True, 1, 4, None, -math.inf, math.inf
        )
        self.assertEqual(result.score, 0)
        self.assertIsNone(result.move)

    def test_moves_stay_within_candidates(self):
        rng = random.Random(3)
        state = GameState()
        for _ in range(8):
            region = BoardRegion.from_moves(state.moves)
            candidates = state.get_valid_moves(region)
            move = self.search.choose_move(state, rng=rng)
            self.assertIn((move.x, move.y), candidates)
            self.assertEqual(move.z, state.next_z(move.x, move.y))
            self.assertEqual(move.player, state.current_player)
            state = state.play(move.x, move.y, move.player)

    def test_search_leaves_state_untouched(self):
        state = build([(0, 0, 0, 1), (1, 0, 0, 2), (0, 0, 1, 1)])
        moves, heights = state.moves, dict(state.cell_heights)
        self.search.choose_move(state)
        self.assertEqual(state.moves, moves)
        self.assertEqual(state.cell_heights, heights)
        self.assertGreater(self.search.nodes, 1)

    def test_empty_board_opens_at_origin(self):
        self.assertEqual(self.search.choose_move(GameState()), Move(0, 0, 0, 1))

    def test_depth_zero_falls_back_to_random_candidate(self):
        shallow = AlphaBetaSearch(LineWinDetector(), depth=0)
        state = build([(0, 0, 0, 1), (1, 0, 0, 2)])
        candidates = state.get_valid_moves(BoardRegion.from_moves(state.moves))

        picks = {(m.x, m.y) for m in (shallow.choose_move(state, rng=random.Random(s)) for s in range(20))}

        self.assertTrue(picks.issubset(set(candidates)))
        self.assertGreater(len(picks), 1)

    def test_rejects_negative_depth(self):
        with self.assertRaises(ValueError):
            AlphaBetaSearch(LineWinDetector(), depth=-1)


if __name__ == '__main__':
    unittest.main()
