import random
import unittest
from connect3d.app.engine.evaluator import Genotype, evaluate_state
from connect3d.app.engine.game import GameState, Move


def build(moves):
    return GameState.from_moves([Move(*m) for m in moves])


class TestEvaluator(unittest.TestCase):
    def test_empty_board_is_zero(self):
        rng = random.Random(7)
        genotypes = [None, Genotype()] + [
            Genotype(w_plane=rng.uniform(0.5, 1.5), w_vertical=rng.uniform(0.5, 1.5),
                     w_3d_a=rng.uniform(0.5, 1.5), w_3d_b=rng.uniform(0.5, 1.5))
            for _ in range(5)
        ]
        for genotype in genotypes:
            self.assertEqual(evaluate_state(GameState(), genotype, 1, 4), 0)

    def test_lone_piece(self):
        """A single piece contributes 1 in each of the 9 scored directions."""
        state = build([(0, 0, 0, 1)])
        self.assertEqual(evaluate_state(state, None, 1, 4), 9)
        self.assertEqual(evaluate_state(state, None, 2, 4), -9)

    def test_pair_is_squared(self):
        """
        Scenario: two P1 pieces side by side on the x axis.
        Each piece sees count 2 along x (4 points) and 1 elsewhere (8 points).
        """
        state = build([(0, 0, 0, 1), (1, 0, 0, 1)])
        self.assertEqual(evaluate_state(state, None, 1, 4), 24)

    def test_genotype_weights_apply_per_class(self):
        state = build([(0, 0, 0, 1), (1, 0, 0, 1)])
        genotype = Genotype(w_plane=2.0)
        # Per piece: x axis 2*4, other plane axes 3*2, vertical 1, 3d_a 2, 3d_b 2
        self.assertAlmostEqual(evaluate_state(state, genotype, 1, 4), 38.0)

    def test_missing_weights_default_to_one(self):
        state = build([(0, 0, 0, 1), (0, 0, 1, 2), (1, 0, 0, 1)])
        self.assertEqual(
            evaluate_state(state, Genotype.model_validate({}), 1, 4),
            evaluate_state(state, None, 1, 4),
        )

    def test_perspective_antisymmetry(self):
        state = build([
            (0, 0, 0, 1), (1, 0, 0, 2), (0, 0, 1, 1), (0, 1, 0, 2),
            (1, 0, 1, 1), (1, 1, 0, 2), (2, 0, 0, 1),
        ])
        genotype = Genotype(w_plane=0.7, w_vertical=1.3, w_3d_a=0.9, w_3d_b=1.1)
        for genotype in (None, genotype):
            self.assertAlmostEqual(
                evaluate_state(state, genotype, 1, 4),
                -evaluate_state(state, genotype, 2, 4),
            )

    def test_runs_are_capped_by_win_length(self):
        """With win_length 2 a piece only looks one cell each way."""
        state = build([(0, 0, 0, 1), (1, 0, 0, 1), (2, 0, 0, 1)])
        # Ends: count 2 along x. Middle: count 3 along x.
        self.assertEqual(evaluate_state(state, None, 1, 2), (8 + 4) * 2 + (8 + 9))
        # Uncapped: every piece sees all 3
        self.assertEqual(evaluate_state(state, None, 1, 4), (8 + 9) * 3)

    def test_downward_diagonal_is_not_scored(self):
        """
        Scenario: two P1 pieces one diagonal step apart, once rising along
        (1,0,1) and once falling along (1,0,-1), each with one P2 prop.
        Only the rising pair earns the connection bonus.
        """
        rising = build([(0, 0, 0, 1), (1, 0, 0, 2), (1, 0, 1, 1)])
        falling = build([(0, 0, 0, 2), (0, 0, 1, 1), (1, 0, 0, 1)])

        self.assertEqual(evaluate_state(rising, None, 1, 4), 24 - 9)
        self.assertEqual(evaluate_state(falling, None, 1, 4), 18 - 9)


if __name__ == '__main__':
    unittest.main()
