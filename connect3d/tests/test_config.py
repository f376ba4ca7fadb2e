import os
import tempfile
import unittest
from unittest import mock

from connect3d.app.core.config import DEFAULT_CONFIG_PATH, get_config_path, load_settings


class TestSettings(unittest.TestCase):
    def test_bundled_defaults(self):
        settings = load_settings(str(DEFAULT_CONFIG_PATH))
        self.assertEqual(settings.engine.search_depth, 2)
        self.assertEqual(settings.engine.win_length, 4)
        self.assertEqual(settings.tuner.population_size, 20)
        self.assertEqual(settings.tuner.games_per_pair, 3)
        self.assertEqual(settings.tuner.tournament_size, 3)
        self.assertAlmostEqual(settings.tuner.mutation_rate, 0.1)
        self.assertAlmostEqual(settings.tuner.mutation_step, 0.25)
        self.assertEqual(settings.tuner.max_moves, 20)

    def test_env_override_and_partial_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "engine.yaml")
            with open(path, "w") as f:
                f.write("engine:\n  search_depth: 3\n")

            with mock.patch.dict(os.environ, {"CONNECT3D_CONFIG": path}):
                self.assertEqual(str(get_config_path()), path)
                settings = load_settings()

        self.assertEqual(settings.engine.search_depth, 3)
        # Sections missing from the file keep their defaults
        self.assertEqual(settings.engine.win_length, 4)
        self.assertEqual(settings.tuner.max_moves, 20)

    def test_invalid_values_rejected(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "engine.yaml")
            with open(path, "w") as f:
                f.write("tuner:\n  mutation_rate: 2.0\n")
            with self.assertRaises(ValueError):
                load_settings(path)


if __name__ == '__main__':
    unittest.main()
