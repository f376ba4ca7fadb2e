#!/usr/bin/env python3
"""
Genetic tuning of the evaluator weights via self-play tournaments.

Usage (from the repository root):

    python -m tuning.run_tuner --generations 5 --population-size 8 --seed 42

Prints per-generation progress and the best genotype found as JSON.
Defaults come from connect3d/config/engine.yaml (or CONNECT3D_CONFIG).
"""

import argparse
import logging
import random
import sys

from connect3d.app.core.config import load_settings
from connect3d.app.engine.win_detector import LineWinDetector
from tuning.core.genetic import GeneticTuner


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Evolve evaluator weights by self-play.")
    parser.add_argument("--config", default=None, help="Path to an engine.yaml")
    parser.add_argument("--generations", type=int, default=None)
    parser.add_argument("--population-size", type=int, default=None)
    parser.add_argument("--games-per-pair", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", default=None, help="Write the best genotype JSON here")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings(args.config)
    tuner_settings = settings.tuner
    if args.games_per_pair is not None:
        tuner_settings = tuner_settings.model_copy(update={"games_per_pair": args.games_per_pair})

    tuner = GeneticTuner(
        LineWinDetector(),
        tuner_settings,
        rng=random.Random(args.seed),
        search_depth=settings.engine.search_depth,
    )

    print("=======================================")
    print("   3D CONNECT FOUR: Genetic Tuning")
    print("=======================================")

    def report(stats):
        print(f"Generation {stats.generation}: best fitness {stats.best_fitness:+d} -> {stats.best.model_dump()}")

    try:
        result = tuner.run(args.generations, args.population_size, on_generation=report)
    except ValueError as e:
        print(f"Tuning aborted: {e}", file=sys.stderr)
        return 1

    best_json = result.best.model_dump_json(indent=2)
    print("-" * 40)
    print(f"Final Best Individual (fitness {result.best_fitness:+d}):")
    print(best_json)

    if args.output:
        with open(args.output, "w") as f:
            f.write(best_json)
        print(f"Saved to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
