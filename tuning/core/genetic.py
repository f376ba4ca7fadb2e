# tuning/core/genetic.py
import logging
import random
from typing import Callable, List, NamedTuple, Optional

from connect3d.app.core.config import TunerSettings
from connect3d.app.engine.constants import DEFAULT_SEARCH_DEPTH, WEIGHT_KEYS
from connect3d.app.engine.evaluator import Genotype
from connect3d.app.engine.game import GameState
from connect3d.app.engine.search import AlphaBetaSearch
from connect3d.app.engine.win_detector import WinDetector, require_detector

logger = logging.getLogger(__name__)

# Game outcomes from player 1's point of view
P1_WIN = 1
P2_WIN = -1
DRAW = 0


class GenerationStats(NamedTuple):
    generation: int
    best_fitness: int
    best: Genotype
    fitness: List[int]


class TuningResult(NamedTuple):
    best: Genotype
    best_fitness: int
    history: List[GenerationStats]
    population: List[Genotype]  # offspring of the last generation, not yet evaluated


class GeneticTuner:
    def __init__(
        self,
        win_detector: WinDetector,
        settings: Optional[TunerSettings] = None,
        rng: Optional[random.Random] = None,
        search_depth: int = DEFAULT_SEARCH_DEPTH,
    ):
        """
        Evolves evaluator weights through round-robin self-play.
        The same search that plays live games produces every move here.
        """
        self.win_detector = require_detector(win_detector)
        self.settings = settings or TunerSettings()
        self.rng = rng or random.Random()
        self.searcher = AlphaBetaSearch(self.win_detector, depth=search_depth)

    # --- Genotype Operators ---

    def random_genotype(self) -> Genotype:
        """Each weight uniform in [0.5, 1.5)."""
        return Genotype(**{key: self.rng.random() + 0.5 for key in WEIGHT_KEYS})

    def crossover(self, parent1: Genotype, parent2: Genotype) -> Genotype:
        """Offspring weight = mean of the parents' weights."""
        return Genotype(**{
            key: (getattr(parent1, key) + getattr(parent2, key)) / 2 for key in WEIGHT_KEYS
        })

    def mutate(self, individual: Genotype) -> Genotype:
        """Returns a copy with each weight perturbed by U(-step, +step) at mutation_rate."""
        step = self.settings.mutation_step
        weights = individual.model_dump()
        for key in WEIGHT_KEYS:
            if self.rng.random() < self.settings.mutation_rate:
                weights[key] += self.rng.random() * 2 * step - step
        return Genotype(**weights)

    # --- Fitness ---

    def simulate_game(self, genotype1: Genotype, genotype2: Genotype, rng: Optional[random.Random] = None) -> int:
        """
        Plays one capped game, genotype1 as player 1.
        Returns P1_WIN, P2_WIN or DRAW.
        """
        rng = rng or random.Random(self.rng.random())
        win_length = self.settings.win_length
        state = GameState()

        for _ in range(self.settings.max_moves):
            player = state.current_player
            genotype = genotype1 if player == 1 else genotype2
            move = self.searcher.choose_move(state, genotype, win_length, rng)
            if move is None:
                break

            state = state.play(move.x, move.y, player)
            if self.win_detector.check_win(state, move.x, move.y, move.z, player, win_length):
                return P1_WIN if player == 1 else P2_WIN

        return DRAW

    def _safe_simulate(self, genotype1: Genotype, genotype2: Genotype) -> int:
        # One broken game must not take the generation down with it
        try:
            return self.simulate_game(genotype1, genotype2)
        except Exception as e:
            logger.warning(f"Simulation failed, scoring as draw: {e}")
            return DRAW

    def evaluate_population(self, population: List[Genotype]) -> List[int]:
        """Round-robin: every unordered pair plays games_per_pair games, i as player 1."""
        fitness = [0] * len(population)
        for i in range(len(population)):
            for j in range(i + 1, len(population)):
                score = 0
                for _ in range(self.settings.games_per_pair):
                    score += self._safe_simulate(population[i], population[j])
                fitness[i] += score
                fitness[j] -= score
        return fitness

    # --- Selection ---

    def tournament_selection(self, population: List[Genotype], fitness: List[int]) -> List[Genotype]:
        selected = []
        for _ in range(len(population)):
            best = None
            for _ in range(self.settings.tournament_size):
                idx = self.rng.randrange(len(population))
                if best is None or fitness[idx] > fitness[best]:
                    best = idx
            selected.append(population[best])
        return selected

    def next_generation(self, selected: List[Genotype]) -> List[Genotype]:
        """Pairs neighbours; an odd last selection pairs with index 0."""
        size = len(selected)
        offspring = []
        for i in range(0, size, 2):
            parent1 = selected[i]
            parent2 = selected[(i + 1) % size]
            offspring.append(self.mutate(self.crossover(parent1, parent2)))
            offspring.append(self.mutate(self.crossover(parent2, parent1)))
        return offspring[:size]

    # --- Main Loop ---

    def run(
        self,
        generations: Optional[int] = None,
        population_size: Optional[int] = None,
        on_generation: Optional[Callable[[GenerationStats], None]] = None,
    ) -> TuningResult:
        generations = generations if generations is not None else self.settings.generations
        population_size = population_size if population_size is not None else self.settings.population_size
        if population_size < 2:
            raise ValueError("A population needs at least two individuals to play each other")

        population = [self.random_genotype() for _ in range(population_size)]
        best_individual = None
        best_fitness = None
        history = []

        for gen in range(generations):
            fitness = self.evaluate_population(population)

            # Running best across all generations, not just this one
            gen_best = max(range(len(population)), key=lambda i: fitness[i])
            if best_fitness is None or fitness[gen_best] > best_fitness:
                best_fitness = fitness[gen_best]
                best_individual = population[gen_best]

            stats = GenerationStats(gen, fitness[gen_best], population[gen_best], fitness)
            history.append(stats)
            logger.info(f"Generation {gen}: best fitness {fitness[gen_best]} ({population[gen_best].as_tuple()})")
            if on_generation:
                on_generation(stats)

            selected = self.tournament_selection(population, fitness)
            population = self.next_generation(selected)

        if best_individual is None:
            # generations == 0: nothing was evaluated
            best_individual, best_fitness = population[0], 0

        return TuningResult(best_individual, best_fitness, history, population)
