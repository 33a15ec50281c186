"""
Puzzle generation

1. Fill an empty board with a randomized search (MRV + Degree + forward
   checking, shuffled value order), restarting on a time budget.
2. Punch holes: clear random filled cells until the removal quota is met.

Generated puzzles are guaranteed solvable (the full board is one solution)
but not guaranteed to have a unique solution.
"""

import random
from typing import Optional

from CSP.config import GENERATION_CONFIG, SolverConfig
from CSP.solver import CSPSolver
from .constraints import BinairoRules
from .position import GridState, validate_size


DEFAULT_REMOVAL_FRACTION = 0.6
MAX_ATTEMPTS = 10
ATTEMPT_TIME_LIMIT_MS = 5000


class PuzzleGenerator:
    def __init__(self, seed: Optional[int] = None, verbose: bool = False,
                 max_attempts: int = MAX_ATTEMPTS,
                 attempt_time_limit_ms: int = ATTEMPT_TIME_LIMIT_MS):
        self.rules = BinairoRules()
        self.solver = CSPSolver(self.rules, verbose=False)
        self.rng = random.Random(seed)
        self.verbose = verbose
        self.max_attempts = max_attempts
        self.attempt_time_limit_ms = attempt_time_limit_ms
        self.stats = {
            'attempts': 0,
            'nodes_explored': 0,
            'elapsed_seconds': 0.0,
            'cells_removed': 0,
        }

    def _attempt_config(self) -> SolverConfig:
        # one seed per attempt, drawn from the generator's rng
        return GENERATION_CONFIG.with_changes(
            time_limit_ms=self.attempt_time_limit_ms,
            seed=self.rng.randrange(2 ** 32),
        )

    def generate_full_board(self, n: int) -> Optional[GridState]:
        """
        Produce a completely filled, valid n x n board.

        Returns:
            The solved board, or None if every attempt ran out of time
        """
        validate_size(n)
        self.stats['attempts'] = 0
        self.stats['nodes_explored'] = 0
        self.stats['elapsed_seconds'] = 0.0

        empty = GridState(n)
        for attempt in range(1, self.max_attempts + 1):
            self.stats['attempts'] = attempt
            solution = self.solver.solve(empty, self._attempt_config())
            self.stats['nodes_explored'] += self.solver.nodes_explored
            self.stats['elapsed_seconds'] += self.solver.elapsed_seconds
            if solution is not None:
                if self.verbose:
                    print(f"  Full board found on attempt {attempt} "
                          f"({self.solver.nodes_explored} nodes, {self.solver.elapsed_seconds:.2f}s)")
                return solution
            if self.verbose:
                print(f"  Attempt {attempt}/{self.max_attempts} failed, restarting...")
        return None

    def punch_holes(self, board: GridState, count: int) -> GridState:
        """
        Clear `count` random filled cells from a copy of board.

        Counters and domains are kept in step with the board via
        GridState.clear().
        """
        if count < 0:
            raise ValueError(f"Cannot remove a negative number of cells ({count})")
        if count > board.filled_count():
            raise ValueError(f"Cannot remove {count} cells, only {board.filled_count()} are filled")

        puzzle = board.copy()
        n = puzzle.n
        removed = 0
        while removed < count:
            r = self.rng.randrange(n)
            c = self.rng.randrange(n)
            if not puzzle.is_empty(r, c):
                puzzle.clear(r, c)
                removed += 1

        self.stats['cells_removed'] = removed
        return puzzle

    @staticmethod
    def removal_count(n: int, removal_fraction: float) -> int:
        """Integer quota of cells to clear, e.g. 60% of 8x8 -> 38"""
        percent = int(round(removal_fraction * 100))
        return n * n * percent // 100

    def generate(self, n: int, removal_fraction: float = DEFAULT_REMOVAL_FRACTION) -> Optional[GridState]:
        """
        Generate a puzzle of size n with roughly removal_fraction of the
        cells left empty.

        Raises:
            ValueError: odd, zero or negative size; fraction outside [0, 1]
        """
        validate_size(n)
        if not 0.0 <= removal_fraction <= 1.0:
            raise ValueError(f"Removal fraction must be within [0, 1], got {removal_fraction}")

        if self.verbose:
            print(f"Generating {n}x{n} puzzle (MRV+Degree+FC, restart every "
                  f"{self.attempt_time_limit_ms / 1000:.0f}s)...")

        full = self.generate_full_board(n)
        if full is None:
            if self.verbose:
                print(f"✗ Generation failed after {self.max_attempts} attempts")
            return None

        puzzle = self.punch_holes(full, self.removal_count(n, removal_fraction))
        if self.verbose:
            print(f"✓ Puzzle generated: {puzzle.empty_count()} empty cells\n")
            print(puzzle)
        return puzzle
