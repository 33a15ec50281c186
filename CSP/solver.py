"""
Generic backtracking CSP solver

Depth-first search with pluggable heuristics:
 - MRV variable ordering, with Degree as tie-breaker (or on its own)
 - LCV value ordering (or shuffled order for randomized generation)
 - Forward Checking or AC-3 propagation after each assignment
 - Wall-clock budget checked once per node

The puzzle-specific rules are supplied through a RuleOracle, so the search
itself knows nothing about the grid it is filling.
"""

import random
import sys
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, List, Optional

from .config import SolverConfig


PROGRESS_INTERVAL = 10000


class RuleOracle(ABC):
    """
    Puzzle-specific logic the search engine relies on.

    Variables are hashable handles (for grids, (row, col) tuples); values
    are small integers; moves bind one variable to one value.
    """

    @abstractmethod
    def is_complete(self, state) -> bool:
        """Return True if the state is a full, accepted solution."""

    @abstractmethod
    def unassigned_variables(self, state) -> List[Hashable]:
        """Candidate variables in a stable enumeration order."""

    @abstractmethod
    def is_legal_move(self, state, move) -> bool:
        """Immediate rule check for a single assignment."""

    @abstractmethod
    def domain_size(self, state, var) -> int:
        ...

    @abstractmethod
    def degree(self, state, var) -> int:
        ...

    @abstractmethod
    def domain_values(self, state, var) -> List[int]:
        """Values still allowed for var, ascending."""

    @abstractmethod
    def count_constraints(self, state, var, value) -> int:
        """How many neighbour values the assignment would rule out (LCV)."""

    @abstractmethod
    def make_move(self, var, value):
        ...

    @abstractmethod
    def apply_move(self, state, move):
        """Return a new state with the move applied; state is untouched."""

    @abstractmethod
    def assign_in_place(self, state, move) -> None:
        ...

    @abstractmethod
    def forward_checking(self, state, last_move) -> bool:
        """Prune neighbours of last_move; False if a domain empties."""

    @abstractmethod
    def ac3(self, state) -> bool:
        """Enforce arc consistency; False if a domain empties."""

    @abstractmethod
    def copy_state(self, state):
        ...

    @abstractmethod
    def checkpoint(self, state) -> Any:
        ...

    @abstractmethod
    def rollback(self, state, mark) -> None:
        ...


class CSPSolver:
    def __init__(self, rules: RuleOracle, verbose: bool = False):
        self.rules = rules
        self.verbose = verbose
        self.config = SolverConfig()
        self.stats: Dict[str, Any] = {}
        self._reset_stats()
        self._rng = random.Random()
        self._start_time = 0.0
        self._deadline: Optional[float] = None

    def _reset_stats(self) -> None:
        self.stats = {
            'nodes_explored': 0,
            'elapsed_seconds': 0.0,
            'backtracks': 0,
            'illegal_values': 0,
            'propagation_failures': 0,
            'max_depth': 0,
            'timed_out': False,
        }

    @property
    def nodes_explored(self) -> int:
        return self.stats['nodes_explored']

    @property
    def elapsed_seconds(self) -> float:
        return self.stats['elapsed_seconds']

    @property
    def timed_out(self) -> bool:
        return self.stats['timed_out']

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self, initial, config: Optional[SolverConfig] = None):
        """
        Search for the first solution reachable from initial.

        The initial state is never modified.

        Args:
            initial: Starting state (partially filled puzzle)
            config: Heuristics, propagation and time budget

        Returns:
            A solved state, or None when the search is exhausted or the
            time budget expires (stats tell the two apart)
        """
        self.config = config or SolverConfig()
        self._reset_stats()
        self._rng = random.Random(self.config.seed)
        self._start_time = time.perf_counter()
        if self.config.time_limit_ms is not None:
            self._deadline = self._start_time + self.config.time_limit_ms / 1000.0
        else:
            self._deadline = None

        if self.verbose:
            print(f"Starting backtracking search: {self.config.describe()}")
            if self.config.time_limit_ms is not None:
                print(f"Time limit: {self.config.time_limit_ms} ms")

        previous_limit = sys.getrecursionlimit()
        self._ensure_recursion_headroom(initial)
        try:
            if self.config.use_trail:
                working = self.rules.copy_state(initial)
                result = self._backtrack_trail(working, 0)
                if result is not None:
                    # hand back a state without the undo log attached
                    result = self.rules.copy_state(result)
            else:
                result = self._backtrack(initial, 0)
        finally:
            sys.setrecursionlimit(previous_limit)

        self.stats['elapsed_seconds'] = time.perf_counter() - self._start_time

        if self.verbose:
            if result is not None:
                print("\n✓ Solution found!")
            elif self.stats['timed_out']:
                print("\n✗ Time limit reached")
            else:
                print("\n✗ No solution exists")
            self._print_stats()

        return result

    def _ensure_recursion_headroom(self, initial) -> None:
        needed = len(self.rules.unassigned_variables(initial)) + 200
        if needed > sys.getrecursionlimit():
            sys.setrecursionlimit(needed)

    # -------------------------------------------------------------------------
    # Backtracking (copy per node)
    # -------------------------------------------------------------------------
    def _backtrack(self, state, depth: int):
        if not self._enter_node(depth):
            return None

        if self.rules.is_complete(state):
            return state

        var = self.select_variable(state)
        if var is None:
            return None

        for value in self.order_domain_values(state, var):
            move = self.rules.make_move(var, value)

            if not self.rules.is_legal_move(state, move):
                self.stats['illegal_values'] += 1
                continue

            child = self.rules.apply_move(state, move)

            if self.config.propagates and not self._run_inference(child, move):
                self.stats['propagation_failures'] += 1
                continue

            result = self._backtrack(child, depth + 1)
            if result is not None:
                return result

        self.stats['backtracks'] += 1
        return None

    # -------------------------------------------------------------------------
    # Backtracking (single state + undo trail)
    # -------------------------------------------------------------------------
    def _backtrack_trail(self, state, depth: int):
        if not self._enter_node(depth):
            return None

        if self.rules.is_complete(state):
            return state

        var = self.select_variable(state)
        if var is None:
            return None

        for value in self.order_domain_values(state, var):
            move = self.rules.make_move(var, value)

            if not self.rules.is_legal_move(state, move):
                self.stats['illegal_values'] += 1
                continue

            mark = self.rules.checkpoint(state)
            self.rules.assign_in_place(state, move)

            if self.config.propagates and not self._run_inference(state, move):
                self.stats['propagation_failures'] += 1
                self.rules.rollback(state, mark)
                continue

            result = self._backtrack_trail(state, depth + 1)
            if result is not None:
                return result

            self.rules.rollback(state, mark)

        self.stats['backtracks'] += 1
        return None

    def _enter_node(self, depth: int) -> bool:
        """Count the node and enforce the time budget; False means stop."""
        self.stats['nodes_explored'] += 1
        if depth > self.stats['max_depth']:
            self.stats['max_depth'] = depth

        if self._deadline is not None and time.perf_counter() > self._deadline:
            self.stats['timed_out'] = True
            return False

        if self.verbose and self.stats['nodes_explored'] % PROGRESS_INTERVAL == 0:
            elapsed = time.perf_counter() - self._start_time
            print(f"  Progress: Nodes: {self.stats['nodes_explored']} | "
                  f"Backtracks: {self.stats['backtracks']} | Depth: {depth} | "
                  f"{elapsed:.1f}s")
        return True

    # -------------------------------------------------------------------------
    # Variable ordering (MRV / Degree)
    # -------------------------------------------------------------------------
    def select_variable(self, state):
        """
        Pick the next variable to assign.

        Single left-to-right scan. Under MRV+Degree the degree is computed
        only when a candidate sets a new minimum or ties the current one,
        and a tie replaces the best only on a strictly larger degree.
        """
        variables = self.rules.unassigned_variables(state)
        if not variables:
            return None

        use_mrv = self.config.use_mrv
        use_degree = self.config.use_degree

        if not use_mrv and not use_degree:
            return variables[0]

        best_var = None
        min_domain = sys.maxsize
        max_degree = -1

        for var in variables:
            if use_mrv and use_degree:
                size = self.rules.domain_size(state, var)
                if size < min_domain:
                    min_domain = size
                    max_degree = self.rules.degree(state, var)
                    best_var = var
                elif size == min_domain:
                    degree = self.rules.degree(state, var)
                    if degree > max_degree:
                        max_degree = degree
                        best_var = var
            elif use_mrv:
                size = self.rules.domain_size(state, var)
                if size < min_domain:
                    min_domain = size
                    best_var = var
            else:
                degree = self.rules.degree(state, var)
                if degree > max_degree:
                    max_degree = degree
                    best_var = var

        return best_var

    # -------------------------------------------------------------------------
    # Value ordering (LCV / shuffle)
    # -------------------------------------------------------------------------
    def order_domain_values(self, state, var) -> List[int]:
        values = list(self.rules.domain_values(state, var))

        if self.config.use_lcv:
            scores = {v: self.rules.count_constraints(state, var, v) for v in values}
            return sorted(values, key=lambda v: scores[v])

        if self.config.randomize:
            self._rng.shuffle(values)
        return values

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------
    def _run_inference(self, state, last_move) -> bool:
        if self.config.use_arc_consistency:
            return self.rules.ac3(state)
        if self.config.use_forward_checking:
            return self.rules.forward_checking(state, last_move)
        return True

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------
    def _print_stats(self) -> None:
        """Print solving statistics."""
        print("\nSolving Statistics:")
        print(f"  Nodes explored: {self.stats['nodes_explored']}")
        print(f"  Backtracks: {self.stats['backtracks']}")
        print(f"  Illegal values skipped: {self.stats['illegal_values']}")
        print(f"  Propagation failures: {self.stats['propagation_failures']}")
        print(f"  Max depth: {self.stats['max_depth']}")
        print(f"  Elapsed: {self.stats['elapsed_seconds']:.4f}s")
