"""
Constraint checking and propagation for Binairo

Rules:
 - Triple rule: no three consecutive equal values in a row or column
 - Parity rule: at most n/2 of each value per row and column
 - Uniqueness: no two full rows (or full columns) are identical

Propagation:
 - Forward checking: revise the row/column neighbours of the last move
 - AC-3: worklist of arcs between unassigned cells sharing a line

Compatible with:
  from CSP.solver import CSPSolver, RuleOracle
"""

from collections import deque
from typing import Deque, List, Tuple

import numpy as np

from CSP.solver import RuleOracle
from .position import EMPTY, ONE, ZERO, Cell, GridState, Move


Arc = Tuple[Cell, Cell]


class BinairoRules(RuleOracle):
    """Binairo rule oracle for the generic backtracking engine."""

    # ---------- rules ----------

    @staticmethod
    def check_move_rules(state: GridState, r: int, c: int, value: int) -> bool:
        """
        Immediate legality of writing value at (r, c).

        Looks only at the board neighbours and the parity counters; the
        cell's own domain mask and current content are not consulted.
        Counters are assumed not to include the candidate value yet.
        """
        b = state.board
        n = state.n

        # 1. Triple rule, three windows per axis
        if c >= 2 and b[r, c - 1] == value and b[r, c - 2] == value:
            return False
        if c < n - 2 and b[r, c + 1] == value and b[r, c + 2] == value:
            return False
        if 0 < c < n - 1 and b[r, c - 1] == value and b[r, c + 1] == value:
            return False

        if r >= 2 and b[r - 1, c] == value and b[r - 2, c] == value:
            return False
        if r < n - 2 and b[r + 1, c] == value and b[r + 2, c] == value:
            return False
        if 0 < r < n - 1 and b[r - 1, c] == value and b[r + 1, c] == value:
            return False

        # 2. Parity rule
        half = n // 2
        if value == ZERO:
            if state.row_zero_count[r] + 1 > half or state.col_zero_count[c] + 1 > half:
                return False
        else:
            if state.row_one_count[r] + 1 > half or state.col_one_count[c] + 1 > half:
                return False

        return True

    def is_legal_move(self, state: GridState, move: Move) -> bool:
        if move.value not in (ZERO, ONE):
            return False
        return self.check_move_rules(state, move.row, move.col, move.value)

    @staticmethod
    def lines_distinct(state: GridState) -> bool:
        """Full rows are pairwise distinct, and so are full columns."""
        for lines in (state.board, state.board.T):
            seen = set()
            for line in lines:
                if (line == EMPTY).any():
                    continue
                key = line.tobytes()
                if key in seen:
                    return False
                seen.add(key)
        return True

    def is_complete(self, state: GridState) -> bool:
        if (state.board == EMPTY).any():
            return False
        return self.lines_distinct(state)

    def violations(self, state: GridState) -> List[str]:
        """
        Human-readable list of every rule the board currently breaks.

        Empty for any position the search can produce; non-empty results
        point at bad givens or at manual edits.
        """
        problems: List[str] = []
        n = state.n
        half = n // 2

        for axis, lines in (("Row", state.board), ("Column", state.board.T)):
            full_seen = {}
            for i, line in enumerate(lines):
                for k in range(n - 2):
                    v = line[k]
                    if v != EMPTY and line[k + 1] == v and line[k + 2] == v:
                        problems.append(f"{axis} {i}: three {int(v)}s starting at {k}")
                zeros = int(np.count_nonzero(line == ZERO))
                ones = int(np.count_nonzero(line == ONE))
                if zeros > half:
                    problems.append(f"{axis} {i}: {zeros} zeros (max {half})")
                if ones > half:
                    problems.append(f"{axis} {i}: {ones} ones (max {half})")
                if zeros + ones == n:
                    key = line.tobytes()
                    if key in full_seen:
                        problems.append(f"{axis}s {full_seen[key]} and {i} are identical")
                    else:
                        full_seen[key] = i

        if not state.counters_consistent():
            problems.append("Parity counters do not match the board")
        return problems

    def is_valid_solution(self, state: GridState) -> bool:
        return state.empty_count() == 0 and not self.violations(state)

    # ---------- variables & domains ----------

    def unassigned_variables(self, state: GridState) -> List[Cell]:
        """Empty cells in row-major order"""
        return [(int(r), int(c)) for r, c in np.argwhere(state.board == EMPTY)]

    def domain_size(self, state: GridState, var: Cell) -> int:
        return state.domain_size(*var)

    def domain_values(self, state: GridState, var: Cell) -> List[int]:
        r, c = var
        return [v for v in (ZERO, ONE) if state.domain_allows(r, c, v)]

    def degree(self, state: GridState, var: Cell) -> int:
        """Unassigned cells sharing the row or column with var (var excluded)"""
        r, c = var
        count = int(np.count_nonzero(state.board[r, :] == EMPTY))
        count += int(np.count_nonzero(state.board[:, c] == EMPTY))
        if state.board[r, c] == EMPTY:
            count -= 2
        return count

    def count_constraints(self, state: GridState, var: Cell, value: int) -> int:
        """
        LCV score: neighbour (cell, value) pairs that become illegal once
        value sits at var. Lower is less constraining.

        The value is written to the board only for the duration of the
        count; counters and masks are left alone.
        """
        r, c = var
        b = state.board
        n = state.n
        cost = 0

        old = b[r, c]
        b[r, c] = value
        try:
            for k in range(n):
                if k == c or b[r, k] != EMPTY:
                    continue
                for v in (ZERO, ONE):
                    if state.domain_allows(r, k, v) and not self.check_move_rules(state, r, k, v):
                        cost += 1
            for k in range(n):
                if k == r or b[k, c] != EMPTY:
                    continue
                for v in (ZERO, ONE):
                    if state.domain_allows(k, c, v) and not self.check_move_rules(state, k, c, v):
                        cost += 1
        finally:
            b[r, c] = old

        return cost

    # ---------- state transitions ----------

    def make_move(self, var: Cell, value: int) -> Move:
        return Move(var[0], var[1], value)

    def apply_move(self, state: GridState, move: Move) -> GridState:
        child = state.copy()
        child.assign(move.row, move.col, move.value)
        return child

    def assign_in_place(self, state: GridState, move: Move) -> None:
        state.assign(move.row, move.col, move.value)

    def copy_state(self, state: GridState) -> GridState:
        return state.copy()

    def checkpoint(self, state: GridState) -> int:
        return state.checkpoint()

    def rollback(self, state: GridState, mark: int) -> None:
        state.rollback(mark)

    # ---------- forward checking ----------

    def forward_checking(self, state: GridState, last_move: Move) -> bool:
        """
        Remove now-illegal values from every empty cell in the row and
        column of last_move. Stops at the first emptied domain.
        """
        r, c = last_move.row, last_move.col
        for k in range(state.n):
            if state.board[r, k] == EMPTY and not self._revise(state, r, k):
                return False
        for k in range(state.n):
            if state.board[k, c] == EMPTY and not self._revise(state, k, c):
                return False
        return True

    def _revise(self, state: GridState, r: int, c: int) -> bool:
        """Prune illegal values from one cell; False if nothing is left."""
        to_remove = [
            v for v in (ZERO, ONE)
            if state.domain_allows(r, c, v) and not self.check_move_rules(state, r, c, v)
        ]
        for v in to_remove:
            state.remove_value(r, c, v)
        return state.domain_size(r, c) > 0

    # ---------- AC-3 ----------

    def ac3(self, state: GridState) -> bool:
        """
        Arc consistency over every pair of empty cells sharing a line.

        Returns False as soon as a revision empties a domain. True means
        the queue drained: arc-consistent, not necessarily solvable.
        """
        queue: Deque[Arc] = deque()
        for xi in self.unassigned_variables(state):
            for xj in self._line_neighbours(state, xi):
                queue.append((xi, xj))

        while queue:
            xi, xj = queue.popleft()
            if self._revise_arc(state, xi, xj):
                if state.domain_size(*xi) == 0:
                    return False
                for xk in self._line_neighbours(state, xi):
                    if xk != xj:
                        queue.append((xk, xi))
        return True

    @staticmethod
    def _line_neighbours(state: GridState, cell: Cell) -> List[Cell]:
        """Empty cells in the same row, then the same column"""
        r, c = cell
        b = state.board
        row = [(r, k) for k in range(state.n) if k != c and b[r, k] == EMPTY]
        col = [(k, c) for k in range(state.n) if k != r and b[k, c] == EMPTY]
        return row + col

    def _revise_arc(self, state: GridState, xi: Cell, xj: Cell) -> bool:
        """Drop values of xi with no supporting value in xj's domain."""
        to_remove = []
        for x in (ZERO, ONE):
            if not state.domain_allows(xi[0], xi[1], x):
                continue
            supported = any(
                state.domain_allows(xj[0], xj[1], y) and self._consistent_pair(state, xi, x, xj, y)
                for y in (ZERO, ONE)
            )
            if not supported:
                to_remove.append(x)

        for x in to_remove:
            state.remove_value(xi[0], xi[1], x)
        return bool(to_remove)

    def _consistent_pair(self, state: GridState, xi: Cell, x: int, xj: Cell, y: int) -> bool:
        """Trial placement xi=x, xj=y on the board (counters untouched)."""
        b = state.board
        old_i = b[xi]
        old_j = b[xj]
        b[xi] = x
        b[xj] = y
        try:
            return (self.check_move_rules(state, xi[0], xi[1], x)
                    and self.check_move_rules(state, xj[0], xj[1], y))
        finally:
            b[xi] = old_i
            b[xj] = old_j
