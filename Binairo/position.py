"""
Core data structures for Binairo (Takuzu) grid representation

The grid state keeps the board, a 2-bit domain mask per cell and running
row/column parity counters. Search copies the whole state per node by
default; an optional undo trail lets the engine restore only what changed.
"""
import json
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np


EMPTY = -1
ZERO = 0
ONE = 1

MASK_ZERO = 0b01
MASK_ONE = 0b10
MASK_BOTH = 0b11

# popcount for the four possible 2-bit masks
_DOMAIN_SIZE = (0, 1, 1, 2)

Cell = Tuple[int, int]
RowData = Union[str, Sequence[Optional[int]]]


@dataclass(frozen=True)
class Move:
    """A single assignment (row, col) -> value"""
    row: int
    col: int
    value: int

    @property
    def cell(self) -> Cell:
        return (self.row, self.col)

    def __str__(self):
        return f"Move: ({self.row}, {self.col}) -> {self.value}"


def value_bit(value: int) -> int:
    """Domain bit for a cell value"""
    return MASK_ZERO if value == ZERO else MASK_ONE


def validate_size(n: int) -> None:
    """Reject grid sizes that cannot hold a Binairo puzzle."""
    if not isinstance(n, (int, np.integer)) or isinstance(n, bool):
        raise ValueError(f"Grid size must be an integer, got {n!r}")
    if n <= 0:
        raise ValueError(f"Grid size must be positive, got {n}")
    if n % 2 != 0:
        raise ValueError(f"Grid size must be even, got {n}")


class GridState:
    """Board values, per-cell domain masks and parity counters"""

    def __init__(self, n: int):
        validate_size(n)
        self.n = int(n)
        self.board = np.full((self.n, self.n), EMPTY, dtype=np.int8)
        self.domain_mask = np.full((self.n, self.n), MASK_BOTH, dtype=np.uint8)
        self.row_zero_count = np.zeros(self.n, dtype=np.int16)
        self.row_one_count = np.zeros(self.n, dtype=np.int16)
        self.col_zero_count = np.zeros(self.n, dtype=np.int16)
        self.col_one_count = np.zeros(self.n, dtype=np.int16)
        # Undo log: None while inactive, list of entries once a checkpoint is taken
        self._trail: Optional[list] = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------
    @classmethod
    def from_rows(cls, rows: Sequence[RowData]) -> "GridState":
        """
        Build a state from row strings ("01..10") or lists of 0/1/None.

        Givens are assigned with their counters and collapsed domains.
        Rule violations among the givens are not rejected here; use
        BinairoRules.violations() to inspect them.
        """
        n = len(rows)
        validate_size(n)
        state = cls(n)
        for r, row in enumerate(rows):
            cells = list(row)
            if len(cells) != n:
                raise ValueError(f"Row {r} has {len(cells)} cells, expected {n}")
            for c, raw in enumerate(cells):
                value = _parse_cell(raw, r, c)
                if value != EMPTY:
                    state.assign(r, c, value)
        return state

    @classmethod
    def from_dict(cls, data: dict) -> "GridState":
        """Build a state from the puzzle JSON layout {"size": n, "grid": [...]}"""
        if "grid" not in data:
            raise ValueError("Puzzle data has no 'grid' entry")
        state = cls.from_rows(data["grid"])
        size = data.get("size")
        if size is not None and size != state.n:
            raise ValueError(f"Declared size {size} does not match grid size {state.n}")
        return state

    @classmethod
    def load(cls, json_path: str) -> "GridState":
        """Load puzzle from JSON file"""
        with open(json_path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, json_path: str) -> None:
        """Save puzzle to JSON file"""
        with open(json_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict:
        return {'size': self.n, 'grid': self.to_rows()}

    def to_rows(self) -> List[str]:
        """Rows as strings of 0/1/'.'"""
        return [
            "".join('.' if v == EMPTY else str(int(v)) for v in row)
            for row in self.board
        ]

    def copy(self) -> "GridState":
        """Independent deep copy (the undo trail is not carried over)"""
        other = GridState.__new__(GridState)
        other.n = self.n
        other.board = self.board.copy()
        other.domain_mask = self.domain_mask.copy()
        other.row_zero_count = self.row_zero_count.copy()
        other.row_one_count = self.row_one_count.copy()
        other.col_zero_count = self.col_zero_count.copy()
        other.col_one_count = self.col_one_count.copy()
        other._trail = None
        return other

    # -------------------------------------------------------------------------
    # Domain model
    # -------------------------------------------------------------------------
    def domain_size(self, r: int, c: int) -> int:
        return _DOMAIN_SIZE[self.domain_mask[r, c]]

    def domain_allows(self, r: int, c: int, value: int) -> bool:
        return bool(self.domain_mask[r, c] & value_bit(value))

    def collapse_domain(self, r: int, c: int, value: int) -> None:
        self._set_mask(r, c, value_bit(value))

    def reset_domain(self, r: int, c: int) -> None:
        self._set_mask(r, c, MASK_BOTH)

    def remove_value(self, r: int, c: int, value: int) -> None:
        """Drop one value from a cell's domain"""
        self._set_mask(r, c, int(self.domain_mask[r, c]) & ~value_bit(value) & MASK_BOTH)

    def _set_mask(self, r: int, c: int, mask: int) -> None:
        if self._trail is not None:
            self._trail.append(('mask', r, c, int(self.domain_mask[r, c])))
        self.domain_mask[r, c] = mask

    # -------------------------------------------------------------------------
    # Cell assignment
    # -------------------------------------------------------------------------
    def assign(self, r: int, c: int, value: int) -> None:
        """Write a value into an empty cell, update counters and collapse its domain"""
        if value not in (ZERO, ONE):
            raise ValueError(f"Cell value must be 0 or 1, got {value!r}")
        if self.board[r, c] != EMPTY:
            raise ValueError(f"Cell ({r}, {c}) is already assigned")
        if self._trail is not None:
            self._trail.append(('assign', r, c, value))
        self.board[r, c] = value
        self._bump(r, c, value, 1)
        self.collapse_domain(r, c, value)

    def clear(self, r: int, c: int) -> int:
        """
        Empty an assigned cell.

        Decrements the parity counters and resets the domain to both values.

        Returns:
            The value that was removed
        """
        value = int(self.board[r, c])
        if value == EMPTY:
            raise ValueError(f"Cell ({r}, {c}) is already empty")
        if self._trail is not None:
            self._trail.append(('clear', r, c, value))
        self.board[r, c] = EMPTY
        self._bump(r, c, value, -1)
        self.reset_domain(r, c)
        return value

    def _bump(self, r: int, c: int, value: int, delta: int) -> None:
        if value == ZERO:
            self.row_zero_count[r] += delta
            self.col_zero_count[c] += delta
        else:
            self.row_one_count[r] += delta
            self.col_one_count[c] += delta

    # -------------------------------------------------------------------------
    # Undo trail
    # -------------------------------------------------------------------------
    def checkpoint(self) -> int:
        """Start (or continue) recording changes and return a rollback mark"""
        if self._trail is None:
            self._trail = []
        return len(self._trail)

    def rollback(self, mark: int) -> None:
        """Undo every recorded change made after the given mark"""
        trail = self._trail
        if trail is None:
            return
        while len(trail) > mark:
            kind, r, c, old = trail.pop()
            if kind == 'mask':
                self.domain_mask[r, c] = old
            elif kind == 'assign':
                self.board[r, c] = EMPTY
                self._bump(r, c, old, -1)
            else:
                self.board[r, c] = old
                self._bump(r, c, old, 1)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def is_empty(self, r: int, c: int) -> bool:
        return self.board[r, c] == EMPTY

    def empty_count(self) -> int:
        return int(np.count_nonzero(self.board == EMPTY))

    def filled_count(self) -> int:
        return self.n * self.n - self.empty_count()

    def counters_consistent(self) -> bool:
        """Check that the parity counters match the board contents"""
        zeros = self.board == ZERO
        ones = self.board == ONE
        return (
            np.array_equal(self.row_zero_count, zeros.sum(axis=1))
            and np.array_equal(self.row_one_count, ones.sum(axis=1))
            and np.array_equal(self.col_zero_count, zeros.sum(axis=0))
            and np.array_equal(self.col_one_count, ones.sum(axis=0))
        )

    def __eq__(self, other):
        return isinstance(other, GridState) and np.array_equal(self.board, other.board)

    def __hash__(self):
        return hash(self.board.tobytes())

    def __repr__(self):
        return f"GridState(n={self.n}, empty={self.empty_count()})"

    def __str__(self):
        lines = ["  " + "".join(f"{j} " for j in range(self.n))]
        for i in range(self.n):
            cells = "".join(
                ". " if v == EMPTY else f"{int(v)} " for v in self.board[i]
            )
            lines.append(f"{i} {cells}")
        return "\n".join(lines) + "\n"


def _parse_cell(raw, r: int, c: int) -> int:
    """Map one cell of an input row to EMPTY/0/1"""
    if raw is None or raw == '.' or raw == EMPTY:
        return EMPTY
    if raw in ('0', 0):
        return ZERO
    if raw in ('1', 1):
        return ONE
    raise ValueError(f"Invalid cell value {raw!r} at ({r}, {c})")
