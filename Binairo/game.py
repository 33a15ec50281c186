"""
Manual play session

Givens stay fixed; every move is checked with the same legality rules the
solver uses. HINT runs a quick MRV + forward checking search from the
current position and reveals the first empty cell.
"""

from typing import Callable, Optional, Tuple

from CSP.config import HINT_CONFIG
from CSP.solver import CSPSolver
from .constraints import BinairoRules
from .position import EMPTY, GridState, Move


PROMPT = "Move (row col value), HINT, ERASE row col or EXIT: "


class ManualSession:
    def __init__(self, puzzle: GridState, rules: Optional[BinairoRules] = None):
        self.puzzle = puzzle
        self.current = puzzle.copy()
        self.rules = rules or BinairoRules()
        self.solver = CSPSolver(self.rules, verbose=False)
        self.exited = False

    def _in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.current.n and 0 <= c < self.current.n

    def is_given(self, r: int, c: int) -> bool:
        return self.puzzle.board[r, c] != EMPTY

    def is_solved(self) -> bool:
        return self.rules.is_complete(self.current)

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------
    def play(self, r: int, c: int, value: int) -> Tuple[bool, str]:
        """
        Write value at (r, c) if the rules allow it.

        An existing (non-given) value is lifted before the check so the
        parity counters are not counted twice; it is put back if the new
        value is rejected.
        """
        if not self._in_bounds(r, c):
            return False, f"Cell ({r}, {c}) is outside the {self.current.n}x{self.current.n} grid"
        if value not in (0, 1):
            return False, "Value must be 0 or 1"
        if self.is_given(r, c):
            return False, f"Cell ({r}, {c}) is a given"

        previous = int(self.current.board[r, c])
        if previous == value:
            return True, ""
        if previous != EMPTY:
            self.current.clear(r, c)

        move = Move(r, c, value)
        if not self.rules.is_legal_move(self.current, move):
            if previous != EMPTY:
                self.current.assign(r, c, previous)
            return False, "Invalid move!"

        self.current.assign(r, c, value)
        return True, ""

    def erase(self, r: int, c: int) -> Tuple[bool, str]:
        if not self._in_bounds(r, c):
            return False, f"Cell ({r}, {c}) is outside the grid"
        if self.is_given(r, c):
            return False, f"Cell ({r}, {c}) is a given"
        if self.current.is_empty(r, c):
            return False, f"Cell ({r}, {c}) is already empty"
        self.current.clear(r, c)
        return True, ""

    def hint(self) -> Optional[Move]:
        """
        Value of the first empty cell (row-major) in a solution reachable
        from the current position, or None if there is none.
        """
        empties = self.rules.unassigned_variables(self.current)
        if not empties:
            return None
        solution = self.solver.solve(self.current, HINT_CONFIG)
        if solution is None:
            return None
        r, c = empties[0]
        return Move(r, c, int(solution.board[r, c]))

    # -------------------------------------------------------------------------
    # Text commands
    # -------------------------------------------------------------------------
    def handle(self, command: str) -> str:
        """Apply one text command and return the message to show (may be empty)."""
        parts = command.strip().upper().split()
        if not parts:
            return ""

        if parts[0] == "EXIT":
            self.exited = True
            return "Bye."

        if parts[0] == "HINT":
            move = self.hint()
            if move is None:
                return "Impossible!"
            return f"Hint: {move.value} at {move.row},{move.col}"

        try:
            if parts[0] == "ERASE":
                if len(parts) != 3:
                    return "Format error."
                _, message = self.erase(int(parts[1]), int(parts[2]))
                return message
            if len(parts) != 3:
                return "Format error."
            r, c, v = (int(p) for p in parts)
        except ValueError:
            return "Format error."

        _, message = self.play(r, c, v)
        return message

    def run(self, input_fn: Optional[Callable[[str], str]] = None,
            output_fn: Optional[Callable[[str], None]] = None) -> bool:
        """
        Interactive loop until the grid is solved or the player exits.

        Returns:
            True if the grid was completed
        """
        input_fn = input_fn or input
        output_fn = output_fn or print
        while not self.is_solved() and not self.exited:
            output_fn(str(self.current))
            try:
                command = input_fn(PROMPT)
            except EOFError:
                self.exited = True
                break
            message = self.handle(command)
            if message:
                output_fn(message)

        if self.is_solved():
            output_fn(str(self.current))
            output_fn("Well done!")
            return True
        return False
