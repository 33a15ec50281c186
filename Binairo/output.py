import json
from dataclasses import asdict
from datetime import datetime
from typing import Dict, Optional

import cv2
import numpy as np

from CSP.config import SolverConfig
from .constraints import BinairoRules
from .position import EMPTY, GridState


GIVEN_COLOR = (30, 30, 30)        # BGR
SOLVED_COLOR = (200, 90, 0)
EMPTY_FILL = (235, 235, 235)
GRID_COLOR = (120, 120, 120)
LABEL_COLOR = (90, 90, 90)


class SolutionFormatter:
    """Formats puzzles and solutions for output"""

    @staticmethod
    def format_grid(state: GridState) -> str:
        """
        Column-index header, then one line per row prefixed by its index;
        cells are digits or '.' for empty, each followed by a space.
        """
        return str(state)

    @staticmethod
    def format_solution_json(puzzle: GridState, solution: Optional[GridState],
                             stats: Dict, config: Optional[SolverConfig] = None) -> Dict:
        """
        Format puzzle, solution and solver statistics as JSON
        """
        rules = BinairoRules()
        report = {
            'puzzle_info': {
                'size': puzzle.n,
                'empty_cells': puzzle.empty_count(),
                'solved': solution is not None,
                'timestamp': datetime.now().isoformat()
            },
            'solving_stats': dict(stats),
            'config': asdict(config) if config is not None else None,
            'puzzle': puzzle.to_rows(),
            'solution': solution.to_rows() if solution is not None else None,
            'validation': {}
        }

        if solution is not None:
            problems = rules.violations(solution)
            report['validation'] = {
                'valid': solution.empty_count() == 0 and not problems,
                'violations': problems,
                'givens_kept': SolutionFormatter._givens_kept(puzzle, solution),
            }

        return report

    @staticmethod
    def _givens_kept(puzzle: GridState, solution: GridState) -> bool:
        """Check that every given of the puzzle survives in the solution"""
        given = puzzle.board != EMPTY
        return bool(np.array_equal(puzzle.board[given], solution.board[given]))

    @staticmethod
    def format_solution_human_readable(puzzle: GridState, solution: Optional[GridState],
                                       stats: Dict) -> str:
        """
        Format solution as human-readable text
        """
        lines = []
        lines.append("=" * 60)
        lines.append("BINAIRO SOLUTION")
        lines.append("=" * 60)
        lines.append(f"\nPuzzle is {puzzle.n}x{puzzle.n} with {puzzle.empty_count()} empty cells\n")

        lines.append("PUZZLE:")
        lines.append("-" * 60)
        lines.append(SolutionFormatter.format_grid(puzzle))

        if solution is None:
            lines.append("No solution found.")
        else:
            lines.append("SOLUTION:")
            lines.append("-" * 60)
            lines.append(SolutionFormatter.format_grid(solution))

            problems = BinairoRules().violations(solution)
            status = "✓" if not problems else "✗"
            lines.append(f"Rules check: {status}")
            for problem in problems:
                lines.append(f"  - {problem}")

        lines.append("\n" + "=" * 60)
        lines.append("STATISTICS:")
        lines.append("-" * 60)
        lines.append(f"Nodes explored: {stats.get('nodes_explored', 0)}")
        lines.append(f"Elapsed: {stats.get('elapsed_seconds', 0.0):.4f}s")
        lines.append(f"Backtracks: {stats.get('backtracks', 0)}")
        if stats.get('timed_out'):
            lines.append("Stopped by time limit")
        lines.append("=" * 60)

        return "\n".join(lines)

    @staticmethod
    def save_solution(puzzle: GridState, solution: Optional[GridState], stats: Dict,
                      output_path: str, config: Optional[SolverConfig] = None):
        """
        Save solution to JSON file
        """
        report = SolutionFormatter.format_solution_json(puzzle, solution, stats, config)

        with open(output_path, 'w') as f:
            json.dump(report, f, indent=2)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(puzzle: GridState, solution: Optional[GridState], stats: Dict,
                            output_path: str):
        """
        Save human-readable solution to text file
        """
        text = SolutionFormatter.format_solution_human_readable(puzzle, solution, stats)

        with open(output_path, 'w') as f:
            f.write(text)

        print(f"✓ Human-readable solution saved to: {output_path}")


# --------------------------- Board images ---------------------------

def render_board_image(state: GridState, givens: Optional[GridState] = None,
                       cell_size: int = 48) -> np.ndarray:
    """
    Draw the board as a BGR image.

    Cells that are filled in `givens` are drawn dark, cells filled only in
    `state` are drawn blue, empty cells are shaded. Row/column indices run
    along the top and left margins.
    """
    n = state.n
    margin = cell_size // 2
    size = 2 * margin + n * cell_size
    img = np.full((size, size, 3), 255, dtype=np.uint8)

    font = cv2.FONT_HERSHEY_SIMPLEX
    digit_scale = cell_size / 40.0
    label_scale = cell_size / 100.0

    for r in range(n):
        for c in range(n):
            x = margin + c * cell_size
            y = margin + r * cell_size
            value = int(state.board[r, c])
            if value == EMPTY:
                cv2.rectangle(img, (x, y), (x + cell_size, y + cell_size), EMPTY_FILL, -1)
                continue
            is_given = givens is not None and givens.board[r, c] != EMPTY
            color = GIVEN_COLOR if (givens is None or is_given) else SOLVED_COLOR
            text = str(value)
            (tw, th), _ = cv2.getTextSize(text, font, digit_scale, 2)
            cv2.putText(img, text, (x + (cell_size - tw) // 2, y + (cell_size + th) // 2),
                        font, digit_scale, color, 2, cv2.LINE_AA)

    for k in range(n + 1):
        offset = margin + k * cell_size
        thickness = 2 if k in (0, n) else 1
        cv2.line(img, (margin, offset), (margin + n * cell_size, offset), GRID_COLOR, thickness)
        cv2.line(img, (offset, margin), (offset, margin + n * cell_size), GRID_COLOR, thickness)

    for k in range(n):
        label = str(k)
        (tw, th), _ = cv2.getTextSize(label, font, label_scale, 1)
        centre = margin + k * cell_size + cell_size // 2
        cv2.putText(img, label, (centre - tw // 2, (margin + th) // 2),
                    font, label_scale, LABEL_COLOR, 1, cv2.LINE_AA)
        cv2.putText(img, label, ((margin - tw) // 2, centre + th // 2),
                    font, label_scale, LABEL_COLOR, 1, cv2.LINE_AA)

    return img


def save_board_image(state: GridState, output_path: str,
                     givens: Optional[GridState] = None, cell_size: int = 48) -> None:
    img = render_board_image(state, givens, cell_size)
    if not cv2.imwrite(str(output_path), img):
        raise OSError(f"Could not write image to {output_path}")
    print(f"✓ Board image saved to: {output_path}")
