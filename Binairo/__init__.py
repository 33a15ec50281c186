"""
Binairo Puzzle Solver Package

Grid state, rule oracle, puzzle generator and manual play for Binairo
(Takuzu), solved with the generic engine in the CSP package.
"""

from .position import GridState, Move, EMPTY, ZERO, ONE
from .constraints import BinairoRules
from .generator import PuzzleGenerator
from .output import SolutionFormatter, render_board_image, save_board_image
from .diagnostics import compare_algorithms
from .game import ManualSession

__version__ = "1.0.0"
__all__ = [
    'GridState',
    'Move',
    'EMPTY',
    'ZERO',
    'ONE',
    'BinairoRules',
    'PuzzleGenerator',
    'SolutionFormatter',
    'render_board_image',
    'save_board_image',
    'compare_algorithms',
    'ManualSession',
]
