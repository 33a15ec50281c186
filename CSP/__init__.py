"""
Generic CSP backtracking engine

Variable ordering (MRV, Degree), value ordering (LCV) and propagation
(Forward Checking, AC-3) over any puzzle that implements RuleOracle.
"""

from .config import SolverConfig, GENERATION_CONFIG, HINT_CONFIG, COMPARISON_PRESETS
from .solver import CSPSolver, RuleOracle

__version__ = "1.0.0"
__all__ = [
    'SolverConfig',
    'GENERATION_CONFIG',
    'HINT_CONFIG',
    'COMPARISON_PRESETS',
    'CSPSolver',
    'RuleOracle',
]
