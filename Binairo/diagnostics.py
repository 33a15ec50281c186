"""
Diagnostics: compare solver configurations on the same puzzle

Every configuration runs on its own copy of the start position, so the
node counts and timings are directly comparable.
"""

from typing import Dict, List, Optional

from CSP.config import COMPARISON_PRESETS, SolverConfig
from CSP.solver import CSPSolver
from .constraints import BinairoRules
from .position import GridState


def classify_outcome(solved: bool, stats: Dict) -> str:
    """SOLVED, TIMEOUT (budget hit) or EXHAUSTED (no solution in the tree)."""
    if solved:
        return "SOLVED"
    if stats.get('timed_out'):
        return "TIMEOUT"
    return "EXHAUSTED"


def run_configuration(puzzle: GridState, name: str, config: SolverConfig,
                      rules: Optional[BinairoRules] = None) -> Dict:
    """Solve a copy of puzzle with one configuration and collect the numbers."""
    rules = rules or BinairoRules()
    solver = CSPSolver(rules, verbose=False)
    solution = solver.solve(puzzle.copy(), config)
    solved = solution is not None

    return {
        'name': name,
        'config': config,
        'solved': solved,
        'valid': rules.is_valid_solution(solution) if solved else False,
        'outcome': classify_outcome(solved, solver.stats),
        'timed_out': solver.timed_out,
        'seconds': solver.elapsed_seconds,
        'nodes': solver.nodes_explored,
        'backtracks': solver.stats['backtracks'],
        'solution': solution,
    }


def compare_algorithms(puzzle: GridState,
                       presets: Optional[Dict[str, SolverConfig]] = None,
                       time_limit_ms: Optional[int] = None) -> List[Dict]:
    """
    Run each preset on the same start position.

    Args:
        puzzle: Start position (left untouched)
        presets: name -> config, defaults to BT Simple / MRV / MRV+FC /
                 MRV+LCV / MRV+AC3
        time_limit_ms: Optional budget applied to every preset

    Returns:
        One result dict per preset, in preset order
    """
    presets = presets or COMPARISON_PRESETS
    rules = BinairoRules()
    results = []
    for name, config in presets.items():
        if time_limit_ms is not None:
            config = config.with_changes(time_limit_ms=time_limit_ms)
        results.append(run_configuration(puzzle, name, config, rules))
    return results


def format_comparison_table(results: List[Dict]) -> str:
    lines = []
    lines.append(f"{'Algo':<20} | {'Time(s)':<8} | {'Nodes':<8} | Result")
    lines.append("-" * 55)
    for r in results:
        lines.append(f"{r['name']:<20} | {r['seconds']:<8.4f} | {r['nodes']:<8d} | {r['outcome']}")
    return "\n".join(lines)


def print_comparison(puzzle: GridState, time_limit_ms: Optional[int] = None) -> List[Dict]:
    """Run the default comparison and print it."""
    print(f"\n{'='*60}")
    print(f"COMPARISON: {puzzle.n}x{puzzle.n}, {puzzle.empty_count()} empty cells")
    print(f"{'='*60}\n")

    results = compare_algorithms(puzzle, time_limit_ms=time_limit_ms)
    print(format_comparison_table(results))

    outcomes = {r['outcome'] for r in results if r['outcome'] != "TIMEOUT"}
    if len(outcomes) > 1:
        print("\n⚠️  Configurations disagree on satisfiability")
    print(f"\n{'='*60}")
    return results
