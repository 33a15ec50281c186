#!/usr/bin/env python3
"""
Binairo Solver - Main Entry Point

Usage:
    python -m Binairo.main solve data/json/puzzle.json [--mrv --degree --lcv --fc --ac3]
    python -m Binairo.main compare data/json/puzzle.json
    python -m Binairo.main generate 8 [--fraction 0.6] [--seed 7] [--output puzzle.json]
    python -m Binairo.main play data/json/puzzle.json
    python -m Binairo.main          # Solves all puzzles in data/json/
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from CSP.config import SolverConfig
from CSP.solver import CSPSolver
from .constraints import BinairoRules
from .diagnostics import print_comparison
from .game import ManualSession
from .generator import DEFAULT_REMOVAL_FRACTION, PuzzleGenerator
from .output import SolutionFormatter, save_board_image
from .position import GridState

# ============================================================================
# CONFIGURATION
# ============================================================================
DATA_DIR = "data/json"          # Puzzles solved when no command is given
OUTPUT_DIR = "data/debug"       # Base output directory
SAVE_IMAGES = True              # Write a PNG of every solved board

# --- Default solver strategy ---
USE_MRV = True
USE_DEGREE = True
USE_LCV = False
USE_FORWARD_CHECKING = True
USE_ARC_CONSISTENCY = False
# AC-3 rebuilds every arc at every node: strong pruning, slow on big grids

TIME_LIMIT_MS = 60000
# Maximum time to spend solving a single puzzle
# ============================================================================

DEFAULT_CONFIG = SolverConfig(
    use_mrv=USE_MRV,
    use_degree=USE_DEGREE,
    use_lcv=USE_LCV,
    use_forward_checking=USE_FORWARD_CHECKING,
    use_arc_consistency=USE_ARC_CONSISTENCY,
    time_limit_ms=TIME_LIMIT_MS,
)

PROJECT_ROOT = Path(__file__).parent.parent


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() or p.exists() else PROJECT_ROOT / p


def solve_puzzle(input_path: str, output_dir: Optional[str] = None, verbose: bool = True,
                 config: SolverConfig = DEFAULT_CONFIG, save_image: bool = SAVE_IMAGES):
    """
    Solve a single puzzle and save results.

    Args:
        input_path: Path to input JSON file
        output_dir: Directory for output files (default: data/debug/<puzzle_name>/)
        verbose: Print detailed solving progress
        config: Heuristics, propagation and time limit
        save_image: Also render the solved board as PNG

    Returns:
        (solved, puzzle, solver) - puzzle and solver are None if loading failed
    """
    puzzle_name = Path(input_path).stem

    if output_dir is None:
        output_dir = PROJECT_ROOT / OUTPUT_DIR / puzzle_name

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Loading puzzle: {input_path}")
    print(f"Output directory: {output_dir}")
    print(f"{'='*60}")

    try:
        puzzle = GridState.load(str(input_path))
    except (OSError, ValueError) as e:
        print(f"\nError while loading {input_path}: {e}")
        return False, None, None

    rules = BinairoRules()
    problems = rules.violations(puzzle)
    if problems and verbose:
        print("\n⚠ Givens already break the rules:")
        for problem in problems:
            print(f"  - {problem}")

    solver = CSPSolver(rules, verbose=verbose)

    if verbose:
        print(f"\n{puzzle}")
        print("Solver Configuration:")
        print(f"  Strategy: {config.describe()}")
        timeout = f"{config.time_limit_ms} ms" if config.time_limit_ms is not None else "none"
        print(f"  Timeout: {timeout}")
        print("\n💡 Tip: Press Ctrl+C at any time to stop solving\n")

    try:
        solution = solver.solve(puzzle, config)
    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        return False, puzzle, solver

    json_output = output_dir / "solution.json"
    text_output = output_dir / "solution.txt"
    SolutionFormatter.save_solution(puzzle, solution, solver.stats, str(json_output), config)
    SolutionFormatter.save_human_readable(puzzle, solution, solver.stats, str(text_output))

    if solution is not None:
        print(f"\n{'='*60}")
        print("SUCCESS! Puzzle solved ✓")
        print(f"{'='*60}")
        if save_image:
            save_board_image(solution, str(output_dir / "solution.png"), givens=puzzle)
        if verbose:
            print("\n" + SolutionFormatter.format_grid(solution))
        return True, puzzle, solver

    print(f"\n{'='*60}")
    if solver.timed_out:
        print("FAILED: Time limit reached ✗")
    else:
        print("FAILED: Puzzle has no solution ✗")
    print(f"{'='*60}")
    return False, puzzle, solver


def solve_all_puzzles(data_dir: Optional[str] = None, output_dir: Optional[str] = None,
                      config: SolverConfig = DEFAULT_CONFIG) -> List[dict]:
    """
    Solve all puzzles in data/json/ (or a specified directory)
    """
    data_path = Path(data_dir) if data_dir is not None else PROJECT_ROOT / DATA_DIR
    if not data_path.exists():
        print(f"Error: Directory not found: {data_path}")
        return []

    json_files = sorted(data_path.glob("*.json"))
    if not json_files:
        print(f"No JSON puzzles found in {data_path}")
        return []

    print(f"\nFound {len(json_files)} puzzle(s) to solve")
    print(f"Strategy: {config.describe()}\n")

    results = []
    for i, json_file in enumerate(json_files, 1):
        print(f"\n[{i}/{len(json_files)}] Solving {json_file.name}...")
        target = None if output_dir is None else Path(output_dir) / json_file.stem
        solved, puzzle, solver = solve_puzzle(str(json_file), output_dir=target,
                                              verbose=False, config=config)
        results.append({
            'file': json_file.name,
            'solved': bool(solved),
            'size': puzzle.n if puzzle else None,
            'nodes': solver.nodes_explored if solver else None,
            'seconds': solver.elapsed_seconds if solver else None,
        })
        print(f"  {'✓ SOLVED' if solved else '✗ FAILED'}")

    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    solved_count = sum(1 for r in results if r['solved'])
    rate = solved_count / len(results) * 100
    print(f"Solved: {solved_count}/{len(results)} puzzles ({rate:.1f}%)\n")
    for r in results:
        status = "✓" if r['solved'] else "✗"
        if r['solved']:
            print(f"{status} {r['file']:30s} - {r['size']}x{r['size']}, "
                  f"{r['nodes']} nodes, {r['seconds']:.3f}s")
        else:
            print(f"{status} {r['file']:30s} - Failed")
    return results


def generate_puzzle(n: int, removal_fraction: float = DEFAULT_REMOVAL_FRACTION,
                    seed: Optional[int] = None, output: Optional[str] = None) -> Optional[GridState]:
    generator = PuzzleGenerator(seed=seed, verbose=True)
    try:
        puzzle = generator.generate(n, removal_fraction)
    except ValueError as e:
        print(f"Error: {e}")
        return None

    if puzzle is None:
        print("Generation failed after several attempts. Try again.")
        return None

    if output:
        puzzle.save(output)
        print(f"✓ Puzzle saved to: {output}")
    return puzzle


def play_puzzle(input_path: str) -> bool:
    try:
        puzzle = GridState.load(input_path)
    except (OSError, ValueError) as e:
        print(f"Error while loading {input_path}: {e}")
        return False
    return ManualSession(puzzle).run()


def config_from_args(args) -> SolverConfig:
    return SolverConfig(
        use_mrv=args.mrv,
        use_degree=args.degree,
        use_lcv=args.lcv,
        use_forward_checking=args.fc,
        use_arc_consistency=args.ac3,
        time_limit_ms=args.time_limit,
        use_trail=args.trail,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Binairo (Takuzu) CSP solver")
    sub = parser.add_subparsers(dest="command")

    solve = sub.add_parser("solve", help="Solve a puzzle JSON file")
    solve.add_argument("puzzle")
    solve.add_argument("--mrv", action="store_true", help="Minimum Remaining Values")
    solve.add_argument("--degree", action="store_true", help="Degree heuristic")
    solve.add_argument("--lcv", action="store_true", help="Least Constraining Value")
    solve.add_argument("--fc", action="store_true", help="Forward checking")
    solve.add_argument("--ac3", action="store_true", help="Arc consistency (AC-3)")
    solve.add_argument("--trail", action="store_true", help="Undo trail instead of copying")
    solve.add_argument("--time-limit", type=int, default=TIME_LIMIT_MS, help="Milliseconds")
    solve.add_argument("--defaults", action="store_true",
                       help="Use the configured default strategy")
    solve.add_argument("--output-dir")

    compare = sub.add_parser("compare", help="Compare algorithms on one puzzle")
    compare.add_argument("puzzle")
    compare.add_argument("--time-limit", type=int, default=None, help="Milliseconds per algorithm")

    generate = sub.add_parser("generate", help="Generate a new puzzle")
    generate.add_argument("size", type=int)
    generate.add_argument("--fraction", type=float, default=DEFAULT_REMOVAL_FRACTION)
    generate.add_argument("--seed", type=int, default=None)
    generate.add_argument("--output")

    play = sub.add_parser("play", help="Play a puzzle by hand")
    play.add_argument("puzzle")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    if args.command is None:
        print("No command given - solving all puzzles in data/json/")
        solve_all_puzzles()
        return 0

    if args.command == "generate":
        return 0 if generate_puzzle(args.size, args.fraction, args.seed, args.output) else 1

    input_file = _resolve(args.puzzle)
    if not input_file.exists():
        print(f"Error: File not found: {input_file}")
        return 1

    if args.command == "solve":
        config = DEFAULT_CONFIG if args.defaults else config_from_args(args)
        solved, _, _ = solve_puzzle(str(input_file), output_dir=args.output_dir, config=config)
        return 0 if solved else 1

    if args.command == "compare":
        try:
            puzzle = GridState.load(str(input_file))
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        print(puzzle)
        print_comparison(puzzle, time_limit_ms=args.time_limit)
        return 0

    return 0 if play_puzzle(str(input_file)) else 1


if __name__ == "__main__":
    sys.exit(main())
