import pytest

from Binairo.constraints import BinairoRules
from Binairo.generator import PuzzleGenerator
from CSP.config import SolverConfig
from CSP.solver import CSPSolver


rules = BinairoRules()


def test_full_board_is_valid():
    generator = PuzzleGenerator(seed=1)
    board = generator.generate_full_board(6)
    assert board is not None
    assert rules.is_valid_solution(board)
    assert generator.stats['attempts'] == 1
    assert generator.stats['nodes_explored'] > 0


def test_removal_count():
    assert PuzzleGenerator.removal_count(8, 0.6) == 38
    assert PuzzleGenerator.removal_count(6, 0.6) == 21
    assert PuzzleGenerator.removal_count(4, 0.0) == 0
    assert PuzzleGenerator.removal_count(4, 1.0) == 16


def test_generate_leaves_expected_holes():
    generator = PuzzleGenerator(seed=3)
    puzzle = generator.generate(6, 0.6)
    assert puzzle.empty_count() == 21
    assert puzzle.filled_count() == 36 - 21
    assert puzzle.counters_consistent()
    assert generator.stats['cells_removed'] == 21
    assert rules.violations(puzzle) == []


def test_generated_puzzle_is_solvable():
    puzzle = PuzzleGenerator(seed=5).generate(8)
    solution = CSPSolver(rules).solve(puzzle, SolverConfig(use_mrv=True, use_forward_checking=True))
    assert solution is not None
    assert rules.is_valid_solution(solution)


def test_same_seed_same_puzzle():
    first = PuzzleGenerator(seed=9).generate(6)
    second = PuzzleGenerator(seed=9).generate(6)
    assert first == second


def test_zero_fraction_returns_full_board():
    puzzle = PuzzleGenerator(seed=2).generate(4, 0.0)
    assert puzzle.empty_count() == 0
    assert rules.is_valid_solution(puzzle)


def test_punch_holes_keeps_source_board():
    generator = PuzzleGenerator(seed=4)
    full = generator.generate_full_board(6)
    puzzle = generator.punch_holes(full, 10)
    assert full.empty_count() == 0
    assert puzzle.empty_count() == 10
    for r, c in rules.unassigned_variables(puzzle):
        assert puzzle.domain_size(r, c) == 2


def test_punch_holes_rejects_bad_counts(solved6):
    generator = PuzzleGenerator(seed=0)
    with pytest.raises(ValueError):
        generator.punch_holes(solved6, -1)
    with pytest.raises(ValueError):
        generator.punch_holes(solved6, 37)


@pytest.mark.parametrize("size", [0, -4, 5])
def test_generate_rejects_bad_sizes(size):
    with pytest.raises(ValueError):
        PuzzleGenerator(seed=0).generate(size)


def test_generate_rejects_bad_fraction():
    with pytest.raises(ValueError):
        PuzzleGenerator(seed=0).generate(6, 1.5)


def test_exhausted_attempts_return_none():
    generator = PuzzleGenerator(seed=0, max_attempts=2, attempt_time_limit_ms=0)
    assert generator.generate(16) is None
    assert generator.stats['attempts'] == 2


def test_verbose_generation_prints_board(capsys):
    PuzzleGenerator(seed=6, verbose=True).generate(4)
    out = capsys.readouterr().out
    assert "Generating 4x4 puzzle" in out
    assert "✓ Puzzle generated: 9 empty cells" in out
    assert "  0 1 2 3 " in out
