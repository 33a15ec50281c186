from Binairo.diagnostics import (
    classify_outcome,
    compare_algorithms,
    format_comparison_table,
    print_comparison,
)
from CSP.config import COMPARISON_PRESETS, SolverConfig


def test_classify_outcome():
    assert classify_outcome(True, {'timed_out': False}) == "SOLVED"
    assert classify_outcome(False, {'timed_out': True}) == "TIMEOUT"
    assert classify_outcome(False, {'timed_out': False}) == "EXHAUSTED"


def test_compare_algorithms_runs_every_preset(partial8):
    before = partial8.board.copy()
    results = compare_algorithms(partial8)

    assert [r['name'] for r in results] == list(COMPARISON_PRESETS)
    assert all(r['solved'] and r['valid'] for r in results)
    assert all(r['outcome'] == "SOLVED" for r in results)
    assert (partial8.board == before).all()


def test_compare_algorithms_agree_on_unsatisfiable(unsat4):
    results = compare_algorithms(unsat4)
    assert {r['outcome'] for r in results} == {"EXHAUSTED"}
    assert not any(r['valid'] for r in results)


def test_compare_algorithms_with_time_limit(partial8):
    results = compare_algorithms(partial8, time_limit_ms=0)
    assert {r['outcome'] for r in results} == {"TIMEOUT"}
    assert all(r['timed_out'] for r in results)
    assert all(r['config'].time_limit_ms == 0 for r in results)


def test_compare_custom_presets(almost_solved6):
    presets = {"plain": SolverConfig(), "fc": SolverConfig(use_forward_checking=True)}
    results = compare_algorithms(almost_solved6, presets)
    assert [r['name'] for r in results] == ["plain", "fc"]
    assert all(r['nodes'] == 2 for r in results)


def test_comparison_table_layout(almost_solved6):
    results = compare_algorithms(almost_solved6)
    lines = format_comparison_table(results).split("\n")
    assert lines[0] == "Algo                 | Time(s)  | Nodes    | Result"
    assert len(lines) == 2 + len(COMPARISON_PRESETS)
    assert lines[2].startswith("BT Simple            | ")
    assert lines[2].endswith("| SOLVED")


def test_print_comparison(almost_solved6, capsys):
    print_comparison(almost_solved6)
    out = capsys.readouterr().out
    assert "COMPARISON: 6x6, 1 empty cells" in out
    assert "MRV+AC3" in out
    assert "disagree" not in out
