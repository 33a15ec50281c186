import json

import cv2
import numpy as np

from Binairo.output import SolutionFormatter, render_board_image, save_board_image
from Binairo.position import GridState
from CSP.config import SolverConfig


STATS = {
    'nodes_explored': 12,
    'elapsed_seconds': 0.25,
    'backtracks': 3,
    'timed_out': False,
}


def test_format_grid_matches_text_layout(almost_solved6):
    text = SolutionFormatter.format_grid(almost_solved6)
    assert text.startswith("  0 1 2 3 4 5 \n0 . 0 1 0 1 1 \n")
    assert text == str(almost_solved6)


def test_format_solution_json(almost_solved6, solved6):
    config = SolverConfig(use_mrv=True, use_forward_checking=True)
    report = SolutionFormatter.format_solution_json(almost_solved6, solved6, STATS, config)

    assert report['puzzle_info']['size'] == 6
    assert report['puzzle_info']['empty_cells'] == 1
    assert report['puzzle_info']['solved'] is True
    assert report['solving_stats']['nodes_explored'] == 12
    assert report['config']['use_mrv'] is True
    assert report['puzzle'][0] == ".01011"
    assert report['solution'][0] == "001011"
    assert report['validation'] == {'valid': True, 'violations': [], 'givens_kept': True}
    json.dumps(report)


def test_format_solution_json_detects_changed_givens(almost_solved6):
    other = GridState.from_rows([
        "010110",
        "101001",
        "100110",
        "011001",
        "101010",
        "010101",
    ])
    report = SolutionFormatter.format_solution_json(almost_solved6, other, STATS)
    assert report['validation']['givens_kept'] is False
    assert report['config'] is None


def test_format_solution_json_without_solution(unsat4):
    report = SolutionFormatter.format_solution_json(unsat4, None, STATS)
    assert report['puzzle_info']['solved'] is False
    assert report['solution'] is None
    assert report['validation'] == {}


def test_human_readable(almost_solved6, solved6):
    text = SolutionFormatter.format_solution_human_readable(almost_solved6, solved6, STATS)
    assert "BINAIRO SOLUTION" in text
    assert "Puzzle is 6x6 with 1 empty cells" in text
    assert "Rules check: ✓" in text
    assert "Nodes explored: 12" in text
    assert "Elapsed: 0.2500s" in text
    assert "Stopped by time limit" not in text


def test_human_readable_without_solution(unsat4):
    stats = dict(STATS, timed_out=True)
    text = SolutionFormatter.format_solution_human_readable(unsat4, None, stats)
    assert "No solution found." in text
    assert "Stopped by time limit" in text


def test_save_solution_files(tmp_path, almost_solved6, solved6, capsys):
    json_path = tmp_path / "solution.json"
    text_path = tmp_path / "solution.txt"
    SolutionFormatter.save_solution(almost_solved6, solved6, STATS, str(json_path))
    SolutionFormatter.save_human_readable(almost_solved6, solved6, STATS, str(text_path))

    with open(json_path) as f:
        data = json.load(f)
    assert data['solution'] == solved6.to_rows()
    assert "SOLUTION:" in text_path.read_text()
    assert "Solution saved to" in capsys.readouterr().out


def test_render_board_image_shape():
    img = render_board_image(GridState(4), cell_size=20)
    assert img.shape == (100, 100, 3)
    assert img.dtype == np.uint8

    img = render_board_image(GridState(6))
    assert img.shape == (6 * 48 + 48, 6 * 48 + 48, 3)


def test_render_marks_solved_cells(almost_solved6, solved6):
    plain = render_board_image(solved6)
    marked = render_board_image(solved6, givens=almost_solved6)
    assert not np.array_equal(plain, marked)


def test_save_board_image(tmp_path, solved6):
    path = tmp_path / "board.png"
    save_board_image(solved6, str(path), cell_size=30)
    img = cv2.imread(str(path))
    assert img is not None
    assert img.shape == (6 * 30 + 30, 6 * 30 + 30, 3)
