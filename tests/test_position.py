import json

import numpy as np
import pytest

from Binairo.position import EMPTY, GridState, Move, validate_size

from conftest import SOLVED_6


def test_empty_grid_text_format():
    state = GridState(4)
    expected = (
        "  0 1 2 3 \n"
        "0 . . . . \n"
        "1 . . . . \n"
        "2 . . . . \n"
        "3 . . . . \n"
    )
    assert str(state) == expected


def test_text_format_shows_values():
    state = GridState.from_rows(["01..", "....", "....", "...1"])
    lines = str(state).split("\n")
    assert lines[1] == "0 0 1 . . "
    assert lines[4] == "3 . . . 1 "
    assert lines[-1] == ""


@pytest.mark.parametrize("size", [0, -2, 3, 7])
def test_invalid_sizes_rejected(size):
    with pytest.raises(ValueError):
        GridState(size)


def test_validate_size_rejects_non_integers():
    with pytest.raises(ValueError):
        validate_size(4.0)
    with pytest.raises(ValueError):
        validate_size(True)


def test_from_rows_sets_counters(solved6):
    assert solved6.empty_count() == 0
    assert list(solved6.row_zero_count) == [3] * 6
    assert list(solved6.row_one_count) == [3] * 6
    assert list(solved6.col_zero_count) == [3] * 6
    assert list(solved6.col_one_count) == [3] * 6
    assert solved6.counters_consistent()


def test_from_rows_accepts_lists():
    state = GridState.from_rows([[0, None], [None, 1]])
    assert state.board[0, 0] == 0
    assert state.board[1, 1] == 1
    assert state.is_empty(0, 1)
    assert state.domain_size(0, 0) == 1
    assert state.domain_size(0, 1) == 2


def test_from_rows_rejects_bad_input():
    with pytest.raises(ValueError):
        GridState.from_rows(["01", "0"])
    with pytest.raises(ValueError):
        GridState.from_rows(["0x", ".."])
    with pytest.raises(ValueError):
        GridState.from_rows(["010", "...", "..."])


def test_from_dict_checks_declared_size():
    with pytest.raises(ValueError):
        GridState.from_dict({"size": 6, "grid": ["01", ".."]})
    with pytest.raises(ValueError):
        GridState.from_dict({"size": 2})


def test_save_and_load(tmp_path):
    state = GridState.from_rows(["0...", "..1.", "....", "1..0"])
    path = tmp_path / "puzzle.json"
    state.save(str(path))

    with open(path) as f:
        data = json.load(f)
    assert data == {"size": 4, "grid": ["0...", "..1.", "....", "1..0"]}

    loaded = GridState.load(str(path))
    assert loaded == state
    assert loaded.counters_consistent()


def test_assign_updates_counters_and_domain():
    state = GridState(4)
    state.assign(1, 2, 1)
    assert state.row_one_count[1] == 1
    assert state.col_one_count[2] == 1
    assert state.row_zero_count[1] == 0
    assert state.domain_size(1, 2) == 1
    assert state.domain_allows(1, 2, 1)
    assert not state.domain_allows(1, 2, 0)


def test_assign_rejects_occupied_cell_and_bad_value():
    state = GridState(4)
    state.assign(0, 0, 0)
    with pytest.raises(ValueError):
        state.assign(0, 0, 1)
    with pytest.raises(ValueError):
        state.assign(0, 1, 2)


def test_clear_restores_counters_and_domain():
    state = GridState(4)
    state.assign(3, 3, 0)
    assert state.clear(3, 3) == 0
    assert state.is_empty(3, 3)
    assert state.row_zero_count[3] == 0
    assert state.col_zero_count[3] == 0
    assert state.domain_size(3, 3) == 2
    with pytest.raises(ValueError):
        state.clear(3, 3)


def test_remove_value_shrinks_domain():
    state = GridState(4)
    state.remove_value(0, 0, 0)
    assert state.domain_size(0, 0) == 1
    assert state.domain_allows(0, 0, 1)
    state.remove_value(0, 0, 1)
    assert state.domain_size(0, 0) == 0


def test_copy_is_independent(solved6):
    other = solved6.copy()
    other.clear(0, 0)
    assert solved6.board[0, 0] == 0
    assert solved6.row_zero_count[0] == 3
    assert other != solved6


def test_rollback_undoes_changes():
    state = GridState.from_rows(["0...", "....", "....", "...."])
    board = state.board.copy()
    masks = state.domain_mask.copy()

    mark = state.checkpoint()
    state.assign(1, 1, 1)
    state.remove_value(2, 2, 0)
    state.clear(0, 0)
    state.rollback(mark)

    assert np.array_equal(state.board, board)
    assert np.array_equal(state.domain_mask, masks)
    assert state.counters_consistent()


def test_nested_checkpoints():
    state = GridState(4)
    outer = state.checkpoint()
    state.assign(0, 0, 1)
    inner = state.checkpoint()
    state.assign(0, 1, 0)
    state.rollback(inner)
    assert state.board[0, 0] == 1
    assert state.is_empty(0, 1)
    state.rollback(outer)
    assert state.empty_count() == 16


def test_to_rows_and_equality(solved6):
    assert solved6.to_rows() == SOLVED_6
    assert GridState.from_rows(SOLVED_6) == solved6
    assert hash(GridState.from_rows(SOLVED_6)) == hash(solved6)
    assert solved6.board[0, 0] != EMPTY


def test_move_str():
    move = Move(2, 3, 1)
    assert str(move) == "Move: (2, 3) -> 1"
    assert move.cell == (2, 3)
