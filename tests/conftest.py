from pathlib import Path

import pytest

from Binairo.position import GridState


DATA_DIR = Path(__file__).parent.parent / "data" / "json"

SOLVED_6 = [
    "001011",
    "110100",
    "010011",
    "101100",
    "010101",
    "101010",
]

SOLVED_8 = [
    "00110011",
    "11001100",
    "01010101",
    "10101010",
    "01101001",
    "10010110",
    "01100110",
    "10011001",
]

# Rows 0 and 1 can only become 0011: identical rows, no solution
UNSAT_4 = [
    "00..",
    "00..",
    "....",
    "....",
]


def clear_cells(rows, keep):
    """Copy of rows with every cell where keep(r, c) is False replaced by '.'"""
    return [
        "".join(ch if keep(r, c) else "." for c, ch in enumerate(row))
        for r, row in enumerate(rows)
    ]


@pytest.fixture
def solved6():
    return GridState.from_rows(SOLVED_6)


@pytest.fixture
def almost_solved6():
    """SOLVED_6 with only (0, 0) cleared"""
    return GridState.from_rows(clear_cells(SOLVED_6, lambda r, c: (r, c) != (0, 0)))


@pytest.fixture
def partial8():
    """A third of SOLVED_8 cleared"""
    return GridState.from_rows(clear_cells(SOLVED_8, lambda r, c: (r + 2 * c) % 3 != 0))


@pytest.fixture
def unsat4():
    return GridState.from_rows(UNSAT_4)


@pytest.fixture
def sample6_path():
    return DATA_DIR / "sample_6x6.json"


@pytest.fixture
def sample8_path():
    return DATA_DIR / "sample_8x8.json"
