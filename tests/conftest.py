"""Shared fixtures for the gridpath test suite."""

import pytest
from PySide6.QtCore import QCoreApplication

from gridpath.domain.grid import Grid
from gridpath.utils.config_store import ConfigStore


@pytest.fixture(scope="session")
def qapp():
    """A QCoreApplication for tests that create timers and emit signals."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def store(tmp_path):
    """Layout store backed by a temporary file."""
    return ConfigStore(tmp_path / "layouts.json")


@pytest.fixture
def make_grid():
    """
    Build a grid from rows of text.

    '.' is an empty cell, '#' an obstacle and a digit 2-9 a weighted cell.
    """
    def build(*rows: str) -> Grid:
        grid = Grid(len(rows))
        for row, line in enumerate(rows):
            assert len(line) == len(rows), "grid rows must form a square"
            for col, char in enumerate(line):
                if char == "#":
                    grid.set_obstacle(row, col, True)
                elif char.isdigit():
                    grid.set_weight(row, col, int(char))
        return grid
    return build
