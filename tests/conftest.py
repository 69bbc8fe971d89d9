import random

import pytest

from mineboard.board import Board
from mineboard.clock import Ticker
from mineboard.placement import MineField
from mineboard.types import MineLayout


class FakeTicker(Ticker):
    """Records clock lifecycle calls; ticks are driven by hand."""

    def __init__(self):
        self.tick = None
        self.starts = 0
        self.stops = 0

    @property
    def active(self):
        return self.tick is not None

    def start(self, tick):
        self.starts += 1
        self.tick = tick

    def stop(self):
        self.stops += 1
        self.tick = None


@pytest.fixture
def fake_ticker():
    return FakeTicker()


@pytest.fixture
def make_field():
    def factory(rows, columns, mines, seed=0):
        return MineField.from_layout(MineLayout(rows, columns, list(mines)), random.Random(seed))
    return factory


@pytest.fixture
def make_board(make_field):
    """Board with mines at explicit indices."""
    def factory(rows, columns, mines, ticker=None, seed=0):
        return Board(make_field(rows, columns, mines, seed), ticker=ticker)
    return factory
