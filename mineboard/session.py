"""In-process session controller around a single board."""
import asyncio
import logging
import random
from typing import Callable, Optional

from mineboard.board import Board, Listener, clamp_mines
from mineboard.clock import AsyncioTicker, Ticker
from mineboard.grid import Grid
from mineboard.placement import MineField
from mineboard.types import DEFAULT_COLUMNS, DEFAULT_MINES, DEFAULT_ROWS, BoardSnapshot, GameState

logger = logging.getLogger(__name__)


class FunnyModeDetector:
    """Unlocks funny mode after 10 consecutive 5x4 maps with 5 mines."""

    ROWS = 5
    COLUMNS = 4
    MINES = 5
    THRESHOLD = 10

    def __init__(self):
        self.count = 0

    def observe(self, board: Board) -> bool:
        """Count one generated map; returns True if it had the magic configuration."""
        so_funny = (board.rows, board.columns, board.mines) == (self.ROWS, self.COLUMNS, self.MINES)
        if not so_funny:
            self.count = 0
            return False
        self.count += 1
        if self.count == self.THRESHOLD:
            logger.info("enable funny mode!")
            board.set_funny(True)
        return True


class SessionController:
    """Asynchronous entry point for a presentation layer.

    All mutating calls go through one lock, so a reveal can never interleave
    with a map rebuild.
    """

    def __init__(self, max_rows: int = DEFAULT_ROWS, max_columns: int = DEFAULT_COLUMNS,
                 max_mines: int = DEFAULT_MINES, rng: Optional[random.Random] = None,
                 ticker: Optional[Ticker] = None):
        self.rng = rng or random.Random()
        self.ticker = ticker or AsyncioTicker()
        self.board = Board.create(max_rows, max_columns, max_mines, rng=self.rng, ticker=self.ticker)
        self.funny_detector = FunnyModeDetector()
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self.board.running

    @property
    def game_state(self) -> GameState:
        return self.board.game_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.board.subscribe(listener)

    def snapshot(self) -> BoardSnapshot:
        return self.board.snapshot()

    def get_mine_indicator(self, row: int, column: int) -> Optional[int]:
        return self.board.get_mine_indicator(row, column)

    def to_index(self, row: int, column: int) -> int:
        return self.board.to_index(row, column)

    async def generate_mine_map(self, rows: Optional[int] = None, columns: Optional[int] = None,
                                mines: Optional[int] = None) -> GameState:
        """Build a new map, defaulting to the current dimensions."""
        rows = self.board.rows if rows is None else rows
        columns = self.board.columns if columns is None else columns
        mines = self.board.mines if mines is None else mines
        mines = clamp_mines(rows, columns, mines)

        async with self._lock:
            self.stop_ticking()
            self.board.set_loading(True)
            try:
                mine_field = await asyncio.to_thread(MineField.generate, Grid(rows, columns), mines, self.rng)
                self.board.reset(mine_field)
            finally:
                self.board.set_loading(False)
            logger.info(f"create {rows}x{columns} with {mines} mines")
            self.funny_detector.observe(self.board)
            return self.board.game_state

    async def step_on_block(self, row: int, column: int) -> GameState:
        async with self._lock:
            if not self.running:
                logger.warning(f"current game state: {self.game_state.value}")
                return self.game_state
            return self.board.step_on(row, column)

    async def mark_as_mine_block(self, row: int, column: int) -> GameState:
        async with self._lock:
            if not self.running:
                logger.warning(f"current game state: {self.game_state.value}")
                return self.game_state
            return self.board.mark_as_mine(row, column)

    async def unmark_mine(self, row: int, column: int) -> GameState:
        async with self._lock:
            if not self.running:
                logger.warning("not running")
                return self.game_state
            return self.board.unmark_mine(row, column)

    async def enter_review(self) -> GameState:
        async with self._lock:
            return self.board.enter_review()

    def set_funny(self, funny: bool) -> None:
        self.board.set_funny(funny)

    def start_ticking(self) -> None:
        self.board.start_clock()

    def stop_ticking(self) -> None:
        self.board.stop_clock()

    async def close(self) -> None:
        async with self._lock:
            self.stop_ticking()
            logger.info("session closed")
