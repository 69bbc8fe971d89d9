"""Board state and the reveal/mark state machine."""
import logging
import random
from typing import Any, Callable, List, Optional

from mineboard.assets import block_asset, face_asset
from mineboard.clock import Ticker
from mineboard.grid import Grid
from mineboard.placement import MineField
from mineboard.types import (
    DEFAULT_COLUMNS,
    DEFAULT_MINES,
    DEFAULT_ROWS,
    BoardSnapshot,
    CellView,
    Count,
    GameState,
    Mine,
    Visibility,
)

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]


def clamp_mines(rows: int, columns: int, mines: int) -> int:
    """Validate a map configuration and cap the mines at the map size."""
    if rows <= 0 or columns <= 0:
        raise ValueError(f"invalid map size {rows}x{columns}")
    if mines < 0:
        raise ValueError(f"invalid mine count {mines}")
    return min(mines, rows * columns)


class Board:
    """The grid state of one game session.

    Published fields (see `subscribe`): game_state, elapsed_seconds, rows,
    columns, mines, remaining_mines, loading, funny and cell, whose value is an
    `(index, Visibility)` pair.
    """

    def __init__(self, mine_field: MineField, ticker: Optional[Ticker] = None):
        self.ticker = ticker
        self.loading = False
        self.funny = False
        self._listeners: List[Listener] = []
        self.reset(mine_field)

    @classmethod
    def create(cls, rows: int = DEFAULT_ROWS, columns: int = DEFAULT_COLUMNS, mines: int = DEFAULT_MINES,
               rng: Optional[random.Random] = None, ticker: Optional[Ticker] = None) -> "Board":
        mines = clamp_mines(rows, columns, mines)
        return cls(MineField.generate(Grid(rows, columns), mines, rng), ticker=ticker)

    # observation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, name: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(name, value)

    # queries

    @property
    def grid(self) -> Grid:
        return self.field.grid

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def columns(self) -> int:
        return self.grid.columns

    @property
    def remaining_mines(self) -> int:
        return self.mines - self.marked_count

    @property
    def running(self) -> bool:
        return self.game_state.running

    def to_index(self, row: int, column: int) -> int:
        return self.grid.to_index(row, column)

    def _checked_index(self, row: int, column: int) -> int:
        if not self.grid.contains(row, column):
            raise IndexError(f"({row}, {column}) is outside the {self.rows}x{self.columns} map")
        return self.grid.to_index(row, column)

    def get_mine_indicator(self, row: int, column: int) -> Optional[int]:
        """Adjacency count of a cell, or None if the cell is a mine."""
        content = self.field.content(self._checked_index(row, column))
        if isinstance(content, Mine):
            return None
        return content.n

    def visibility_at(self, row: int, column: int) -> Visibility:
        return self.visibility[self._checked_index(row, column)]

    def snapshot(self) -> BoardSnapshot:
        cells = []
        for index, visibility in enumerate(self.visibility):
            content = self.field.content(index)
            indicator = None
            if isinstance(content, Count) and (visibility == Visibility.REVEALED or self.funny):
                indicator = content.n
            cells.append(CellView(visibility=visibility, indicator=indicator, asset=block_asset(visibility)))
        return BoardSnapshot(
            rows=self.rows,
            columns=self.columns,
            mines=self.mines,
            game_state=self.game_state,
            elapsed_seconds=self.elapsed_seconds,
            marked_count=self.marked_count,
            remaining_mines=self.remaining_mines,
            loading=self.loading,
            funny=self.funny,
            face=face_asset(self.game_state),
            cells=cells,
        )

    # mutation

    def reset(self, mine_field: MineField) -> None:
        """Install a freshly generated mine field and start over."""
        self.stop_clock()
        self.field = mine_field
        self.mines = len(mine_field.mines)
        self.visibility = [Visibility.HIDDEN] * mine_field.grid.size
        self.marked_count = 0
        self.elapsed_seconds = 0
        self.first_click_pending = True
        self.game_state = GameState.START
        self._emit('rows', self.rows)
        self._emit('columns', self.columns)
        self._emit('mines', self.mines)
        self._emit('remaining_mines', self.remaining_mines)
        self._emit('elapsed_seconds', 0)
        for index, visibility in enumerate(self.visibility):
            self._emit('cell', (index, visibility))
        self._emit('game_state', self.game_state)

    def set_loading(self, loading: bool) -> None:
        self.loading = loading
        self._emit('loading', loading)

    def set_funny(self, funny: bool) -> None:
        self.funny = funny
        self._emit('funny', funny)

    def _set_state(self, state: GameState) -> None:
        self.game_state = state
        self._emit('game_state', state)

    def _set_visibility(self, index: int, visibility: Visibility) -> None:
        self.visibility[index] = visibility
        self._emit('cell', (index, visibility))

    def start_clock(self) -> None:
        if self.ticker is not None:
            self.ticker.start(self.tick)

    def stop_clock(self) -> None:
        if self.ticker is not None:
            self.ticker.stop()

    def tick(self) -> bool:
        """Advance the play clock one second; False once the game has stopped."""
        if not self.running:
            return False
        self.elapsed_seconds += 1
        self._emit('elapsed_seconds', self.elapsed_seconds)
        return True

    def step_on(self, row: int, column: int) -> GameState:
        """Reveal a cell and return the resulting game state."""
        index = self._checked_index(row, column)
        logger.debug(f"step on ({row}, {column})")
        if not self.running:
            logger.warning(f"current game state: {self.game_state.value}")
            return self.game_state
        if self.visibility[index] != Visibility.HIDDEN:
            logger.debug(f"({row}, {column}) is already {self.visibility[index].value}")
            return self.game_state

        if self.field.is_mine(index) and self.first_click_pending:
            # first click can never be a mine
            logger.info("recalculate mine map")
            self.set_loading(True)
            moved = self.field.relocate_mine(index)
            self.set_loading(False)
            if moved is not None:
                return self.step_on(row, column)
            logger.warning("no free cell to move the mine to")

        if self.field.is_mine(index):
            for mine in sorted(self.field.mines):
                if self.visibility[mine] != Visibility.MARKED:
                    self._set_visibility(mine, Visibility.REVEALED_MINE)
            self._set_visibility(index, Visibility.EXPLODED_MINE)
            state = GameState.EXPLODED
        else:
            self._reveal(index)
            state = GameState.CLEARED if self._verify_mine_clear() else GameState.RUNNING
        self._set_state(state)

        if self.first_click_pending:
            self.first_click_pending = False
            if state == GameState.RUNNING:
                self.start_clock()
        if state == GameState.EXPLODED:
            self.stop_clock()
            logger.info("Game over! you lost!!")
        elif state == GameState.CLEARED:
            self.stop_clock()
            logger.info("You won!")
        return state

    def _reveal(self, index: int) -> None:
        """Reveal `index`, flooding through connected zero-count cells."""
        pending = [index]
        while pending:
            current = pending.pop()
            if self.visibility[current] != Visibility.HIDDEN:
                continue
            self._set_visibility(current, Visibility.REVEALED)
            if self.field.content(current) == Count(0):
                pending.extend(n for n in self.grid.neighbors(current)
                               if self.visibility[n] == Visibility.HIDDEN)

    def _verify_mine_clear(self) -> bool:
        # every cell the player has not opened must be a mine
        return all(self.field.is_mine(index)
                   for index, visibility in enumerate(self.visibility)
                   if visibility in (Visibility.HIDDEN, Visibility.MARKED))

    def mark_as_mine(self, row: int, column: int) -> GameState:
        index = self._checked_index(row, column)
        if not self.running:
            logger.warning(f"current game state: {self.game_state.value}")
            return self.game_state
        if self.marked_count >= self.mines:
            logger.warning("too many mines!!!")
            return self.game_state
        if self.visibility[index] != Visibility.HIDDEN:
            logger.warning(f"cannot mark ({row}, {column}): {self.visibility[index].value}")
            return self.game_state

        self._set_visibility(index, Visibility.MARKED)
        self.marked_count += 1
        self._emit('remaining_mines', self.remaining_mines)
        state = GameState.CLEARED if self._verify_mine_clear() else GameState.RUNNING
        self._set_state(state)
        if state == GameState.CLEARED:
            self.stop_clock()
            logger.info("You won!")
        return state

    def unmark_mine(self, row: int, column: int) -> GameState:
        index = self._checked_index(row, column)
        if not self.running:
            logger.warning("not running")
            return self.game_state
        if self.visibility[index] != Visibility.MARKED:
            logger.warning(f"({row}, {column}) is not marked")
            return self.game_state

        self._set_visibility(index, Visibility.HIDDEN)
        self.marked_count -= 1
        self._emit('remaining_mines', self.remaining_mines)
        return self.game_state

    def enter_review(self) -> GameState:
        """Freeze a finished game for inspection."""
        if not self.game_state.finished:
            logger.warning(f"cannot review while {self.game_state.value}")
            return self.game_state
        self._set_state(GameState.REVIEW)
        return self.game_state
