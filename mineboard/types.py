"""Type definitions for the Minesweeper board engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


DEFAULT_ROWS = 6
DEFAULT_COLUMNS = 5
DEFAULT_MINES = 10


class GameState(str, Enum):
    """Possible game states."""
    START = 'START'
    RUNNING = 'RUNNING'
    EXPLODED = 'EXPLODED'
    CLEARED = 'CLEARED'
    REVIEW = 'REVIEW'

    @property
    def running(self) -> bool:
        return self in (GameState.START, GameState.RUNNING)

    @property
    def finished(self) -> bool:
        return self in (GameState.EXPLODED, GameState.CLEARED)


class Visibility(str, Enum):
    """What the player can see of a single cell."""
    HIDDEN = 'HIDDEN'
    REVEALED = 'REVEALED'
    MARKED = 'MARKED'
    EXPLODED_MINE = 'EXPLODED_MINE'
    REVEALED_MINE = 'REVEALED_MINE'


@dataclass(frozen=True)
class Mine:
    """Cell content: a mine."""


@dataclass(frozen=True)
class Count:
    """Cell content: no mine, `n` mined neighbors."""
    n: int

    def __post_init__(self):
        if not 0 <= self.n <= 8:
            raise ValueError(f"adjacency count out of range: {self.n}")


CellContent = Union[Mine, Count]

MINE = Mine()


@dataclass
class BoardConfig:
    """Configuration for generating a mine map."""
    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS
    mines: int = DEFAULT_MINES


@dataclass
class MineLayout:
    """Where the mines of one map are."""
    rows: int
    columns: int
    mine_indices: List[int] = field(default_factory=list)


@dataclass
class MoveRequest:
    """Request to act on a cell."""
    row: int
    column: int
    action: str  # 'step', 'mark', 'unmark'


@dataclass
class CellView:
    """Serializable view of one cell."""
    visibility: Visibility
    indicator: Optional[int] = None
    asset: Optional[str] = None


@dataclass
class BoardSnapshot:
    """Serializable view of the whole board."""
    rows: int
    columns: int
    mines: int
    game_state: GameState
    elapsed_seconds: int = 0
    marked_count: int = 0
    remaining_mines: int = 0
    loading: bool = False
    funny: bool = False
    face: str = 'happy'
    cells: List[CellView] = field(default_factory=list)
