"""Mine placement and adjacency counts."""
import logging
import random
from typing import List, Optional, Set

from mineboard.grid import Grid
from mineboard.types import MINE, CellContent, Count, MineLayout

logger = logging.getLogger(__name__)


class MineField:
    """Which cells of a grid are mines, and how many mines each other cell touches."""

    def __init__(self, grid: Grid, rng: Optional[random.Random] = None):
        self.grid = grid
        self.rng = rng or random.Random()
        self.mines: Set[int] = set()
        self.contents: List[CellContent] = [Count(0)] * grid.size

    @classmethod
    def generate(cls, grid: Grid, count: int, rng: Optional[random.Random] = None) -> "MineField":
        mine_field = cls(grid, rng)
        mine_field.place_mines(count)
        mine_field.recompute_adjacency()
        return mine_field

    @classmethod
    def from_layout(cls, layout: MineLayout, rng: Optional[random.Random] = None) -> "MineField":
        grid = Grid(layout.rows, layout.columns)
        mine_field = cls(grid, rng)
        for index in layout.mine_indices:
            if not 0 <= index < grid.size:
                raise IndexError(f"mine index {index} outside {grid.rows}x{grid.columns} grid")
            mine_field.mines.add(index)
        mine_field.recompute_adjacency()
        return mine_field

    def to_layout(self) -> MineLayout:
        return MineLayout(rows=self.grid.rows, columns=self.grid.columns,
                          mine_indices=sorted(self.mines))

    def is_mine(self, index: int) -> bool:
        return index in self.mines

    def content(self, index: int) -> CellContent:
        return self.contents[index]

    def _random_free_index(self) -> int:
        index = self.rng.randrange(self.grid.size)
        while index in self.mines:
            index = self.rng.randrange(self.grid.size)
        return index

    def place_mines(self, count: int) -> None:
        """Scatter `count` distinct mines uniformly over the grid."""
        if count < 0 or count > self.grid.size:
            raise ValueError(f"cannot place {count} mines on {self.grid.size} cells")
        for _ in range(count):
            self.mines.add(self._random_free_index())

    def recompute_adjacency(self) -> None:
        contents: List[CellContent] = []
        for index in range(self.grid.size):
            if index in self.mines:
                contents.append(MINE)
            else:
                contents.append(Count(sum(1 for n in self.grid.neighbors(index) if n in self.mines)))
        self.contents = contents

    def relocate_mine(self, index: int) -> Optional[int]:
        """Move the mine at `index` to a random free cell.

        Returns the new index, or None if every other cell is already mined.
        """
        if index not in self.mines:
            raise ValueError(f"no mine at index {index}")
        if len(self.mines) >= self.grid.size:
            return None
        # draw while the old spot is still mined so it cannot be picked again
        new_index = self._random_free_index()
        self.mines.discard(index)
        self.mines.add(new_index)
        logger.info(f"move {index} to {new_index}")
        self.recompute_adjacency()
        return new_index
