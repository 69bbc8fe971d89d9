"""Coordinate and neighbor math for an 8-directional grid."""
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Grid:
    """Row-major index math for a `rows` x `columns` grid.

    The single-direction neighbor functions do not check bounds: calling
    `west` on a first-column index aliases into the previous row. Always gate
    them with the boundary predicates, or use `neighbors`.
    """
    rows: int
    columns: int

    @property
    def size(self) -> int:
        return self.rows * self.columns

    def contains(self, row: int, column: int) -> bool:
        return 0 <= row < self.rows and 0 <= column < self.columns

    def to_index(self, row: int, column: int) -> int:
        return row * self.columns + column

    def to_row(self, index: int) -> int:
        return index // self.columns

    def to_column(self, index: int) -> int:
        return index % self.columns

    def not_first_row(self, index: int) -> bool:
        return self.to_row(index) != 0

    def not_last_row(self, index: int) -> bool:
        return self.to_row(index) != self.rows - 1

    def not_first_column(self, index: int) -> bool:
        return self.to_column(index) != 0

    def not_last_column(self, index: int) -> bool:
        return self.to_column(index) != self.columns - 1

    def north(self, index: int) -> int:
        return index - self.columns

    def south(self, index: int) -> int:
        return index + self.columns

    def west(self, index: int) -> int:
        return index - 1

    def east(self, index: int) -> int:
        return index + 1

    def north_west(self, index: int) -> int:
        return self.west(self.north(index))

    def north_east(self, index: int) -> int:
        return self.east(self.north(index))

    def south_west(self, index: int) -> int:
        return self.west(self.south(index))

    def south_east(self, index: int) -> int:
        return self.east(self.south(index))

    def neighbors(self, index: int) -> Iterator[int]:
        """Yield the up-to-8 in-bounds neighbors of `index`."""
        first_column = not self.not_first_column(index)
        last_column = not self.not_last_column(index)
        if self.not_first_row(index):
            if not first_column:
                yield self.north_west(index)
            yield self.north(index)
            if not last_column:
                yield self.north_east(index)
        if not first_column:
            yield self.west(index)
        if not last_column:
            yield self.east(index)
        if self.not_last_row(index):
            if not first_column:
                yield self.south_west(index)
            yield self.south(index)
            if not last_column:
                yield self.south_east(index)
