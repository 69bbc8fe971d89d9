"""Tests for the board generation activity."""
import pytest
from temporalio.testing import ActivityEnvironment

from mineboard.activities import generate_mine_layout
from mineboard.types import BoardConfig


@pytest.mark.asyncio
async def test_generate_mine_layout():
    layout = await ActivityEnvironment().run(generate_mine_layout, BoardConfig(rows=6, columns=5, mines=10))
    assert (layout.rows, layout.columns) == (6, 5)
    assert len(layout.mine_indices) == 10
    assert len(set(layout.mine_indices)) == 10
    assert layout.mine_indices == sorted(layout.mine_indices)
    assert all(0 <= index < 30 for index in layout.mine_indices)


@pytest.mark.asyncio
async def test_generate_mine_layout_clamps():
    layout = await ActivityEnvironment().run(generate_mine_layout, BoardConfig(rows=2, columns=2, mines=9))
    assert layout.mine_indices == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_generate_mine_layout_rejects_bad_size():
    with pytest.raises(ValueError):
        await ActivityEnvironment().run(generate_mine_layout, BoardConfig(rows=0, columns=2, mines=1))
