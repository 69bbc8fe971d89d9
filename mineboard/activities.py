"""Temporal activities for board generation."""
from temporalio import activity

from mineboard.board import clamp_mines
from mineboard.grid import Grid
from mineboard.placement import MineField
from mineboard.types import BoardConfig, MineLayout


@activity.defn
async def generate_mine_layout(config: BoardConfig) -> MineLayout:
    """Scatter mines for a new map.

    Random placement is not deterministic, so it runs here rather than in the
    workflow.
    """
    mines = clamp_mines(config.rows, config.columns, config.mines)
    mine_field = MineField.generate(Grid(config.rows, config.columns), mines)
    activity.logger.info(f"create {config.rows}x{config.columns} with {mines} mines")
    return mine_field.to_layout()
