"""Temporal workflow hosting one Minesweeper session."""
import asyncio
import dataclasses
from datetime import timedelta
from typing import Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ApplicationError

with workflow.unsafe.imports_passed_through():
    from mineboard.activities import generate_mine_layout
    from mineboard.board import Board, clamp_mines
    from mineboard.clock import ElapsedTicker
    from mineboard.placement import MineField
    from mineboard.session import FunnyModeDetector
    from mineboard.types import BoardConfig, BoardSnapshot, GameState, MoveRequest


MOVE_ACTIONS = ('step', 'mark', 'unmark')


@workflow.defn
class MineSessionWorkflow:
    """Workflow that owns a single board for the life of a session."""

    def __init__(self):
        self.session_id: str = ""
        self.board: Optional[Board] = None
        self.last_activity_time: float = 0
        self.should_close: bool = False
        self.funny_detector = FunnyModeDetector()
        self.clock = ElapsedTicker(workflow.time)
        # updates awaiting a map rebuild must not run against the old board
        self.lock = asyncio.Lock()

    @workflow.run
    async def run(self, session_id: str, initial_config: BoardConfig) -> None:
        """Main workflow entry point."""
        self.session_id = session_id
        self.last_activity_time = workflow.time()

        try:
            clamp_mines(initial_config.rows, initial_config.columns, initial_config.mines)
        except ValueError as err:
            raise ApplicationError(str(err), non_retryable=True) from err

        async with self.lock:
            await self._generate(initial_config)

        # Auto-close workflow after 24 hours of inactivity
        inactivity_timeout = timedelta(hours=24)
        check_interval = timedelta(minutes=1)

        while not self.should_close:
            try:
                await workflow.wait_condition(
                    lambda: self.should_close or
                           (workflow.time() - self.last_activity_time) >= inactivity_timeout.total_seconds(),
                    timeout=check_interval,
                )
            except asyncio.TimeoutError:
                continue

            if self.should_close:
                break

            workflow.logger.info(f"Session {session_id} auto-closing due to 24 hours of inactivity")
            break

        if self.board:
            self.board.stop_clock()
        workflow.logger.info(f"Minesweeper session {session_id} completed")

    async def _generate(self, config: BoardConfig) -> None:
        mines = clamp_mines(config.rows, config.columns, config.mines)
        if self.board:
            self.board.stop_clock()
            self.board.set_loading(True)

        try:
            layout = await workflow.execute_activity(
                generate_mine_layout,
                BoardConfig(rows=config.rows, columns=config.columns, mines=mines),
                start_to_close_timeout=timedelta(seconds=60),
                retry_policy=RetryPolicy(non_retryable_error_types=["ValueError"]),
            )
        finally:
            if self.board:
                self.board.set_loading(False)
        mine_field = MineField.from_layout(layout, workflow.random())

        if self.board is None:
            self.board = Board(mine_field, ticker=self.clock)
        else:
            self.board.reset(mine_field)
        workflow.logger.info(f"create {config.rows}x{config.columns} with {mines} mines")
        self.funny_detector.observe(self.board)

    @workflow.update
    async def generate_mine_map_update(self, config: BoardConfig) -> BoardSnapshot:
        """Update to start a new map and return the fresh board."""
        self.last_activity_time = workflow.time()
        async with self.lock:
            await self._generate(config)
            return self.board.snapshot()

    @generate_mine_map_update.validator
    def validate_config(self, config: BoardConfig) -> None:
        clamp_mines(config.rows, config.columns, config.mines)

    @workflow.update
    async def make_move_update(self, move_request: MoveRequest) -> BoardSnapshot:
        """Update to act on a cell and return the updated board."""
        self.last_activity_time = workflow.time()
        async with self.lock:
            return self._apply_move(move_request)

    def _apply_move(self, move_request: MoveRequest) -> BoardSnapshot:
        board = self.board
        row, column, action = move_request.row, move_request.column, move_request.action
        # the map may have been rebuilt since the validator ran
        if not board.grid.contains(row, column):
            raise ApplicationError(
                f"({row}, {column}) is outside the {board.rows}x{board.columns} map",
                type="IndexError",
                non_retryable=True,
            )

        self.clock.catch_up()
        if not board.running:
            workflow.logger.warning(f"current game state: {board.game_state.value}")
            return board.snapshot()

        if action == 'step':
            board.step_on(row, column)
        elif action == 'mark':
            board.mark_as_mine(row, column)
        elif action == 'unmark':
            board.unmark_mine(row, column)
        return board.snapshot()

    @make_move_update.validator
    def validate_move(self, move_request: MoveRequest) -> None:
        if not self.board:
            raise ValueError("Board not initialized")
        if move_request.action not in MOVE_ACTIONS:
            raise ValueError(f"Unknown action: {move_request.action}")
        if not self.board.grid.contains(move_request.row, move_request.column):
            raise ValueError(f"({move_request.row}, {move_request.column}) is outside the map")

    @workflow.update
    async def review_update(self) -> BoardSnapshot:
        """Update to freeze a finished game for inspection."""
        self.last_activity_time = workflow.time()
        async with self.lock:
            self.board.enter_review()
            return self.board.snapshot()

    @review_update.validator
    def validate_review(self) -> None:
        if not self.board:
            raise ValueError("Board not initialized")

    @workflow.signal
    def set_funny_signal(self, funny: bool) -> None:
        """Signal to toggle funny mode from the settings panel."""
        if self.board:
            self.board.set_funny(funny)

    @workflow.signal
    def close_session_signal(self) -> None:
        """Signal to close the session."""
        self.should_close = True

    @workflow.query
    def get_snapshot_query(self) -> BoardSnapshot:
        """Query to get the current board."""
        if not self.board:
            # Return a minimal valid board while the first map is generated
            return BoardSnapshot(rows=0, columns=0, mines=0, game_state=GameState.START, loading=True)
        snapshot = self.board.snapshot()
        # queries must not mutate state, so undelivered seconds are only added to the view
        pending = self.clock.pending()
        if pending:
            snapshot = dataclasses.replace(snapshot, elapsed_seconds=snapshot.elapsed_seconds + pending)
        return snapshot
