"""Tests for the asynchronous session controller."""
import asyncio
import random

import pytest

from mineboard.clock import AsyncioTicker
from mineboard.session import FunnyModeDetector, SessionController
from mineboard.types import GameState, Visibility


@pytest.fixture
def session(fake_ticker):
    return SessionController(rng=random.Random(42), ticker=fake_ticker)


def test_defaults(session):
    assert (session.board.rows, session.board.columns, session.board.mines) == (6, 5, 10)
    assert session.running
    assert session.game_state == GameState.START
    assert session.to_index(2, 3) == 13


@pytest.mark.asyncio
async def test_generate_clamps_mines(session):
    state = await session.generate_mine_map(2, 2, 10)
    assert state == GameState.START
    assert session.board.mines == 4
    assert len(session.board.field.mines) == 4
    assert not session.board.loading


@pytest.mark.asyncio
async def test_generate_keeps_current_dimensions_by_default(session):
    await session.generate_mine_map(3, 4, 2)
    await session.generate_mine_map()
    assert (session.board.rows, session.board.columns, session.board.mines) == (3, 4, 2)


@pytest.mark.asyncio
async def test_generate_rejects_bad_config(session):
    with pytest.raises(ValueError):
        await session.generate_mine_map(0, 4, 2)
    with pytest.raises(ValueError):
        await session.generate_mine_map(3, 4, -2)


@pytest.mark.asyncio
async def test_generate_publishes_loading(session):
    events = []
    session.subscribe(lambda name, value: events.append((name, value)))
    await session.generate_mine_map(4, 4, 3)
    loading = [value for name, value in events if name == 'loading']
    assert loading == [True, False]


@pytest.mark.asyncio
async def test_generate_resets_a_running_game(session, fake_ticker):
    await session.generate_mine_map(8, 8, 1)
    await session.step_on_block(0, 0)
    await session.generate_mine_map(8, 8, 1)
    assert session.game_state == GameState.START
    assert session.board.first_click_pending
    assert session.board.visibility.count(Visibility.HIDDEN) == 64
    assert not fake_ticker.active


@pytest.mark.asyncio
async def test_first_step_is_safe(session):
    for _ in range(20):
        await session.generate_mine_map(3, 3, 8)
        assert await session.step_on_block(1, 1) != GameState.EXPLODED


@pytest.mark.asyncio
async def test_actions_rejected_after_explosion(session, make_field):
    session.board.reset(make_field(1, 3, [1]))
    await session.step_on_block(0, 0)
    assert await session.step_on_block(0, 1) == GameState.EXPLODED
    assert await session.step_on_block(0, 2) == GameState.EXPLODED
    assert await session.mark_as_mine_block(0, 2) == GameState.EXPLODED
    assert await session.unmark_mine(0, 2) == GameState.EXPLODED
    assert session.board.visibility[2] == Visibility.HIDDEN


@pytest.mark.asyncio
async def test_mark_and_unmark(session, make_field):
    session.board.reset(make_field(1, 3, [2]))
    assert await session.mark_as_mine_block(0, 2) == GameState.RUNNING
    assert session.board.remaining_mines == 0
    assert await session.unmark_mine(0, 2) == GameState.RUNNING
    assert session.board.remaining_mines == 1


@pytest.mark.asyncio
async def test_review_after_clear(session, make_field):
    session.board.reset(make_field(1, 3, [2]))
    assert await session.step_on_block(0, 0) == GameState.CLEARED
    assert await session.enter_review() == GameState.REVIEW
    assert await session.step_on_block(0, 2) == GameState.REVIEW
    assert session.snapshot().face == 'sad'


@pytest.mark.asyncio
async def test_out_of_range_step_raises(session):
    with pytest.raises(IndexError):
        await session.step_on_block(6, 0)


@pytest.mark.asyncio
async def test_funny_mode_after_ten_magic_maps(session):
    for _ in range(9):
        await session.generate_mine_map(5, 4, 5)
    assert not session.board.funny
    await session.generate_mine_map(5, 4, 5)
    assert session.board.funny
    assert session.snapshot().funny


@pytest.mark.asyncio
async def test_funny_mode_needs_consecutive_maps(session):
    for _ in range(5):
        await session.generate_mine_map(5, 4, 5)
    await session.generate_mine_map(5, 4, 6)
    for _ in range(9):
        await session.generate_mine_map(5, 4, 5)
    assert not session.board.funny
    assert session.funny_detector.count == 9


def test_funny_detector_threshold(make_board):
    detector = FunnyModeDetector()
    board = make_board(5, 4, [0, 1, 2, 3, 4])
    results = [detector.observe(board) for _ in range(10)]
    assert all(results)
    assert board.funny
    assert not detector.observe(make_board(5, 4, [0]))


def test_set_funny_toggles(session):
    session.set_funny(True)
    assert session.board.funny
    session.set_funny(False)
    assert not session.board.funny


@pytest.mark.asyncio
async def test_indicator_passthrough(session, make_field):
    session.board.reset(make_field(3, 3, [4]))
    assert session.get_mine_indicator(0, 0) == 1
    assert session.get_mine_indicator(1, 1) is None


@pytest.mark.asyncio
async def test_clock_ticks_while_running_and_stops_on_explosion(make_field):
    session = SessionController(rng=random.Random(1), ticker=AsyncioTicker(interval=0.02))
    session.board.reset(make_field(1, 4, [2]))
    assert await session.step_on_block(0, 0) == GameState.RUNNING
    await asyncio.sleep(0.15)
    assert session.board.elapsed_seconds >= 3

    assert await session.step_on_block(0, 2) == GameState.EXPLODED
    elapsed = session.board.elapsed_seconds
    await asyncio.sleep(0.1)
    assert session.board.elapsed_seconds == elapsed
    assert not session.ticker.active


@pytest.mark.asyncio
async def test_close_cancels_clock(make_field):
    session = SessionController(rng=random.Random(1), ticker=AsyncioTicker(interval=0.02))
    session.board.reset(make_field(1, 4, [2]))
    await session.step_on_block(0, 0)
    assert session.ticker.active
    await session.close()
    assert not session.ticker.active


@pytest.mark.asyncio
async def test_manual_ticking(session, fake_ticker, make_field):
    session.board.reset(make_field(1, 4, [2]))
    session.start_ticking()
    assert fake_ticker.starts == 1
    session.stop_ticking()
    assert not fake_ticker.active


@pytest.mark.asyncio
async def test_concurrent_calls_are_serialized(session):
    results = await asyncio.gather(
        session.generate_mine_map(10, 10, 10),
        session.step_on_block(0, 0),
        session.mark_as_mine_block(5, 5),
    )
    assert results[0] == GameState.START
    board = session.board
    assert board.marked_count == board.visibility.count(Visibility.MARKED)
    assert len(board.field.mines) == 10
