"""Flask bridge between a presentation layer and Minesweeper sessions."""
import asyncio
import logging
import os
import uuid
from datetime import datetime

from flask import Flask, jsonify, request
from flask_cors import CORS
from temporalio.client import Client

from mineboard.assets import CONFIG_STRINGS
from mineboard.board import clamp_mines
from mineboard.client_provider import get_task_queue, get_temporal_client
from mineboard.types import DEFAULT_COLUMNS, DEFAULT_MINES, DEFAULT_ROWS, BoardConfig, MoveRequest
from mineboard.workflows import MOVE_ACTIONS, MineSessionWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Global client reference
temporal_client: Client | None = None


def serialize_snapshot(snapshot):
    """Convert a board snapshot to a JSON-serializable dict."""
    if not snapshot:
        return None
    return {
        'rows': snapshot.rows,
        'columns': snapshot.columns,
        'mines': snapshot.mines,
        'gameState': snapshot.game_state.value,
        'running': snapshot.game_state.running,
        'elapsedSeconds': snapshot.elapsed_seconds,
        'markedCount': snapshot.marked_count,
        'remainingMines': snapshot.remaining_mines,
        'loading': snapshot.loading,
        'funny': snapshot.funny,
        'face': snapshot.face,
        'cells': [
            {
                'visibility': cell.visibility.value,
                'indicator': cell.indicator,
                'asset': cell.asset,
            }
            for cell in snapshot.cells
        ],
    }


def parse_config(data) -> BoardConfig:
    """Build a BoardConfig from a request body, raising ValueError when invalid."""
    data = data or {}
    values = {}
    for key, default in (('rows', DEFAULT_ROWS), ('columns', DEFAULT_COLUMNS), ('mines', DEFAULT_MINES)):
        value = data.get(key, default)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"{key} must be an integer")
        values[key] = value
    clamp_mines(values['rows'], values['columns'], values['mines'])
    return BoardConfig(**values)


async def query_with_retry(handle, max_retries=5):
    """Query with retry logic for workflow initialization."""
    for i in range(max_retries):
        try:
            return await handle.query(MineSessionWorkflow.get_snapshot_query)
        except Exception as error:
            if i < max_retries - 1:
                logger.info(f"Query not ready yet, retrying in {(i + 1) * 100}ms...")
                await asyncio.sleep((i + 1) * 0.1)
                continue
            raise error


@app.route('/api/sessions', methods=['POST'])
def create_session():
    """Start a new session."""
    try:
        config = parse_config(request.get_json(silent=True))
    except ValueError as error:
        return jsonify({'error': str(error)}), 400

    session_id = str(uuid.uuid4())

    async def start_workflow():
        await temporal_client.start_workflow(
            MineSessionWorkflow.run,
            args=[session_id, config],
            id=session_id,
            task_queue=get_task_queue(),
        )
        handle = temporal_client.get_workflow_handle(session_id)
        return await query_with_retry(handle)

    try:
        snapshot = asyncio.run(start_workflow())
    except Exception as error:
        logger.error(f"Error creating session: {error}")
        return jsonify({'error': 'Failed to create session'}), 500
    return jsonify({'sessionId': session_id, 'board': serialize_snapshot(snapshot)})


@app.route('/api/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    """Get the current board."""
    try:
        handle = temporal_client.get_workflow_handle(session_id)
        snapshot = asyncio.run(query_with_retry(handle))
    except Exception as error:
        logger.error(f"Error getting session: {error}")
        return jsonify({'error': 'Session not found'}), 404
    return jsonify({'board': serialize_snapshot(snapshot)})


@app.route('/api/sessions/<session_id>/moves', methods=['POST'])
def make_move(session_id):
    """Step on, mark or unmark a cell."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get('row'), int) or \
       not isinstance(data.get('column'), int) or \
       data.get('action') not in MOVE_ACTIONS:
        return jsonify({'error': 'Invalid move request'}), 400

    move_request = MoveRequest(row=data['row'], column=data['column'], action=data['action'])

    try:
        handle = temporal_client.get_workflow_handle(session_id)
        snapshot = asyncio.run(handle.execute_update(MineSessionWorkflow.make_move_update, move_request))
    except Exception as error:
        logger.error(f"Error making move: {error}")
        return jsonify({'error': 'Failed to make move'}), 500
    return jsonify({'board': serialize_snapshot(snapshot)})


@app.route('/api/sessions/<session_id>/map', methods=['POST'])
def generate_map(session_id):
    """Start a new map in an existing session."""
    try:
        config = parse_config(request.get_json(silent=True))
    except ValueError as error:
        return jsonify({'error': str(error)}), 400

    try:
        handle = temporal_client.get_workflow_handle(session_id)
        snapshot = asyncio.run(handle.execute_update(MineSessionWorkflow.generate_mine_map_update, config))
    except Exception as error:
        logger.error(f"Error generating map: {error}")
        return jsonify({'error': 'Failed to generate map'}), 500
    return jsonify({'board': serialize_snapshot(snapshot)})


@app.route('/api/sessions/<session_id>/review', methods=['POST'])
def review(session_id):
    """Freeze a finished game for inspection."""
    try:
        handle = temporal_client.get_workflow_handle(session_id)
        snapshot = asyncio.run(handle.execute_update(MineSessionWorkflow.review_update))
    except Exception as error:
        logger.error(f"Error entering review: {error}")
        return jsonify({'error': 'Failed to enter review'}), 500
    return jsonify({'board': serialize_snapshot(snapshot)})


@app.route('/api/sessions/<session_id>', methods=['DELETE'])
def close_session(session_id):
    """Close a session and stop its clock."""
    try:
        handle = temporal_client.get_workflow_handle(session_id)
        asyncio.run(handle.signal(MineSessionWorkflow.close_session_signal))
    except Exception as error:
        logger.error(f"Error closing session: {error}")
        return jsonify({'error': 'Failed to close session'}), 500
    return jsonify({'sessionId': session_id, 'closed': True})


@app.route('/api/strings', methods=['GET'])
def strings():
    """Settings panel labels keyed by string key."""
    return jsonify(CONFIG_STRINGS)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now().isoformat()
    })


async def initialize_client():
    """Initialize Temporal client."""
    global temporal_client
    temporal_client = await get_temporal_client()
    logger.info("Connected to Temporal server")


def main():
    """Start the Flask server."""
    try:
        asyncio.run(initialize_client())

        port = int(os.getenv("PORT", 3000))
        logger.info(f"Minesweeper bridge running on http://localhost:{port}")
        logger.info("Make sure to start the Temporal worker in another terminal: python -m mineboard.worker")

        app.run(host='127.0.0.1', port=port, debug=False)

    except Exception as error:
        logger.error(f"Failed to start server: {error}")
        exit(1)


if __name__ == "__main__":
    main()
