"""Temporal worker for Minesweeper sessions."""
import asyncio
import logging

from temporalio.worker import Worker

from mineboard import activities
from mineboard.client_provider import get_task_queue, get_temporal_client
from mineboard.workflows import MineSessionWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_worker(client) -> Worker:
    return Worker(
        client,
        task_queue=get_task_queue(),
        workflows=[MineSessionWorkflow],
        activities=[activities.generate_mine_layout],
    )


async def main():
    """Start the Temporal worker."""
    client = await get_temporal_client()
    worker = create_worker(client)

    logger.info("Worker started, connected to Temporal")
    logger.info(f"Listening on task queue: {get_task_queue()}")

    await worker.run()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
