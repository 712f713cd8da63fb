"""Worker for the impact report pipeline.

Listens on the `impact-reports` task queue and executes the report workflows
and activities.

Run with --queue <name> to poll a different queue.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from temporalio.worker import Worker

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from temporal_client import get_temporal_client
from workflows.report_workflow import AssetReportWorkflow, GroupReportWorkflow, TASK_QUEUE
from activities.reports import generate_asset_report_activity, generate_group_report_activity
from core.observability.logging import configure_logging


logger = logging.getLogger(__name__)

WORKFLOWS = [AssetReportWorkflow, GroupReportWorkflow]

ACTIVITIES = [
    generate_asset_report_activity,
    generate_group_report_activity,
]


def build_worker(client, task_queue: str = TASK_QUEUE) -> Worker:
    return Worker(
        client,
        task_queue=task_queue,
        workflows=WORKFLOWS,
        activities=ACTIVITIES,
    )


async def run_worker(queue: str = TASK_QUEUE):
    """Start a worker listening on the task queue.

    Raises:
        Exception: If connection to Temporal fails
    """
    client = await get_temporal_client()
    logger.info(f"Connected to Temporal: {client.namespace}")

    worker = build_worker(client, queue)
    logger.info(f"Worker created for queue '{queue}':")
    logger.info(f"  - Workflows: {len(WORKFLOWS)}")
    logger.info(f"  - Activities: {len(ACTIVITIES)}")

    try:
        logger.info("Worker running... (Ctrl+C to stop)")
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")


def main():
    """Entry point for worker with CLI args."""
    parser = argparse.ArgumentParser(description="Impact Report Temporal Worker")
    parser.add_argument(
        "--queue", "-q",
        default=TASK_QUEUE,
        help=f"Task queue to poll (default: {TASK_QUEUE})"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON logs"
    )

    args = parser.parse_args()
    configure_logging(level=logging.INFO, json_format=args.json_logs)
    asyncio.run(run_worker(queue=args.queue))


if __name__ == "__main__":
    main()
