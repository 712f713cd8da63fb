"""Start an impact report workflow on Temporal.

Reads a JSON request file and starts AssetReportWorkflow or
GroupReportWorkflow, then prints the result.

Request file shapes:
    asset: {"asset": {...}, "basics": {...}, "breakdown": [...], "regenerate": false}
    group: {"group": {...}, "holdings": [...], "regenerate": false}
"""

import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
import logging
import uuid

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from temporal_client import get_temporal_client
from activities.reports import AssetReportInput, GroupReportInput
from workflows.report_workflow import AssetReportWorkflow, GroupReportWorkflow, TASK_QUEUE


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_input(kind: str, request: dict):
    """Workflow input for a parsed request file."""
    if kind == "asset":
        return AssetReportInput(
            asset=request.get("asset") or {},
            basics=request.get("basics") or {},
            breakdown=request.get("breakdown"),
            regenerate=bool(request.get("regenerate", False)),
            suggest_from_reference=bool(request.get("suggest_from_reference", False)),
        )
    return GroupReportInput(
        group=request.get("group") or {},
        holdings=request.get("holdings") or [],
        regenerate=bool(request.get("regenerate", False)),
    )


async def start_report_workflow(kind: str, request_path: str):
    """Start a report workflow and return its result.

    Args:
        kind: asset or group
        request_path: Path to the JSON request file
    """
    path = Path(request_path)
    if not path.exists():
        raise FileNotFoundError(f"Request file not found: {request_path}")

    request = json.loads(path.read_text())
    input_data = build_input(kind, request)
    workflow_id = f"{kind}-report-{uuid.uuid4().hex[:8]}"
    workflow_run = AssetReportWorkflow.run if kind == "asset" else GroupReportWorkflow.run

    client = await get_temporal_client()
    logger.info(f"Connected to Temporal: {client.namespace}")

    logger.info(f"Starting {kind} report workflow on task queue '{TASK_QUEUE}'...")
    handle = await client.start_workflow(
        workflow_run,
        input_data,
        task_queue=TASK_QUEUE,
        id=workflow_id,
    )

    logger.info(f"Workflow started: {handle.id}")
    logger.info("Waiting for result (polling the impact calculation may take minutes)...")
    return await handle.result()


def main():
    """Entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Start an impact report workflow")
    parser.add_argument("kind", choices=["asset", "group"], help="Resource kind")
    parser.add_argument("request", help="Path to the JSON request file")
    args = parser.parse_args()

    try:
        result = asyncio.run(start_report_workflow(args.kind, args.request))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n=== WORKFLOW RESULT ===")
    for key, value in asdict(result).items():
        print(f"  {key}: {value}")
    print("=======================\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
