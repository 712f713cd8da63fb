"""Print a summary of the Vested Impact reference data.

Reads countries, currencies and industries concurrently, and optionally the
activities of one industry:

    python scripts/check_reference_data.py --industry Software
"""

import asyncio
import json
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from connectors.vested_impact import VIApiClient, VIApiConfig, VIReferenceAPI
from core.config import load_settings


async def check_reference_data(industry: str = None) -> dict:
    settings = load_settings()
    async with VIApiClient(VIApiConfig.from_settings(settings)) as client:
        reference = VIReferenceAPI(client)
        summary = (await reference.fetch_snapshot()).summary()

        if industry:
            activities = await reference.fetch_activities(industry)
            summary["industry"] = industry
            summary["activities"] = [a.model_dump() for a in activities[:12]]
            summary["activity_count"] = len(activities)

    return summary


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Check Vested Impact reference data")
    parser.add_argument("--industry", default=None, help="Also list activities of this industry")
    args = parser.parse_args()

    try:
        summary = asyncio.run(check_reference_data(args.industry))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
