"""Weight rescaling shared by breakdowns and holdings."""

from typing import Any, Dict, List

from core.errors import ZeroWeightSumError
from core.observability.logging import get_logger

logger = get_logger(__name__)

WEIGHT_TOLERANCE = 1e-4


def rescale_weights(
    items: List[Dict[str, Any]],
    section: str = "weights",
    tolerance: float = WEIGHT_TOLERANCE,
) -> List[Dict[str, Any]]:
    """Make the `weight` values of `items` sum to 1.

    A sum within `tolerance` of 1 leaves the items unchanged. Otherwise each
    weight is divided by the sum. Input items are never mutated.

    Raises:
        ZeroWeightSumError: The weights sum to zero
    """
    if not items:
        return []

    total = sum(item["weight"] for item in items)
    if abs(total - 1.0) <= tolerance:
        return [dict(item) for item in items]

    if total == 0:
        raise ZeroWeightSumError(
            f"{section.capitalize()} weights sum to zero and cannot be normalized",
            {section: ["weight"]},
        )

    logger.warning(f"{section.capitalize()} weights sum to {total}, normalizing...")
    return [{**item, "weight": item["weight"] / total} for item in items]
