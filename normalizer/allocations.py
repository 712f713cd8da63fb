"""Breakdown and holdings normalization."""

from typing import Any, Dict, List, Optional, Sequence

from connectors.impact_base import SuggestedActivity
from core.errors import ValidationError
from core.observability.logging import get_logger
from normalizer.policies import DEFAULT_ACTIVITY_POLICY, ActivityIdPolicy
from normalizer.required import is_country_code, is_number
from normalizer.weights import rescale_weights

logger = get_logger(__name__)

MAX_SYNTHESIZED_ITEMS = 3


def _breakdown_item_errors(index: int, item: Any) -> List[str]:
    if not isinstance(item, dict):
        return [f"[{index}]"]
    errors = []
    activity_id = item.get("activityId")
    if not isinstance(activity_id, int) or isinstance(activity_id, bool):
        errors.append(f"[{index}].activityId")
    country = item.get("countryCode")
    if not is_country_code(country):
        errors.append(f"[{index}].countryCode")
    weight = item.get("weight")
    if not is_number(weight) or weight < 0:
        errors.append(f"[{index}].weight")
    return errors


def _check_breakdown_items(items: Sequence[Any]) -> None:
    errors = [error for index, item in enumerate(items) for error in _breakdown_item_errors(index, item)]
    if errors:
        raise ValidationError(
            f"Breakdown items missing required attributes (activityId, countryCode, weight): "
            f"{', '.join(errors)}",
            {"breakdown": errors},
        )


def _holding_item_errors(index: int, item: Any) -> List[str]:
    if not isinstance(item, dict):
        return [f"[{index}]"]
    errors = []
    holding_id = item.get("id")
    if not isinstance(holding_id, str) or not holding_id:
        errors.append(f"[{index}].id")
    weight = item.get("weight")
    if not is_number(weight) or weight < 0:
        errors.append(f"[{index}].weight")
    return errors


def normalize_breakdown(
    items: Optional[Sequence[Dict[str, Any]]],
    suggestions: Optional[Sequence[SuggestedActivity]],
    home_country: str,
    policy: Optional[ActivityIdPolicy] = None,
) -> List[Dict[str, Any]]:
    """Produce the breakdown to push for an asset.

    - Empty input with suggestions: up to three suggested activities at
      equal weight, located in `home_country`
    - Input with suggestions: unknown activity ids go through `policy`
    - Input without suggestions: kept as given
    - Empty input without suggestions: empty result

    Weights of a non-empty result are rescaled to sum to 1.

    Raises:
        ValidationError: An item is malformed, or the policy rejects it
        ZeroWeightSumError: The weights sum to zero
    """
    policy = policy or DEFAULT_ACTIVITY_POLICY
    items = list(items or [])
    suggestions = list(suggestions or [])

    _check_breakdown_items(items)

    if not items and suggestions:
        chosen = suggestions[:MAX_SYNTHESIZED_ITEMS]
        items = [
            {"activityId": activity.id, "countryCode": home_country, "weight": 1.0 / len(chosen)}
            for activity in chosen
        ]
        _check_breakdown_items(items)
        logger.info(f"No breakdown provided; distributed evenly over {len(chosen)} suggested activities")
    elif items and suggestions:
        items = policy.apply(items, suggestions)
    elif items:
        logger.warning(
            "No suggested activities available to validate activityIds; using provided breakdown."
        )
    else:
        logger.warning("No breakdown items provided or generated.")
        return []

    return rescale_weights(items, section="breakdown")


def normalize_holdings(holdings: Any) -> List[Dict[str, Any]]:
    """Validate group holdings and rescale their weights.

    Accepts a list of {id, weight} items or the wrapped {"holdings": [...]} form.

    Raises:
        ValidationError: Missing/empty list or malformed items
        ZeroWeightSumError: The weights sum to zero
    """
    if isinstance(holdings, dict) and "holdings" in holdings:
        holdings = holdings["holdings"]
    if not isinstance(holdings, list):
        raise ValidationError(
            "Holdings must be provided in the correct structure: { holdings: [...] }",
            {"holdings": ["<list>"]},
        )
    if not holdings:
        raise ValidationError("Holdings array must be non-empty.", {"holdings": ["<non-empty>"]})

    errors = [error for index, item in enumerate(holdings) for error in _holding_item_errors(index, item)]
    if errors:
        raise ValidationError(
            f"Invalid holdings: Each holding must have an id and a numeric weight: {', '.join(errors)}",
            {"holdings": errors},
        )

    items = [{"id": item["id"], "weight": item["weight"]} for item in holdings]
    return rescale_weights(items, section="holdings")
