"""Strategies for breakdown activity ids missing from the suggested set."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from connectors.impact_base import SuggestedActivity
from core.errors import ValidationError
from core.observability.logging import get_logger

logger = get_logger(__name__)


class ActivityIdPolicy(ABC):
    """Decides what happens to breakdown items with an unsuggested activity id."""

    @abstractmethod
    def apply(
        self,
        items: List[Dict[str, Any]],
        suggestions: List[SuggestedActivity],
    ) -> List[Dict[str, Any]]:
        """Return the items to use; `suggestions` is never empty here."""
        pass


class SubstituteFirstSuggested(ActivityIdPolicy):
    """Rewrite unknown activity ids to the first suggested id, with a warning."""

    def apply(self, items, suggestions):
        valid_ids = {s.id for s in suggestions}
        fallback = suggestions[0].id
        result = []
        for item in items:
            if item["activityId"] not in valid_ids:
                logger.warning(
                    f"Invalid activityId {item['activityId']}; using first suggested ID: {fallback}"
                )
                item = {**item, "activityId": fallback}
            result.append(item)
        return result


class RejectUnknownActivity(ActivityIdPolicy):
    """Fail validation when any activity id is not among the suggestions."""

    def apply(self, items, suggestions):
        valid_ids = {s.id for s in suggestions}
        unknown = [
            f"[{index}].activityId={item['activityId']}"
            for index, item in enumerate(items)
            if item["activityId"] not in valid_ids
        ]
        if unknown:
            raise ValidationError(
                f"Breakdown uses activity ids outside the suggested set "
                f"{sorted(valid_ids)}: {', '.join(unknown)}",
                {"breakdown": unknown},
            )
        return [dict(item) for item in items]


DEFAULT_ACTIVITY_POLICY = SubstituteFirstSuggested()
