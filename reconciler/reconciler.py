"""Resource Reconciler.

Idempotent create-or-adopt for remote resources:
1. Try to create the resource
2. Created with an id: done
3. "Already exists", or create raised: search by name
4. Exactly-matching hit on the identifying key: adopt its id
5. Otherwise: ReconciliationError

Two concurrent creators with the same key can both see "not found" and both
create; the service may hold duplicates in that window. Search converges
every later call on the first exact match.
"""

from typing import Any, Dict, Optional

from connectors.impact_base import CreateOutcomeRef, ImpactResourceGateway
from core.errors import CreateOutcome, ReconcileFailureReason, ReconciliationError
from core.observability.logging import get_logger
from reconciler.models import ReconcilePath, ReconcileResult

logger = get_logger(__name__)


class ResourceReconciler:
    """Resolves a descriptor to exactly one remote resource id.

    Example:
        reconciler = ResourceReconciler(AssetGateway(client))
        result = await reconciler.reconcile({"name": "Acme", "industry": "Software", ...})
        if result.created:
            suggestions = result.suggestions
    """

    def __init__(self, gateway: ImpactResourceGateway):
        self.gateway = gateway

    async def reconcile(self, descriptor: Dict[str, Any]) -> ReconcileResult:
        """Create the resource or adopt the existing one.

        Raises:
            ReconciliationError: Create did not yield an id and search found
                no exact match (NO_MATCH) or failed itself (SEARCH_FAILED)
        """
        kind = self.gateway.kind.value
        name = descriptor.get("name")
        create_error: Optional[Exception] = None
        outcome: Optional[CreateOutcomeRef] = None

        try:
            outcome = await self.gateway.create(descriptor)
        except Exception as e:
            create_error = e
            logger.warning(f"{kind} creation failed (potentially exists): {e}. Attempting search.")

        if outcome is not None and outcome.resource_id:
            logger.info(f"Created {kind} '{name}' with id {outcome.resource_id}")
            return ReconcileResult(
                resource_id=outcome.resource_id,
                created=True,
                suggestions=outcome.suggestions,
                path=ReconcilePath.CREATED,
            )

        if create_error is not None:
            create_outcome = CreateOutcome.ERROR
            path = ReconcilePath.ADOPTED_AFTER_ERROR
        else:
            create_outcome = CreateOutcome.CONFLICT
            path = ReconcilePath.ADOPTED_AFTER_CONFLICT
            logger.info(f"{kind} '{name}' already exists. Searching for its id.")

        try:
            hits = await self.gateway.search(name)
        except Exception as e:
            raise ReconciliationError(
                f"{kind} processing error (create {create_outcome.value.lower()} "
                f"and search failed): {e}",
                reason=ReconcileFailureReason.SEARCH_FAILED,
                create_outcome=create_outcome,
            ) from e

        for hit in hits:
            if self.gateway.matches(hit, descriptor):
                logger.info(f"Found existing {kind} via search: {hit.id}")
                return ReconcileResult(
                    resource_id=hit.id,
                    created=False,
                    path=path,
                    create_message=outcome.message if outcome else str(create_error),
                )

        raise ReconciliationError(
            f"{kind} '{name}' could not be created (create {create_outcome.value.lower()}) "
            f"and no exact match was found among {len(hits)} search result(s)",
            reason=ReconcileFailureReason.NO_MATCH,
            create_outcome=create_outcome,
        )
