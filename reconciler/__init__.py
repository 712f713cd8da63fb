"""Resource Reconciler - create-or-adopt for remote resources.

Guarantees one id per logical resource: creation is attempted first, and a
conflict or failed create falls back to an exact-key search.

Usage:
    from reconciler import ResourceReconciler

    result = await ResourceReconciler(gateway).reconcile(descriptor)
    resource_id = result.resource_id
"""

from reconciler.models import ReconcilePath, ReconcileResult
from reconciler.reconciler import ResourceReconciler

__all__ = [
    "ReconcilePath",
    "ReconcileResult",
    "ResourceReconciler",
]
