"""Reconciler Data Models.

- ReconcilePath: How the resource id was obtained
- ReconcileResult: The result of create-or-adopt
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from connectors.impact_base import SuggestedActivity


class ReconcilePath(str, Enum):
    """How the resource id was obtained."""
    CREATED = "created"                     # create returned an id
    ADOPTED_AFTER_CONFLICT = "conflict"     # "already exists", found by search
    ADOPTED_AFTER_ERROR = "error"           # create raised, found by search


class ReconcileResult(BaseModel):
    """Result of create-or-adopt.

    Attributes:
        resource_id: The one id for this logical resource
        created: True only when this call created the resource
        suggestions: Suggested activities returned by create (assets only)
        path: How the id was obtained
        create_message: Message carried by a conflict outcome, if any
    """
    resource_id: str = Field(..., description="Remote resource id")
    created: bool = Field(default=False)
    suggestions: List[SuggestedActivity] = Field(default_factory=list)
    path: ReconcilePath = Field(default=ReconcilePath.CREATED)
    create_message: Optional[str] = None

    @property
    def pre_existed(self) -> bool:
        return not self.created
