"""Input Validator/Normalizer.

Checks caller input before any network call and normalizes the weighted
collections (asset breakdowns, group holdings) that are pushed to the service.

Usage:
    from normalizer import validate_asset_inputs, normalize_breakdown

    validate_asset_inputs(descriptor, basics)
    breakdown = normalize_breakdown(items, suggestions, home_country="US")
"""

from normalizer.required import (
    ASSET_BASICS_FIELDS,
    ASSET_DESCRIPTOR_FIELDS,
    ASSET_NUMERIC_FIELDS,
    GROUP_DESCRIPTOR_FIELDS,
    is_country_code,
    is_number,
    missing_fields,
    non_numeric_fields,
    non_text_fields,
    validate_asset_inputs,
    validate_group_descriptor,
)
from normalizer.weights import WEIGHT_TOLERANCE, rescale_weights
from normalizer.policies import (
    DEFAULT_ACTIVITY_POLICY,
    ActivityIdPolicy,
    RejectUnknownActivity,
    SubstituteFirstSuggested,
)
from normalizer.allocations import normalize_breakdown, normalize_holdings

__all__ = [
    # Required fields
    "ASSET_BASICS_FIELDS",
    "ASSET_DESCRIPTOR_FIELDS",
    "ASSET_NUMERIC_FIELDS",
    "GROUP_DESCRIPTOR_FIELDS",
    "is_country_code",
    "is_number",
    "missing_fields",
    "non_numeric_fields",
    "non_text_fields",
    "validate_asset_inputs",
    "validate_group_descriptor",
    # Weights
    "WEIGHT_TOLERANCE",
    "rescale_weights",
    # Activity id policies
    "ActivityIdPolicy",
    "SubstituteFirstSuggested",
    "RejectUnknownActivity",
    "DEFAULT_ACTIVITY_POLICY",
    # Collections
    "normalize_breakdown",
    "normalize_holdings",
]
