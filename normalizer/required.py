"""Required-field and numeric-type checks for caller input.

Every check reports ALL offending fields, never only the first.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.errors import ValidationError


ASSET_DESCRIPTOR_FIELDS = ["description", "hqCountryCode", "industry", "name", "numEmployees"]
ASSET_BASICS_FIELDS = [
    "currency",
    "revenue",
    "revenueGrowth",
    "description",
    "hqCountryCode",
    "industry",
    "name",
    "numEmployees",
]
ASSET_NUMERIC_FIELDS = ["revenue", "revenueGrowth", "numEmployees"]
ASSET_DESCRIPTOR_TEXT_FIELDS = ["description", "hqCountryCode", "industry", "name"]
ASSET_BASICS_TEXT_FIELDS = ["currency", "description", "hqCountryCode", "industry", "name"]

GROUP_DESCRIPTOR_FIELDS = ["name", "description", "owner"]


def is_number(value: Any) -> bool:
    """True for int/float values. Booleans and numeric strings are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_country_code(value: Any) -> bool:
    """Two-letter country code, e.g. "US"."""
    return isinstance(value, str) and len(value) == 2 and value.isalpha()


def missing_fields(obj: Optional[Mapping[str, Any]], required: Iterable[str]) -> List[str]:
    """Required fields that are absent or None, in `required` order."""
    obj = obj or {}
    return [name for name in required if obj.get(name) is None]


def non_numeric_fields(obj: Optional[Mapping[str, Any]], fields: Iterable[str]) -> List[str]:
    """Present fields whose value is not an int/float."""
    obj = obj or {}
    return [name for name in fields if obj.get(name) is not None and not is_number(obj[name])]


def non_text_fields(obj: Optional[Mapping[str, Any]], fields: Iterable[str]) -> List[str]:
    """Present fields whose value is not a string."""
    obj = obj or {}
    return [name for name in fields if obj.get(name) is not None and not isinstance(obj[name], str)]


def _invalid_fields(obj: Mapping[str, Any], numeric: Iterable[str], text: Iterable[str]) -> List[str]:
    invalid = non_numeric_fields(obj, numeric) + non_text_fields(obj, text)
    country = obj.get("hqCountryCode")
    if isinstance(country, str) and not is_country_code(country):
        invalid.append("hqCountryCode")
    return invalid


def _format_sections(errors: Dict[str, List[str]]) -> str:
    return ". ".join(
        f"{section.capitalize()}: [{', '.join(names)}]" for section, names in errors.items()
    )


def _require_mapping(value: Any, section: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"{section} must be an object", {section: ["<object>"]})
    return value


def validate_asset_inputs(descriptor: Any, basics: Any) -> None:
    """Check the asset descriptor and basics before any network call.

    Raises:
        ValidationError: Naming every missing field of both sections, or
            every field of the wrong type (numbers, strings, and a
            two-letter hqCountryCode)
    """
    descriptor = _require_mapping(descriptor, "asset")
    basics = _require_mapping(basics, "basics")

    missing = {
        "asset": missing_fields(descriptor, ASSET_DESCRIPTOR_FIELDS),
        "basics": missing_fields(basics, ASSET_BASICS_FIELDS),
    }
    if any(missing.values()):
        raise ValidationError(
            f"Missing required fields. {_format_sections(missing)}",
            {section: names for section, names in missing.items() if names},
        )

    invalid = {
        "asset": _invalid_fields(descriptor, ["numEmployees"], ASSET_DESCRIPTOR_TEXT_FIELDS),
        "basics": _invalid_fields(basics, ASSET_NUMERIC_FIELDS, ASSET_BASICS_TEXT_FIELDS),
    }
    if any(invalid.values()):
        raise ValidationError(
            f"Fields have invalid values. {_format_sections(invalid)}",
            {section: names for section, names in invalid.items() if names},
        )


def validate_group_descriptor(descriptor: Any) -> None:
    """Check the group descriptor before any network call.

    Raises:
        ValidationError: Naming every missing field
    """
    descriptor = _require_mapping(descriptor, "group")
    missing = missing_fields(descriptor, GROUP_DESCRIPTOR_FIELDS)
    if missing:
        raise ValidationError(
            f"Missing required fields. Group: [{', '.join(missing)}]",
            {"group": missing},
        )
    invalid = non_text_fields(descriptor, GROUP_DESCRIPTOR_FIELDS)
    if invalid:
        raise ValidationError(
            f"Fields must be strings. Group: [{', '.join(invalid)}]",
            {"group": invalid},
        )
