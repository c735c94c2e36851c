"""
Tool argument validation.

Checks model-generated arguments against a tool's parameter schema before
dispatch. Covers the subset of JSON Schema the tool catalog uses: required
fields, property types and ``additionalProperties: false``. ``enum`` lists
are hints for the model only; tools map out-of-range values to their
defaults themselves.
"""

from typing import Any


class ArgumentValidationError(ValueError):
    """Tool arguments do not match the tool's parameter schema."""


def _matches_json_type(value: Any, expected: str) -> bool:
    """Check whether a Python value matches a basic JSON Schema type."""
    if expected == "string":
        return isinstance(value, str)
    if expected == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, dict)
    if expected == "array":
        return isinstance(value, list)
    if expected == "null":
        return value is None
    # Unknown type: be conservative
    return False


def validate_arguments(arguments: Any, schema: dict[str, Any]) -> None:
    """
    Validate tool arguments against a parameter schema.

    Args:
        arguments: Parsed arguments produced by the model.
        schema: The tool's JSON Schema for its arguments object.

    Raises:
        ArgumentValidationError: If the arguments do not conform.
    """
    if not isinstance(arguments, dict):
        raise ArgumentValidationError("Arguments must be a JSON object")

    properties = schema.get("properties")
    required = schema.get("required", [])
    if not isinstance(properties, dict):
        properties = {}
    if not isinstance(required, list):
        required = []

    for field in required:
        if field not in arguments:
            raise ArgumentValidationError(f"Missing required argument: {field}")

    if schema.get("additionalProperties", True) is False:
        unknown = [key for key in arguments if key not in properties]
        if unknown:
            raise ArgumentValidationError(
                f"Unknown argument(s) not allowed: {', '.join(sorted(unknown))}"
            )

    for key, value in arguments.items():
        prop = properties.get(key)
        if not isinstance(prop, dict):
            continue

        expected_type = prop.get("type")
        if isinstance(expected_type, list):
            if not any(_matches_json_type(value, t) for t in expected_type):
                raise ArgumentValidationError(
                    f"Argument '{key}' has wrong type; expected one of {expected_type}"
                )
        elif isinstance(expected_type, str):
            if not _matches_json_type(value, expected_type):
                raise ArgumentValidationError(
                    f"Argument '{key}' has wrong type; expected {expected_type}"
                )
