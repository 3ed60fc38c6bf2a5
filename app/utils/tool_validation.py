"""
Validation of per-agent tool config against the catalog schema template.
"""
import json
from typing import Any, Dict, List, Union

from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError

from app.core.exceptions import ToolConfigError

_email_adapter = TypeAdapter(EmailStr)


def required_config_fields(schema_template: Union[Dict[str, Any], str, None]) -> List[str]:
    """
    List the fields a user must fill before a tool can be enabled.

    A field is required when its property in
    ``api_schema.request_body_schema.properties`` is marked ``required``
    and has ``value_type == "constant_value"``.
    """
    if not schema_template:
        return []

    schema = json.loads(schema_template) if isinstance(schema_template, str) else schema_template
    properties = (
        schema.get("api_schema", {})
        .get("request_body_schema", {})
        .get("properties", [])
    )

    return [
        prop["id"]
        for prop in properties
        if isinstance(prop, dict)
        and prop.get("required") is True
        and prop.get("value_type") == "constant_value"
        and "id" in prop
    ]


def validate_tool_config(schema_template: Union[Dict[str, Any], str, None], config: Dict[str, Any]) -> bool:
    """
    Check a tool config against its schema template.

    Raises:
        ToolConfigError: If a required field is missing or blank, or an
            ``*email*`` field is not a valid address
    """
    try:
        required = required_config_fields(schema_template)
    except (ValueError, AttributeError) as e:
        raise ToolConfigError(f"Invalid tool schema template: {e}")

    missing = [
        field
        for field in required
        if not isinstance(config.get(field), str) or not config[field].strip()
    ]
    if missing:
        raise ToolConfigError(f"Missing required fields: {', '.join(missing)}")

    for key, value in config.items():
        if "email" not in key or not value:
            continue
        try:
            _email_adapter.validate_python(value)
        except PydanticValidationError:
            raise ToolConfigError(f"Invalid email format in field: {key}")

    return True
