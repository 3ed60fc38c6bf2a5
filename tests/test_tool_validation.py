"""Tests for tool config validation in app/utils/tool_validation.py."""

import json

import pytest

from app.core.exceptions import ToolConfigError
from app.utils.tool_validation import required_config_fields, validate_tool_config

SCHEMA = {
    "api_schema": {
        "request_body_schema": {
            "properties": [
                {"id": "sender_email", "value_type": "constant_value", "required": True},
                {"id": "subject", "value_type": "constant_value", "required": True},
                {"id": "signature", "value_type": "constant_value", "required": False},
                {"id": "body", "value_type": "llm_prompt", "required": True},
            ]
        }
    }
}


class TestRequiredConfigFields:
    """Only required constant values must be filled by the user."""

    def test_lists_required_constant_fields(self) -> None:
        assert required_config_fields(SCHEMA) == ["sender_email", "subject"]

    def test_accepts_json_string(self) -> None:
        assert required_config_fields(json.dumps(SCHEMA)) == ["sender_email", "subject"]

    def test_empty_schema_requires_nothing(self) -> None:
        assert required_config_fields(None) == []
        assert required_config_fields({}) == []


class TestValidateToolConfig:
    """Config checks before a tool connection is enabled."""

    def test_valid_config(self) -> None:
        config = {"sender_email": "bot@example.com", "subject": "Hello"}
        assert validate_tool_config(SCHEMA, config) is True

    def test_missing_field_reported(self) -> None:
        with pytest.raises(ToolConfigError) as exc_info:
            validate_tool_config(SCHEMA, {"sender_email": "bot@example.com"})
        assert "subject" in exc_info.value.message

    def test_blank_field_counts_as_missing(self) -> None:
        with pytest.raises(ToolConfigError) as exc_info:
            validate_tool_config(SCHEMA, {"sender_email": "bot@example.com", "subject": "   "})
        assert "Missing required fields: subject" == exc_info.value.message

    def test_invalid_email_rejected(self) -> None:
        with pytest.raises(ToolConfigError) as exc_info:
            validate_tool_config(SCHEMA, {"sender_email": "not-an-email", "subject": "Hi"})
        assert "sender_email" in exc_info.value.message

    def test_invalid_schema_string(self) -> None:
        with pytest.raises(ToolConfigError):
            validate_tool_config("{not json", {})

    def test_error_maps_to_bad_request(self) -> None:
        with pytest.raises(ToolConfigError) as exc_info:
            validate_tool_config(SCHEMA, {})
        assert exc_info.value.status_code == 400
