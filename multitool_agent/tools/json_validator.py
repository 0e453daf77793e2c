"""
JSON validator tool.
"""

import json

from pydantic import BaseModel, ConfigDict, Field

from .registry import ToolName, ToolRegistry


class JSONValidatorParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_string: str = Field(..., alias="jsonString", max_length=10000)
    pretty_print: bool = Field(default=False, alias="prettyPrint")


def json_type_name(value) -> str:
    """Name a decoded value by its JSON type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def validate_json(json_string: str, pretty_print: bool = False) -> dict:
    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as e:
        return {
            "success": False,
            "valid": False,
            "error": str(e),
            "message": "JSON ist ungültig",
        }

    json_type = json_type_name(parsed)
    item_count = len(parsed) if json_type in ("array", "object") else 0

    result = {
        "success": True,
        "valid": True,
        "type": json_type,
        "itemCount": item_count,
        "message": "JSON ist gültig",
    }
    if pretty_print:
        result["formatted"] = json.dumps(parsed, indent=2, ensure_ascii=False)
    return result


async def _handle_validate(params: JSONValidatorParams) -> dict:
    return validate_json(params.json_string, params.pretty_print)


def _register():
    ToolRegistry.register(
        name=ToolName.JSON_VALIDATOR,
        description="Validiert JSON Strings.",
        params_model=JSONValidatorParams,
        handler=_handle_validate,
    )


_register()
