import json
import math
from typing import Any, Dict

from jsonschema import validate, exceptions as jsonschema_exceptions

from mcpdesk.models.tool import ParameterType, Tool, ToolParameter

TRUE_WORDS = {"true", "1", "yes", "on"}
FALSE_WORDS = {"false", "0", "no", "off"}


def validate_arguments(tool: Tool, arguments: Dict[str, Any]) -> Dict[str, str]:
    """
    Check arguments against a tool's parameters before calling it.

    Required parameters must be present and non-empty, and every provided value must
    match its parameter type. When those checks pass, the whole argument object is
    validated against the tool's input schema with jsonschema, which also covers
    constraints such as enum, minimum and integer-ness.

    Returns:
        Dict[str, str]: parameter name -> message; empty when the arguments are valid.
            Schema errors that do not point at a single parameter are keyed "arguments".
    """
    errors: Dict[str, str] = {}
    for param in tool.parameters:
        value = arguments.get(param.name)
        if _is_empty(value):
            if param.required:
                errors[param.name] = f"{param.name} is required"
            continue
        message = _check_type(param, value)
        if message:
            errors[param.name] = message
    if errors:
        return errors

    try:
        validate(instance=arguments, schema=tool.input_schema)
    except jsonschema_exceptions.ValidationError as e:
        path = list(e.path)
        key = str(path[0]) if path else "arguments"
        errors[key] = e.message
    except jsonschema_exceptions.SchemaError as e:
        errors["arguments"] = f"Tool '{tool.name}' has an invalid input schema: {e.message}"
    return errors


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _check_type(param: ToolParameter, value: Any) -> str:
    if param.type == ParameterType.STRING:
        if not isinstance(value, str):
            return f"{param.name} must be a string"
    elif param.type == ParameterType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            return f"{param.name} must be a number"
    elif param.type == ParameterType.BOOLEAN:
        if not isinstance(value, bool):
            return f"{param.name} must be a boolean"
    elif param.type == ParameterType.OBJECT:
        if not isinstance(value, dict):
            return f"{param.name} must be a valid JSON object"
    elif param.type == ParameterType.ARRAY:
        if not isinstance(value, list):
            return f"{param.name} must be a valid JSON array"
    return ""


def coerce_argument(param: ToolParameter, text: str) -> Any:
    """
    Convert a command-line string into the value type a parameter expects.

    Raises:
        ValueError: the text cannot be read as the parameter's type.
    """
    if param.type == ParameterType.NUMBER:
        try:
            return int(text)
        except ValueError:
            return float(text)
    if param.type == ParameterType.BOOLEAN:
        lowered = text.strip().lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        raise ValueError(f"{param.name} must be a boolean, got {text!r}")
    if param.type in (ParameterType.OBJECT, ParameterType.ARRAY):
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"{param.name} must be valid JSON: {e}")
    return text
