"""
ToolSchema normalizer.

Turns the raw ``tools/list`` payload of a server (``mcp.types.Tool`` objects or
plain dicts with arbitrary JSON-schema shapes) into :class:`~mcpdesk.models.tool.Tool`
instances with typed parameters. Pure and deterministic: no I/O.
"""
from typing import Any, Dict, Iterable, List, Optional

from mcpdesk.models.tool import ParameterType, Tool, ToolParameter
from mcpdesk.utils.cleaning import collapse_indentation, strip_args_section
from mcpdesk.utils.helpers import to_jsonable
from mcpdesk.utils.logging import log_message
from mcpdesk.utils.parsing import extract_param_description

SCHEMA_TYPE_MAP: Dict[str, ParameterType] = {
    "string": ParameterType.STRING,
    "number": ParameterType.NUMBER,
    "integer": ParameterType.NUMBER,
    "boolean": ParameterType.BOOLEAN,
    "object": ParameterType.OBJECT,
    "array": ParameterType.ARRAY,
}


def map_schema_type(schema_type: Any) -> ParameterType:
    """
    Map a JSON-schema `type` onto a ParameterType. Unknown or absent types map to STRING;
    for a union such as ["integer", "null"] the first non-null member wins.
    """
    if isinstance(schema_type, (list, tuple)):
        schema_type = next((t for t in schema_type if t != "null"), None)
    if not isinstance(schema_type, str):
        return ParameterType.STRING
    return SCHEMA_TYPE_MAP.get(schema_type.lower(), ParameterType.STRING)


def normalize_tool(raw_tool: Any) -> Optional[Tool]:
    """
    Normalize a single raw tool entry. Returns None for entries without a name.
    """
    data = to_jsonable(raw_tool)
    if not isinstance(data, dict):
        log_message("WARN", f"Ignoring malformed tool entry: {raw_tool!r}")
        return None
    name = data.get("name")
    if not name:
        log_message("WARN", f"Discovered tool object missing 'name': {data}")
        return None

    schema = data.get("inputSchema") or data.get("input_schema")
    if not isinstance(schema, dict):
        schema = {"type": "object", "properties": {}}
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    required = schema.get("required")
    required_list = [r for r in required if isinstance(r, str)] if isinstance(required, list) else []

    description = collapse_indentation(data.get("description") or "")

    parameters: List[ToolParameter] = []
    for param_name, prop in properties.items():
        if not isinstance(prop, dict):
            prop = {}
        param_description = prop.get("description") or ""
        if not param_description:
            param_description = extract_param_description(description, param_name) or ""
        parameters.append(ToolParameter(
            name=param_name,
            type=map_schema_type(prop.get("type")),
            required=param_name in required_list,
            description=param_description,
            default=prop.get("default"),
        ))

    return Tool(
        name=name,
        description=strip_args_section(description),
        parameters=parameters,
        input_schema={
            **schema,
            "type": schema.get("type") or "object",
            "properties": properties,
            "required": required_list,
        },
    )


def normalize_tools(raw_tools: Optional[Iterable[Any]]) -> List[Tool]:
    """
    Normalize a server's tool list. An empty or missing list yields an empty list.
    """
    if not raw_tools:
        return []
    tools = []
    for raw_tool in raw_tools:
        tool = normalize_tool(raw_tool)
        if tool is not None:
            tools.append(tool)
    return tools
