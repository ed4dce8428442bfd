from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ParameterType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


@dataclass
class ToolParameter:
    """
    A single input of a tool, derived from one property of its JSON input schema.
    """
    name: str
    type: ParameterType = ParameterType.STRING
    required: bool = False
    description: str = ""
    default: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "description": self.description,
        }
        if self.default is not None:
            data["default"] = self.default
        return data


@dataclass
class Tool:
    """
    A remote operation exposed by a connected server.

    Recomputed on every successful connect and never persisted.
    `input_schema` keeps the normalized schema for argument validation.
    """
    name: str
    description: str = ""
    parameters: List[ToolParameter] = field(default_factory=list)
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    def get_parameter(self, name: str) -> Optional[ToolParameter]:
        return next((p for p in self.parameters if p.name == name), None)

    @property
    def required_parameters(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the tool to a plain dictionary (for display or JSON output).
        """
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
            "inputSchema": self.input_schema,
        }
