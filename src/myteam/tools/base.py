"""Base tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

JSON_TYPES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
}


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    output: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


class Tool(ABC):
    """Base interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description for the backend."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool input."""
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given arguments."""
        ...

    def get_schema(self) -> dict[str, Any]:
        """Get the tool declaration sent to the reasoning backend."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

    def validate_args(self, args: dict[str, Any]) -> tuple[bool, str | None]:
        """Validate arguments against schema. Returns (valid, error_message)."""
        required = self.parameters.get("required", [])
        properties = self.parameters.get("properties", {})

        for field in required:
            if field not in args:
                return False, f"Missing required argument: {field}"

        for key, value in args.items():
            if key not in properties:
                continue
            spec = properties[key]
            expected = JSON_TYPES.get(spec.get("type", ""))
            if expected is None:
                continue
            # bool is an int subclass, don't let it pass as a number
            if isinstance(value, bool) and spec["type"] in ("integer", "number"):
                return False, f"Argument '{key}' must be {spec['type']}"
            if not isinstance(value, expected):
                return False, f"Argument '{key}' must be {spec['type']}"
            if "enum" in spec and value not in spec["enum"]:
                allowed = ", ".join(str(v) for v in spec["enum"])
                return False, f"Argument '{key}' must be one of: {allowed}"

        return True, None
