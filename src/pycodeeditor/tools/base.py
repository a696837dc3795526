from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol

from ..config.models import ToolsConfig

ParamType = Literal["string", "integer", "boolean"]

_PY_TYPES: dict[str, type] = {"string": str, "integer": int, "boolean": bool}

@dataclass(frozen=True)
class ParamSpec:
    name: str
    type: ParamType
    description: str = ""
    required: bool = False
    default: Any = None

    def to_schema(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type}
        if self.description:
            d["description"] = self.description
        if self.default is not None:
            d["default"] = self.default
        return d

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    params: tuple[ParamSpec, ...] = ()
    mutates: bool = False        # write/edit: serialised per path by the dispatcher

    def input_schema(self) -> dict[str, Any]:
        """JSON-schema object shape, as expected by function-calling APIs."""
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.params},
            "required": [p.name for p in self.params if p.required],
        }

class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: "ToolContext", args: dict[str, Any]) -> "ToolResult": ...

@dataclass
class ToolResult:
    # str for messages and file text; list of dicts for entries/matches
    content: str | list[dict[str, Any]]
    is_error: bool = False

    def render(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, ensure_ascii=False)

@dataclass(frozen=True)
class ToolContext:
    root: str
    config: ToolsConfig = field(default_factory=ToolsConfig)

    @property
    def root_path(self) -> Path:
        return Path(self.root)


class ArgumentError(ValueError):
    pass


def _type_ok(value: Any, type_name: str) -> bool:
    # bool is a subclass of int; never accept it as an integer
    if type_name == "integer" and isinstance(value, bool):
        return False
    return isinstance(value, _PY_TYPES[type_name])


def validate_args(spec: ToolSpec, args: Any) -> dict[str, Any]:
    """Check ``args`` against ``spec.params`` and fill in defaults.

    Raises ArgumentError naming the first problem found: a non-object
    argument payload, an unknown key, a missing required key or a value of
    the wrong primitive type.
    """
    if not isinstance(args, dict):
        raise ArgumentError("arguments must be a JSON object")
    known = {p.name for p in spec.params}
    unknown = sorted(k for k in args if k not in known)
    if unknown:
        raise ArgumentError(f"unexpected argument(s): {', '.join(unknown)}")

    out: dict[str, Any] = {}
    for p in spec.params:
        if p.name not in args or args[p.name] is None:
            if p.required:
                raise ArgumentError(f"missing required argument '{p.name}'")
            if p.default is not None:
                out[p.name] = p.default
            continue
        value = args[p.name]
        if not _type_ok(value, p.type):
            raise ArgumentError(
                f"argument '{p.name}' must be of type {p.type}, got {type(value).__name__}"
            )
        out[p.name] = value
    return out
