from __future__ import annotations

from typing import Any

from .registry import ToolRegistry


def to_openai_tools(registry: ToolRegistry) -> list[dict[str, Any]]:
    out = []
    for spec in registry.list_specs():
        out.append({
            "type": "function",
            "function": {
                "name": spec.name,
                "description": spec.description,
                "parameters": spec.input_schema(),
            },
        })
    return out


def to_anthropic_tools(registry: ToolRegistry) -> list[dict[str, Any]]:
    return [
        {"name": spec.name, "description": spec.description, "input_schema": spec.input_schema()}
        for spec in registry.list_specs()
    ]
