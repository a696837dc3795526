from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ParamSpec, ToolSpec, ToolResult, ToolContext
from ...config.loader import is_project_config
from ...util.fs import resolve_path, write_text, SandboxError

@dataclass
class WriteFileTool:
    spec: ToolSpec = ToolSpec(
        name="write_file",
        description=(
            "Create a file with the given content, creating parent directories as needed. "
            "Replaces the whole file. Refuses to replace an existing file unless overwrite is true."
        ),
        params=(
            ParamSpec("path", "string", "File path relative to the project root.", required=True),
            ParamSpec("content", "string", "Full file content.", required=True),
            ParamSpec("overwrite", "boolean", "Must be true to replace an existing file.", required=True),
        ),
        mutates=True,
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        content = args["content"]
        overwrite = args["overwrite"]
        try:
            p = resolve_path(ctx.root_path, path)
        except SandboxError as e:
            return ToolResult(str(e), is_error=True)
        if is_project_config(ctx.root_path, p):
            return ToolResult(f"Access denied: {path} is a tool configuration file.", is_error=True)

        try:
            if p.exists():
                if p.is_dir():
                    return ToolResult(f"Path is a directory, cannot write: {path}", is_error=True)
                if overwrite is not True:
                    return ToolResult(
                        f"File already exists: {path}. Set overwrite to true to replace it.",
                        is_error=True,
                    )
            p.parent.mkdir(parents=True, exist_ok=True)
            write_text(p, content)
        except OSError as e:
            return ToolResult(f"Error writing file: {e}", is_error=True)
        return ToolResult(f"Successfully wrote {len(content)} characters to {path}")
