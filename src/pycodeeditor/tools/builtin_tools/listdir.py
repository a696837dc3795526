from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any

from ..base import ParamSpec, ToolSpec, ToolResult, ToolContext
from ...util.fs import resolve_path, SandboxError

@dataclass
class ListDirTool:
    spec: ToolSpec = ToolSpec(
        name="list_files",
        description=(
            "List the files and directories directly inside a directory (relative to the "
            "project root). Not recursive; hidden entries are included."
        ),
        params=(
            ParamSpec("path", "string", "Directory path relative to the project root.", default="."),
        ),
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args.get("path", ".")
        try:
            p = resolve_path(ctx.root_path, path)
        except SandboxError as e:
            return ToolResult(str(e), is_error=True)
        if not p.exists():
            return ToolResult(f"Directory does not exist: {path}", is_error=True)
        if not p.is_dir():
            return ToolResult(f"Path is not a directory: {path}", is_error=True)

        # scandir order as-is; callers must not rely on sorting
        entries: list[dict[str, Any]] = []
        try:
            with os.scandir(p) as it:
                for entry in it:
                    kind = "directory" if entry.is_dir() else "file"
                    entries.append({"name": entry.name, "type": kind})
        except OSError as e:
            return ToolResult(f"Error listing directory: {e}", is_error=True)
        return ToolResult(entries)
