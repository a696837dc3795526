from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ParamSpec, ToolSpec, ToolResult, ToolContext
from ...util.fs import resolve_path, read_text, SandboxError


def is_blocked_filename(name: str, blocked: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return lowered in blocked or lowered.startswith(".env")


@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="read_file",
        description=(
            "Read the contents of a given relative file path. Use this when you want to see "
            "what's inside a file. Do not use this with directory names."
        ),
        params=(
            ParamSpec("path", "string", "The relative path of the file to read.", required=True),
        ),
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        try:
            p = resolve_path(ctx.root_path, path)
        except SandboxError as e:
            return ToolResult(str(e), is_error=True)

        try:
            if not p.exists():
                return ToolResult(f"File does not exist: {path}", is_error=True)
            if p.is_dir():
                return ToolResult(f"Path is a directory, not a file: {path}", is_error=True)
            size = p.stat().st_size
            limit = ctx.config.max_read_bytes
            if size > limit:
                return ToolResult(
                    f"File is too large to read ({size} bytes, limit {limit} bytes): {path}",
                    is_error=True,
                )
            # check the name asked for as well as the symlink target's name
            for name in (Path(path).name, p.name):
                if is_blocked_filename(name, ctx.config.blocked_filenames):
                    return ToolResult(f"Access denied: reading {name} is not allowed.", is_error=True)
            return ToolResult(read_text(p))
        except (OSError, UnicodeDecodeError) as e:
            return ToolResult(f"Error reading file: {e}", is_error=True)
