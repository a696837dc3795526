from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ParamSpec, ToolSpec, ToolResult, ToolContext
from ...config.loader import is_project_config
from ...util.fs import resolve_path, read_text, write_text, SandboxError

@dataclass
class EditFileTool:
    spec: ToolSpec = ToolSpec(
        name="edit_file",
        description=(
            "Replace old_str with new_str in a file. old_str must occur exactly once; include "
            "enough surrounding context to make it unique. With an empty old_str on a path that "
            "does not exist yet, the file is created with new_str as its content."
        ),
        params=(
            ParamSpec("path", "string", "File path relative to the project root.", required=True),
            ParamSpec("old_str", "string", "Exact text to replace. Empty only when creating a file.", required=True),
            ParamSpec("new_str", "string", "Replacement text.", required=True),
        ),
        mutates=True,
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        old_str = args["old_str"]
        new_str = args["new_str"]

        try:
            p = resolve_path(ctx.root_path, path)
        except SandboxError as e:
            return ToolResult(str(e), is_error=True)
        if is_project_config(ctx.root_path, p):
            return ToolResult(f"Access denied: {path} is a tool configuration file.", is_error=True)

        try:
            if not p.exists():
                if old_str != "":
                    return ToolResult(
                        f"File does not exist and old_str is not empty: {path}", is_error=True
                    )
                p.parent.mkdir(parents=True, exist_ok=True)
                write_text(p, new_str)
                return ToolResult(f"Successfully created {path}")

            if p.is_dir():
                return ToolResult(f"Path is a directory, cannot edit: {path}", is_error=True)
            if old_str == "":
                return ToolResult(
                    f"old_str must not be empty when editing an existing file: {path}", is_error=True
                )

            text = read_text(p)
            if old_str == new_str:
                return ToolResult("old_str and new_str are identical; nothing to edit.", is_error=True)

            # str.count is non-overlapping, same as the replace below
            count = text.count(old_str)
            if count == 0:
                return ToolResult(f"old_str not found in {path}", is_error=True)
            if count > 1:
                return ToolResult(
                    f"old_str matches multiple locations ({count}) in {path}; edit aborted. "
                    "Include more surrounding context to make it unique.",
                    is_error=True,
                )

            write_text(p, text.replace(old_str, new_str, 1))
        except (OSError, UnicodeDecodeError) as e:
            return ToolResult(f"Error editing file: {e}", is_error=True)
        return ToolResult(f"Successfully edited {path}")
