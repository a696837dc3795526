from __future__ import annotations
import itertools
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from ..base import ParamSpec, ToolSpec, ToolResult, ToolContext
from ...config.models import ToolsConfig
from ...util.fs import resolve_path, read_text, FsError, SandboxError


def _is_candidate(name: str, config: ToolsConfig) -> bool:
    return os.path.splitext(name)[1].lower() in config.search_extensions


def _iter_files(root: Path, start: Path, config: ToolsConfig) -> Iterator[Path]:
    """Depth-first walk yielding searchable files under ``start``.

    Hidden entries and skip-dirs are pruned; symlinked directories are not
    descended, symlinked files are yielded only if they resolve inside root.
    """
    stack: list[Iterator[os.DirEntry]] = []
    try:
        with os.scandir(start) as it:
            stack.append(iter(list(it)))
    except OSError:
        return

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        name = entry.name
        if name.startswith("."):
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                if name in config.search_skip_dirs:
                    continue
                with os.scandir(entry.path) as it:
                    stack.append(iter(list(it)))
                continue
            if not entry.is_file() or not _is_candidate(name, config):
                continue
            if entry.is_symlink():
                resolve_path(root, entry.path)
        except (OSError, FsError):
            continue
        yield Path(entry.path)


def iter_matches(root: Path, start: Path, query: str, config: ToolsConfig) -> Iterator[dict[str, Any]]:
    """Lazily yield SearchMatch dicts for ``query`` under ``start``.

    Finite and restartable: each call walks the tree afresh.
    """
    root = root.resolve()
    files = _iter_files(root, start, config)
    if config.search_max_files is not None:
        files = itertools.islice(files, config.search_max_files)
    for f in files:
        try:
            text = read_text(f)
        except (OSError, UnicodeDecodeError):
            continue
        rel = f.relative_to(root).as_posix()
        # line numbers count "\n" only; splitlines() also breaks on \f, \v and \x85
        for i, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            if query in line:
                yield {
                    "file": rel,
                    "line": i,
                    "preview": line.strip()[: config.search_preview_chars],
                }


@dataclass
class SearchTool:
    spec: ToolSpec = ToolSpec(
        name="search_files",
        description=(
            "Search source files recursively for a literal text (not a regex). Skips hidden "
            "entries, node_modules, dist and build. Returns file, 1-based line and a preview "
            "for each matching line."
        ),
        params=(
            ParamSpec("query", "string", "Literal text to look for.", required=True),
            ParamSpec("path", "string", "Directory to start from, relative to the project root.", default="."),
            ParamSpec("max_results", "integer", "Maximum number of matches to return (default 100)."),
        ),
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        query = args["query"]
        path = args.get("path", ".")
        max_results = args.get("max_results")
        if max_results is None:
            max_results = ctx.config.search_max_results

        if query == "":
            return ToolResult("query must not be empty.", is_error=True)
        if max_results < 1:
            return ToolResult("max_results must be a positive integer.", is_error=True)

        try:
            start = resolve_path(ctx.root_path, path)
        except SandboxError as e:
            return ToolResult(str(e), is_error=True)
        if not start.exists():
            return ToolResult(f"Directory does not exist: {path}", is_error=True)
        if not start.is_dir():
            return ToolResult(f"Path is not a directory: {path}", is_error=True)

        matches = list(itertools.islice(iter_matches(ctx.root_path, start, query, ctx.config), max_results))
        return ToolResult(matches)
