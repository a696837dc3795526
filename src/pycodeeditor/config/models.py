from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_MAX_READ_BYTES = 10 * 1024 * 1024

DEFAULT_BLOCKED_FILENAMES = (".env", ".env.local", ".env.production", "id_rsa", "id_ed25519")

DEFAULT_SEARCH_EXTENSIONS = (
    ".js", ".ts", ".json", ".jsx", ".tsx", ".md", ".py",
    ".java", ".c", ".cpp", ".cs", ".rb", ".go",
)

DEFAULT_SEARCH_SKIP_DIRS = ("node_modules", "dist", "build")


def _str_tuple(obj: Any, fallback: tuple[str, ...], *, lower: bool = False) -> tuple[str, ...]:
    if not isinstance(obj, list) or not all(isinstance(x, str) for x in obj):
        return fallback
    return tuple(x.lower() if lower else x for x in obj)


def _extend(base: tuple[str, ...], extra: tuple[str, ...]) -> tuple[str, ...]:
    return base + tuple(x for x in dict.fromkeys(extra) if x not in base)


def _positive_int(obj: Any, fallback: int | None) -> int | None:
    if isinstance(obj, bool) or not isinstance(obj, int) or obj < 1:
        return fallback
    return obj


@dataclass(frozen=True)
class ToolsConfig:
    """Policy knobs for the builtin file tools.

    Defaults are the production policy; config files may tighten or relax
    them per project.
    """

    max_read_bytes: int = DEFAULT_MAX_READ_BYTES
    blocked_filenames: tuple[str, ...] = DEFAULT_BLOCKED_FILENAMES
    search_max_results: int = 100
    search_preview_chars: int = 200
    search_extensions: tuple[str, ...] = DEFAULT_SEARCH_EXTENSIONS
    search_skip_dirs: tuple[str, ...] = DEFAULT_SEARCH_SKIP_DIRS
    # Optional ceiling on files inspected per search; None = walk everything.
    search_max_files: int | None = None
    event_log: bool = True

    loaded_from: Path | None = field(default=None, compare=False)

    @staticmethod
    def from_obj(obj: Any, loaded_from: Path | None = None) -> "ToolsConfig":
        base = ToolsConfig()
        if not isinstance(obj, dict):
            return ToolsConfig(loaded_from=loaded_from)
        ev = obj.get("event_log", base.event_log)
        return ToolsConfig(
            max_read_bytes=_positive_int(obj.get("max_read_bytes"), base.max_read_bytes),  # type: ignore[arg-type]
            # config can only add to the blocked set, never shrink it
            blocked_filenames=_extend(base.blocked_filenames, _str_tuple(obj.get("blocked_filenames"), (), lower=True)),
            search_max_results=_positive_int(obj.get("search_max_results"), base.search_max_results),  # type: ignore[arg-type]
            search_preview_chars=_positive_int(obj.get("search_preview_chars"), base.search_preview_chars),  # type: ignore[arg-type]
            search_extensions=_str_tuple(obj.get("search_extensions"), base.search_extensions, lower=True),
            search_skip_dirs=_str_tuple(obj.get("search_skip_dirs"), base.search_skip_dirs),
            search_max_files=_positive_int(obj.get("search_max_files"), None),
            event_log=ev if isinstance(ev, bool) else base.event_log,
            loaded_from=loaded_from,
        )
