from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from .models import ToolsConfig

APP_NAME = "pycodeeditor"


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".pycodeeditor.json",
        cwd / "pycodeeditor.json",
        cwd / ".pycodeeditor.yaml",
        cwd / "pycodeeditor.yaml",
    ]


def _global_candidate_paths() -> list[Path]:
    cfg_dir = Path(user_config_dir(APP_NAME))
    return [
        cfg_dir / "pycodeeditor.json",
        cfg_dir / "pycodeeditor.yaml",
    ]


def _load_obj(p: Path) -> dict[str, Any] | None:
    try:
        text = p.read_text(encoding="utf-8")
        if p.suffix in {".yaml", ".yml"}:
            obj = yaml.safe_load(text)
        else:
            obj = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError):
        return None
    if isinstance(obj, dict):
        # allow the settings to live under a "tools:" section
        section = obj.get("tools")
        return section if isinstance(section, dict) else obj
    return None


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)  # type: ignore
        else:
            out[k] = v
    return out


def load_tools_config(*, cwd: Path, explicit_path: Path | None = None) -> ToolsConfig:
    """Load tool policy config.

    Merge order: global < project < explicit_path.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in _global_candidate_paths():
        if p.exists() and p.is_file():
            obj = _load_obj(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    for p in _candidate_paths(cwd):
        if p.exists() and p.is_file():
            obj = _load_obj(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p
                break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if p.exists() and p.is_file():
            obj = _load_obj(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    return ToolsConfig.from_obj(merged, loaded_from=loaded_from)


def is_project_config(cwd: Path, p: Path) -> bool:
    """True if ``p`` (already resolved) is one of the project config files under ``cwd``."""
    return p in {c.resolve() for c in _candidate_paths(cwd.resolve())}
