from pathlib import Path
from typing import Callable

import pytest

from pycodeeditor.tools.base import ToolContext


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Sandbox root with a sibling directory whose name extends it."""
    r = tmp_path / "work"
    r.mkdir()
    (tmp_path / "workspace").mkdir()
    return r.resolve()


@pytest.fixture
def ctx(root: Path) -> ToolContext:
    return ToolContext(root=str(root))


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes]]:
    """Map of relative path -> bytes for every file under a directory."""

    def _snap(directory: Path) -> dict[str, bytes]:
        return {
            p.relative_to(directory).as_posix(): p.read_bytes()
            for p in directory.rglob("*")
            if p.is_file()
        }

    return _snap
