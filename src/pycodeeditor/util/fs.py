from __future__ import annotations
from pathlib import Path

class FsError(RuntimeError):
    pass

class SandboxError(FsError):
    pass

def resolve_path(root: Path, path_str: str) -> Path:
    root = root.resolve()
    p = Path(path_str or ".")
    if not p.is_absolute():
        p = (root / p).resolve()
    else:
        p = p.resolve()
    # Component-wise check: "/work" must not contain "/workspace/x".
    try:
        p.relative_to(root)
    except ValueError:
        raise SandboxError(f"Access denied: path escapes the sandbox root: {path_str}")
    return p

def read_text(path: Path, errors: str = "strict") -> str:
    # bytes -> str keeps "\r\n" intact (Path.read_text would translate it)
    return path.read_bytes().decode("utf-8", errors=errors)

def write_text(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8", newline="")
