from __future__ import annotations

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from .base import ArgumentError, Tool, ToolContext, ToolResult, validate_args
from .registry import ToolRegistry
from ..events.store import EventStore
from ..util.fs import FsError, resolve_path


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: Any  # parsed json; left as the raw string when it does not decode

    @staticmethod
    def from_openai(tc: dict[str, Any]) -> "ToolCall":
        fn = tc.get("function") or {}
        arg_str = fn.get("arguments") or "{}"
        if isinstance(arg_str, str):
            try:
                args = json.loads(arg_str)
            except json.JSONDecodeError:
                args = arg_str
        else:
            args = arg_str
        return ToolCall(id=str(tc.get("id") or ""), name=str(fn.get("name") or ""), arguments=args)


@dataclass
class ToolMessage:
    tool_call_id: str
    name: str
    content: str
    is_error: bool = False

    def to_openai(self) -> dict[str, Any]:
        return {"role": "tool", "tool_call_id": self.tool_call_id, "content": self.content}

    def to_anthropic(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": "tool_result", "tool_use_id": self.tool_call_id, "content": self.content}
        if self.is_error:
            d["is_error"] = True
        return d


# tools whose successful output is a whole file; only its length is logged
_FILE_BODY_TOOLS = frozenset({"read_file"})


def _preview(content: str, limit: int = 4000) -> str:
    return content if len(content) <= limit else content[:limit]


@dataclass
class Dispatcher:
    """Routes tool calls from the agent loop to registered tools.

    ``dispatch`` never raises: unknown tools, bad arguments and crashing
    executors all come back as error results.
    """

    registry: ToolRegistry
    ctx: ToolContext
    events: EventStore | None = None
    # resolved path -> [lock, holders + waiters]
    _path_locks: dict[Path, list[Any]] = field(default_factory=dict, repr=False)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _event(self, event_type: str, data: dict[str, Any]) -> None:
        if self.events is None:
            return
        try:
            self.events.append(event_type, data)
        except OSError:
            # the event log is best-effort; a full disk must not fail the call
            pass

    @contextmanager
    def _lock_for(self, tool: Tool, args: dict[str, Any]) -> Iterator[None]:
        key = None
        if tool.spec.mutates and isinstance(args.get("path"), str):
            try:
                key = resolve_path(self.ctx.root_path, args["path"])
            except FsError:
                key = None
        if key is None:
            yield
            return

        with self._locks_guard:
            entry = self._path_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            # drop the entry once no call holds or waits on it
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._path_locks[key]

    def dispatch(self, name: str, args: Any) -> ToolResult:
        tool = self.registry.get_optional(name)
        if tool is None:
            self._event("tool.not_found", {"tool": name})
            return ToolResult(f"Tool not found: {name}", is_error=True)

        try:
            clean = validate_args(tool.spec, args)
        except ArgumentError as e:
            self._event("tool.invalid_args", {"tool": name, "error": str(e)})
            return ToolResult(f"Invalid arguments for {name}: {e}", is_error=True)

        # file bodies stay out of the log (see also _FILE_BODY_TOOLS)
        logged = {k: v for k, v in clean.items() if k not in {"content", "old_str", "new_str"}}
        self._event("tool.call", {"tool": name, "args": logged})
        t0 = time.perf_counter()
        try:
            with self._lock_for(tool, clean):
                res = tool.execute(self.ctx, clean)
        except Exception as e:
            self._event("tool.exception", {"tool": name, "error": f"{type(e).__name__}: {e}"[:2000]})
            res = ToolResult(f"Tool {name} failed: {type(e).__name__}: {e}", is_error=True)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        rendered = res.render()
        result_event: dict[str, Any] = {
            "tool": name,
            "is_error": bool(res.is_error),
            "elapsed_ms": elapsed_ms,
            "content_len": len(rendered),
        }
        if res.is_error or name not in _FILE_BODY_TOOLS:
            result_event["content_preview"] = _preview(rendered)
        self._event("tool.result", result_event)
        return res

    def run_call(self, call: ToolCall) -> ToolMessage:
        res = self.dispatch(call.name, call.arguments)
        return ToolMessage(tool_call_id=call.id, name=call.name, content=res.render(), is_error=res.is_error)

    def dispatch_batch(self, calls: list[ToolCall], max_workers: int = 4) -> list[ToolMessage]:
        """Run one turn's tool calls on worker threads.

        Results come back in the order the calls were issued.
        """
        if len(calls) <= 1 or max_workers <= 1:
            return [self.run_call(c) for c in calls]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(self.run_call, calls))
