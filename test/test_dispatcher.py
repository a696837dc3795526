import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from pycodeeditor.events.store import EventStore
from pycodeeditor.tools.base import ParamSpec, ToolContext, ToolResult, ToolSpec
from pycodeeditor.tools.builtin import register_builtin_tools
from pycodeeditor.tools.dispatcher import Dispatcher, ToolCall, ToolMessage
from pycodeeditor.tools.registry import ToolRegistry


@dataclass
class ExplodingTool:
    spec: ToolSpec = ToolSpec(name="explode", description="always fails")

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        raise RuntimeError("boom")



@dataclass
class ExplodingWriteTool:
    spec: ToolSpec = ToolSpec(
        name="explode_write",
        description="always fails while holding a path",
        params=(ParamSpec("path", "string", "target", required=True),),
        mutates=True,
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        raise OSError("disk on fire")


@pytest.fixture
def dispatcher(ctx: ToolContext) -> Dispatcher:
    reg = ToolRegistry()
    register_builtin_tools(reg)
    reg.register(ExplodingTool())
    reg.register(ExplodingWriteTool())
    return Dispatcher(registry=reg, ctx=ctx)


class TestDispatch:

    def test_unknown_tool_is_a_result(self, dispatcher: Dispatcher):
        res = dispatcher.dispatch("delete_everything", {})
        assert res.is_error
        assert res.content == "Tool not found: delete_everything"

    def test_missing_overwrite_is_a_validation_error(self, root: Path, dispatcher: Dispatcher):
        res = dispatcher.dispatch("write_file", {"path": "a.txt", "content": "x"})
        assert res.is_error
        assert res.content.startswith("Invalid arguments for write_file")
        assert "overwrite" in res.content
        assert not (root / "a.txt").exists()

    def test_wrong_type_never_reaches_tool(self, dispatcher: Dispatcher):
        res = dispatcher.dispatch("search_files", {"query": "x", "max_results": "10"})
        assert res.is_error
        assert "max_results" in res.content

    def test_exception_is_contained(self, dispatcher: Dispatcher):
        res = dispatcher.dispatch("explode", {})
        assert res.is_error
        assert res.content == "Tool explode failed: RuntimeError: boom"

    def test_successful_call(self, root: Path, dispatcher: Dispatcher):
        res = dispatcher.dispatch("write_file", {"path": "a.txt", "content": "x", "overwrite": False})
        assert not res.is_error
        assert (root / "a.txt").read_text(encoding="utf-8") == "x"

    @pytest.mark.parametrize(
        "name,args",
        [
            ("read_file", {"path": "../workspace/a"}),
            ("list_files", {"path": "../workspace"}),
            ("write_file", {"path": "../workspace/a", "content": "x", "overwrite": True}),
            ("edit_file", {"path": "../workspace/a", "old_str": "", "new_str": "x"}),
            ("search_files", {"query": "x", "path": "../workspace"}),
        ],
    )
    def test_every_tool_denies_escape(self, root: Path, dispatcher: Dispatcher, snapshot, name, args):
        before = snapshot(root.parent)
        res = dispatcher.dispatch(name, args)
        assert res.is_error
        assert res.content.startswith("Access denied")
        assert snapshot(root.parent) == before


class TestToolCalls:

    def test_from_openai(self):
        call = ToolCall.from_openai(
            {"id": "c1", "function": {"name": "read_file", "arguments": '{"path": "a"}'}}
        )
        assert call == ToolCall(id="c1", name="read_file", arguments={"path": "a"})

    def test_from_openai_bad_json(self, dispatcher: Dispatcher):
        call = ToolCall.from_openai({"id": "c2", "function": {"name": "read_file", "arguments": "{oops"}})
        msg = dispatcher.run_call(call)
        assert msg.is_error
        assert "JSON object" in msg.content

    def test_run_call_serializes_structures(self, root: Path, dispatcher: Dispatcher):
        (root / "only.py").write_text("", encoding="utf-8")
        msg = dispatcher.run_call(ToolCall(id="c3", name="list_files", arguments={}))
        assert msg.tool_call_id == "c3"
        assert json.loads(msg.content) == [{"name": "only.py", "type": "file"}]
        assert msg.to_openai() == {"role": "tool", "tool_call_id": "c3", "content": msg.content}

    def test_anthropic_block_flags_errors(self):
        msg = ToolMessage(tool_call_id="t", name="x", content="bad", is_error=True)
        assert msg.to_anthropic() == {"type": "tool_result", "tool_use_id": "t", "content": "bad", "is_error": True}

    def test_batch_keeps_issue_order(self, root: Path, dispatcher: Dispatcher):
        calls = [
            ToolCall(id=f"w{i}", name="write_file", arguments={"path": f"f{i}.txt", "content": str(i), "overwrite": False})
            for i in range(10)
        ]
        calls.append(ToolCall(id="missing", name="nope", arguments={}))
        msgs = dispatcher.dispatch_batch(calls, max_workers=4)
        assert [m.tool_call_id for m in msgs] == [c.id for c in calls]
        assert msgs[-1].is_error
        assert all(not m.is_error for m in msgs[:-1])

    def test_batch_edits_on_one_file_are_serialized(self, root: Path, dispatcher: Dispatcher):
        tokens = [f"<tok{i}>" for i in range(12)]
        (root / "shared.py").write_text("\n".join(tokens), encoding="utf-8")
        calls = [
            ToolCall(id=str(i), name="edit_file", arguments={"path": "shared.py", "old_str": t, "new_str": t.upper()})
            for i, t in enumerate(tokens)
        ]
        msgs = dispatcher.dispatch_batch(calls, max_workers=6)
        assert all(not m.is_error for m in msgs)
        assert (root / "shared.py").read_text(encoding="utf-8") == "\n".join(t.upper() for t in tokens)


    def test_path_locks_released_after_batch(self, root: Path, dispatcher: Dispatcher):
        (root / "a.py").write_text("one two", encoding="utf-8")
        calls = [
            ToolCall(id="1", name="edit_file", arguments={"path": "a.py", "old_str": "one", "new_str": "1"}),
            ToolCall(id="2", name="edit_file", arguments={"path": "a.py", "old_str": "missing", "new_str": "x"}),
            ToolCall(id="3", name="explode_write", arguments={"path": "a.py"}),
            ToolCall(id="4", name="write_file", arguments={"path": "b.py", "content": "", "overwrite": False}),
        ]
        msgs = dispatcher.dispatch_batch(calls, max_workers=4)
        assert [m.is_error for m in msgs] == [False, True, True, False]
        assert dispatcher._path_locks == {}


class TestEvents:

    def test_events_recorded(self, tmp_path: Path, ctx: ToolContext):
        reg = ToolRegistry()
        register_builtin_tools(reg)
        store = EventStore.open("s1", directory=tmp_path / "events")
        d = Dispatcher(registry=reg, ctx=ctx, events=store)

        d.dispatch("write_file", {"path": "a.txt", "content": "secret body", "overwrite": False})
        d.dispatch("nope", {})
        d.dispatch("read_file", {})

        types = [e.type for e in store.iter_events()]
        assert types == ["tool.call", "tool.result", "tool.not_found", "tool.invalid_args"]
        call_event = list(store.iter_events())[0]
        assert call_event.data["args"] == {"path": "a.txt", "overwrite": False}

    def test_read_body_not_logged(self, root: Path, tmp_path: Path, ctx: ToolContext):
        reg = ToolRegistry()
        register_builtin_tools(reg)
        store = EventStore.open("s2", directory=tmp_path / "events")
        d = Dispatcher(registry=reg, ctx=ctx, events=store)
        (root / "notes.txt").write_text("the body text", encoding="utf-8")

        assert not d.dispatch("read_file", {"path": "notes.txt"}).is_error
        assert d.dispatch("read_file", {"path": "gone.txt"}).is_error

        results = [e.data for e in store.iter_events() if e.type == "tool.result"]
        assert results[0]["content_len"] == len("the body text")
        assert "content_preview" not in results[0]
        assert "gone.txt" in results[1]["content_preview"]
        assert "the body text" not in store.path.read_text(encoding="utf-8")
