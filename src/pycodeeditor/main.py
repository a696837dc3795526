from __future__ import annotations

from pathlib import Path
import json
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from datetime import datetime

from .app_context import AppContext
from .events.store import EventStore
from .tools.declarations import to_anthropic_tools, to_openai_tools


app = typer.Typer(add_completion=False, help="pycodeeditor: sandboxed file tools for coding agents.")
console = Console()


def _resolve_root(root: Path | None) -> Path:
    root = Path(str(root or Path.cwd())).expanduser()
    if not root.is_absolute():
        root = (Path.cwd() / root).resolve()
    else:
        root = root.resolve()
    if not root.is_dir():
        raise typer.BadParameter(f"--root must be an existing directory, got: {root}")
    return root


@app.command()
def tools(
    root: Path = typer.Option(None, "--root", help="Sandbox root. Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Optional tools config (JSON or YAML)."),
    fmt: str = typer.Option("table", "--format", help="table | openai | anthropic"),
):
    """List the registered tools and their parameters."""
    ctx = AppContext.from_env(_resolve_root(root), config_path=config, event_log=False)
    if fmt == "openai":
        typer.echo(json.dumps(to_openai_tools(ctx.tools), ensure_ascii=False, indent=2))
        return
    if fmt == "anthropic":
        typer.echo(json.dumps(to_anthropic_tools(ctx.tools), ensure_ascii=False, indent=2))
        return
    if fmt != "table":
        raise typer.BadParameter(f"--format must be table, openai or anthropic, got: {fmt}")

    table = Table(title="Tools")
    table.add_column("name", style="bold", no_wrap=True)
    table.add_column("parameters")
    table.add_column("description")
    for spec in ctx.tools.list_specs():
        params = ", ".join(
            f"{p.name}: {p.type}{'' if p.required else '?'}" for p in spec.params
        )
        table.add_row(spec.name, params, spec.description)
    console.print(table)


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name, e.g. read_file."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object."),
    root: Path = typer.Option(None, "--root", help="Sandbox root. Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Optional tools config (JSON or YAML)."),
    session: str = typer.Option(None, "--session", help="Session id for the event log (default creates new)."),
    no_events: bool = typer.Option(False, "--no-events", help="Do not record events for this call."),
    raw: bool = typer.Option(False, "--raw", help="Print the result without decoration."),
):
    """Dispatch a single tool call and print its result."""
    try:
        parsed = json.loads(args)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--args is not valid JSON: {e}")

    ctx = AppContext.from_env(
        _resolve_root(root),
        session_id=session,
        config_path=config,
        event_log=False if no_events else None,
    )
    res = ctx.dispatcher.dispatch(name, parsed)
    text = res.render() if isinstance(res.content, str) else json.dumps(res.content, ensure_ascii=False, indent=2)
    if raw:
        typer.echo(text)
    else:
        console.print(
            Panel(
                text,
                title=f"{name} ({'error' if res.is_error else 'ok'})",
                border_style="red" if res.is_error else "green",
            )
        )
    if res.is_error:
        raise typer.Exit(code=1)


@app.command()
def events(
    session: str = typer.Option(..., "--session", help="Session id to inspect events."),
    tail: int = typer.Option(200, "--tail", help="Show last N events."),
    events_dir: Path = typer.Option(None, "--events-dir", help="Read events from this directory instead of the data dir."),
):
    """Show recent structured events (tool calls and results) recorded for a session."""
    es = EventStore.open(session, directory=events_dir)
    evs = list(es.iter_events())
    evs = evs[-tail:] if tail and tail > 0 else evs
    console.print(Panel.fit(f"session: {session}\nfile: {es.path}\nevents: {len(evs)}", title="Events"))
    for e in evs:
        ts = datetime.fromtimestamp(e.ts).strftime("%Y-%m-%d %H:%M:%S")
        console.print(Panel.fit(json.dumps(e.data, ensure_ascii=False, indent=2)[:4000], title=f"{ts}  {e.type}"))


@app.command()
def stats(
    session: str = typer.Option(..., "--session", help="Session id to summarize."),
    events_dir: Path = typer.Option(None, "--events-dir", help="Read events from this directory instead of the data dir."),
):
    """Show a compact summary for a session (latency, errors, tool usage)."""
    es = EventStore.open(session, directory=events_dir)
    evs = list(es.iter_events())

    tool_call = [e for e in evs if e.type == "tool.call"]
    tool_res = [e for e in evs if e.type == "tool.result"]
    rejected = [e for e in evs if e.type in {"tool.not_found", "tool.invalid_args", "tool.exception"}]
    errors = [e for e in tool_res if (e.data or {}).get("is_error")]

    vals = []
    for e in tool_res:
        ms = (e.data or {}).get("elapsed_ms")
        if isinstance(ms, (int, float)) and ms >= 0:
            vals.append(float(ms))
    tool_avg = (sum(vals) / len(vals)) if vals else None

    freq: dict[str, int] = {}
    for e in tool_call:
        t = (e.data or {}).get("tool")
        if not t:
            continue
        freq[t] = freq.get(t, 0) + 1
    top_tools = sorted(freq.items(), key=lambda x: x[1], reverse=True)[:12]

    lines = []
    lines.append(f"session: {session}")
    lines.append(f"events_file: {es.path}")
    lines.append(f"tool_calls: {len(tool_call)}  tool_results: {len(tool_res)}  tool_errors: {len(errors)}  rejected: {len(rejected)}")
    if tool_avg is not None:
        lines.append(f"tool_avg_latency_ms: {tool_avg:.1f}")
    if top_tools:
        lines.append("top_tools:")
        for name, c in top_tools:
            lines.append(f"  - {name}: {c}")

    console.print(Panel.fit("\n".join(lines), title="Stats"))


if __name__ == "__main__":
    app()
