from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config.loader import load_tools_config
from .config.models import ToolsConfig
from .events.store import EventStore, new_session_id
from .tools.base import ToolContext
from .tools.builtin import register_builtin_tools
from .tools.dispatcher import Dispatcher
from .tools.registry import ToolRegistry


@dataclass
class AppContext:
    root: Path
    config: ToolsConfig
    tools: ToolRegistry
    dispatcher: Dispatcher
    session_id: str
    events: EventStore | None = None
    config_path: Optional[Path] = None

    @staticmethod
    def from_env(
        root: Path,
        session_id: str | None = None,
        config_path: Optional[Path] = None,
        event_log: bool | None = None,
        events_dir: Path | None = None,
    ) -> "AppContext":
        root = Path(root).expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"Sandbox root must be an existing directory: {root}")

        if config_path:
            config_path = config_path.expanduser().resolve()
        config = load_tools_config(cwd=root, explicit_path=config_path)

        tools = ToolRegistry()
        register_builtin_tools(tools)

        sid = session_id or new_session_id()
        use_events = config.event_log if event_log is None else event_log
        events = EventStore.open(sid, directory=events_dir) if use_events else None

        dispatcher = Dispatcher(
            registry=tools,
            ctx=ToolContext(root=str(root), config=config),
            events=events,
        )
        return AppContext(
            root=root,
            config=config,
            tools=tools,
            dispatcher=dispatcher,
            session_id=sid,
            events=events,
            config_path=config.loaded_from,
        )
