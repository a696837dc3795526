from __future__ import annotations

from .registry import ToolRegistry

from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.listdir import ListDirTool
from .builtin_tools.file_write import WriteFileTool
from .builtin_tools.file_edit import EditFileTool
from .builtin_tools.search_tool import SearchTool

def register_builtin_tools(registry: ToolRegistry) -> None:
    registry.register(ReadFileTool())
    registry.register(ListDirTool())
    registry.register(WriteFileTool())
    registry.register(EditFileTool())
    registry.register(SearchTool())
