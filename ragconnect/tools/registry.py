"""
Tool registry used by agents to resolve tool calls by name.
"""

from typing import Dict, Iterable, List, Optional

from ..utils.logging import log_event
from .base import BaseTool
from .exceptions import ToolNotFoundError


class ToolRegistry:
    """Registry for managing agent tools."""

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None):
        self.tools: Dict[str, BaseTool] = {}
        for tool in tools or []:
            self.register_tool(tool)

    def register_tool(self, tool: BaseTool):
        """Register a single tool, replacing any tool with the same name."""
        if tool.name in self.tools:
            log_event("tool_replaced", {"tool_name": tool.name})
        self.tools[tool.name] = tool

    def get_tool(self, name: str) -> BaseTool:
        """Get a tool by name."""
        tool = self.tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool '{name}' not found")
        return tool

    def list_tools(self) -> List[BaseTool]:
        return list(self.tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self.tools

    def __len__(self) -> int:
        return len(self.tools)
