"""ToolRegistry — name-keyed store of tool instances."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qbit_mcp.tools.base import McpTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Holds :class:`McpTool` instances keyed by ``tool.name``.

    Registration is last-write-wins: registering a tool whose name is already
    taken replaces the previous instance and logs a warning.
    """

    def __init__(self) -> None:
        self._tools: dict[str, McpTool] = {}

    def register(self, tool: McpTool) -> None:
        """Add *tool*, replacing any tool already registered under its name."""
        if tool.name in self._tools:
            logger.warning("Overwriting tool: %s", tool.name)
        logger.info("Registering tool: %s", tool.name)
        self._tools[tool.name] = tool

    def get(self, name: str) -> McpTool | None:
        return self._tools.get(name)

    def all(self) -> list[McpTool]:
        """Return all registered tools in registration order."""
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
