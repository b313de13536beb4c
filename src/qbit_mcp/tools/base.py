"""McpTool protocol — the contract every tool satisfies.

Tools are independent classes, not a hierarchy: anything exposing a stable
``name``, a ``description``, a pydantic ``input_schema`` and an async
``execute`` can be registered.  Backend dependencies are handed to each tool
through its constructor.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class McpTool(Protocol):
    """A named, independently invocable unit of backend-calling logic."""

    @property
    def name(self) -> str:
        """Unique tool identifier, e.g. ``qbit/getTorrents``."""
        ...

    @property
    def description(self) -> str:
        """Human-readable summary shown to clients."""
        ...

    @property
    def input_schema(self) -> type[BaseModel]:
        """Model that validates the raw ``arguments`` object."""
        ...

    async def execute(self, args: Any) -> Any:
        """Run the tool with an instance of :attr:`input_schema`.

        Returns any JSON-serialisable value.
        """
        ...
