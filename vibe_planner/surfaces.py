"""Interfaces of the externally rendered surfaces the core talks to."""
from __future__ import annotations

from typing import Protocol


class ChatSurface(Protocol):
    """The conversational widget, as seen from the other surfaces."""

    @property
    def input_value(self) -> str:
        ...

    def submit_query(self, query: str) -> None:
        ...
