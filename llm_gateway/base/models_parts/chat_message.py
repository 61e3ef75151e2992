"""
Chat message record consumed by the dispatcher.

Defines the immutable `ChatMessage` dataclass and the `Role` literal. The
gateway only ever reads a message list and translates it into a provider
wire shape; list order is conversation order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Role = Literal["system", "user", "assistant"]

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    """A role-tagged text message.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: Non-empty text.

    Raises:
        ValueError: On an unknown role or empty content.
    """

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"unknown message role: {self.role!r}")
        if not isinstance(self.content, str) or not self.content.strip():
            raise ValueError("message content must be a non-empty string")


__all__ = ["ChatMessage", "Role", "ROLES"]
