"""Chat message entity -- typed replacement for dict[str, Any]."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """A single message in a completion request."""

    role: Literal['system', 'user', 'assistant']
    content: str
