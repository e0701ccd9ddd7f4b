"""Port: single-turn LLM completion."""

from __future__ import annotations

from typing import Protocol


class CompletionClient(Protocol):
    """Stateless prompt-in, text-out completion. No conversation memory."""

    async def complete(self, prompt: str) -> str:
        """Raise NetworkError or MalformedResponseError on failure. Never retries."""
        ...

    def check_connectivity(self) -> tuple[bool, str]:
        """Pre-flight connectivity check. Returns (ok, error_message)."""
        ...
