"""Reconnect delay policy for the stream consumer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconnectPolicy:
    """Exponential backoff capped at ``max_delay`` and ``max_attempts``."""

    base_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 5

    def __post_init__(self) -> None:
        if self.base_delay <= 0 or self.max_delay <= 0:
            raise ValueError("Reconnect delays must be positive")
        if self.max_attempts < 0:
            raise ValueError("max_attempts cannot be negative")

    def delay_for(self, attempt: int) -> float:
        """Return the delay before reconnect number ``attempt`` (0-based)."""

        if attempt < 0:
            raise ValueError("attempt cannot be negative")
        # Clamp the exponent so long-running loops never build huge floats.
        return min(self.base_delay * 2 ** min(attempt, 64), self.max_delay)

    def can_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts


__all__ = ["ReconnectPolicy"]
