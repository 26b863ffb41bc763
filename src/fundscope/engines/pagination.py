from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

INITIAL_DISPLAY_LIMIT = 500
LOAD_MORE_STEP = 200


@dataclass
class DisplayWindow:
    """Display-limit controller for incremental "load more" rendering."""

    total: int
    display_limit: int = INITIAL_DISPLAY_LIMIT
    step: int = LOAD_MORE_STEP

    def __post_init__(self) -> None:
        if self.display_limit < 0 or self.step <= 0:
            raise ValueError("display_limit must be >= 0 and step must be > 0")
        self.total = max(0, int(self.total))

    @property
    def has_more(self) -> bool:
        return self.display_limit < self.total

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.display_limit)

    @property
    def shown(self) -> int:
        return min(self.display_limit, self.total)

    def displayed(self, funds: Sequence[T]) -> list[T]:
        return list(funds[: self.display_limit])

    def load_more(self) -> int:
        """Grow the limit by ``step``, capped at ``total``; a no-op once everything is shown."""
        if self.has_more:
            self.display_limit = min(self.display_limit + self.step, self.total)
        return self.display_limit

    def set_total(self, total: int) -> None:
        self.total = max(0, int(total))
