"""Result type for batch operations that continue past per-repository failures.

Every batch stage walks a fixed list of repositories and keeps going when a
single repository fails. An Outcome makes that explicit: ``failures`` is empty
for a clean run, otherwise it holds one message per failed item and ``value``
holds whatever was gathered from the items that did succeed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    value: T
    failures: list[str] = field(default_factory=list)
    summary: str = ""

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def partial(self) -> bool:
        """True when something failed but there is still data to carry forward."""
        return bool(self.failures) and bool(self.value)

    def error_message(self) -> str:
        return self.summary or "; ".join(self.failures)
