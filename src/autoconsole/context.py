from __future__ import annotations

from typing import Any, Iterator, List

from .types import ContextStackError


class ContextStack:
    """Objects the user has navigated into; the last one is the current context."""

    def __init__(self, base: Any):
        self._items: List[Any] = [base]

    @property
    def current(self) -> Any:
        return self._items[-1]

    @property
    def base(self) -> Any:
        return self._items[0]

    def push(self, value: Any) -> None:
        self._items.append(value)

    def pop(self) -> Any:
        """Drop the current context and return it; the base context is never popped."""
        if len(self._items) == 1:
            raise ContextStackError("Already at the base context")

        return self._items.pop()

    def reset(self) -> None:
        del self._items[1:]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def path(self) -> str:
        return "/".join(type(item).__name__ for item in self._items)

    def __repr__(self) -> str:
        return f"<ContextStack {self.path()}>"
