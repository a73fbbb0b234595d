"""A bounded collection of the cheapest distinct solutions seen so far."""

from __future__ import annotations

from typing import Any, Protocol


class _Ranked(Protocol):
    @property
    def last_cost(self) -> float: ...

    def copy(self) -> "_Ranked": ...


class _Listener(Protocol):
    def increase(self, solution: Any) -> None: ...

    def decrease(self, solution: Any) -> None: ...


class BestSolutionList:
    """Keeps copies of up to ``max_count`` solutions ordered by cost.

    Solutions must expose ``last_cost`` and ``copy()``. Listeners are told
    through ``increase`` and ``decrease`` about solutions entering and
    leaving the collection.
    """

    def __init__(self, problem: Any, max_count: int) -> None:
        self.problem = problem
        self._max_count = max_count
        self._solutions: list[_Ranked] = []
        self._listeners: list[_Listener] = []

    @property
    def max_count(self) -> int:
        return self._max_count

    def add_listener(self, listener: _Listener) -> None:
        self._listeners.append(listener)

    def add(self, solution: _Ranked) -> bool:
        """Offer a solution; return True when a copy of it was stored.

        When the collection is full, the last kept solution is evicted if
        it costs more. Solutions with a cost already present are refused.
        """
        cost = solution.last_cost
        if len(self._solutions) >= self._max_count:
            if not self._solutions:
                return False
            worst = self._solutions[-1]
            if worst.last_cost <= cost:
                return False
            self._solutions.pop()
            for listener in self._listeners:
                listener.decrease(worst)

        for listener in self._listeners:
            listener.increase(solution)

        for position, kept in enumerate(self._solutions):
            kept_cost = kept.last_cost
            if cost == kept_cost:
                return False
            if cost < kept_cost:
                self._solutions.insert(position, solution.copy())
                return True
        self._solutions.append(solution.copy())
        return True

    def merge(self, other: "BestSolutionList") -> None:
        """Take over every solution of ``other``, appended at the end."""
        self._max_count += other._max_count
        self._solutions.extend(other._solutions)
        other._solutions.clear()

    def resize(self, size: int) -> None:
        if size < len(self._solutions):
            raise ValueError(
                "cannot resize this list to a smaller size: "
                f"current size {len(self._solutions)}, new size {size}"
            )
        self._max_count = size

    def solution(self, position: int) -> _Ranked:
        """Return the kept solution at a zero-based position."""
        if not 0 <= position < len(self._solutions):
            raise IndexError(f"no solution at position {position}")
        return self._solutions[position]

    def solutions(self) -> list[_Ranked]:
        return list(self._solutions)

    def summary(self) -> str:
        lines = [f"List of best solutions count:{len(self._solutions)}"]
        lines.extend(
            f"i:{i} cost:{kept.last_cost:.3f}"
            for i, kept in enumerate(self._solutions)
        )
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._solutions)