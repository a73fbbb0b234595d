"""Quicksort routines for plain values and for index lists keyed by values.

The partitioning scheme is not stable; ties come out in the order the
scheme leaves them, which callers relying on a reproducible order of
equal keys depend on.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar, Union

T = TypeVar("T")


def _quicksort(items: list[T], key: Callable[[T], Any], descending: bool) -> None:
    """Sort ``items`` in place with an explicit-stack quicksort."""
    if len(items) < 2:
        return

    if descending:
        stays_right, stays_left = operator.le, operator.ge
    else:
        stays_right, stays_left = operator.ge, operator.le

    stack = [(0, len(items) - 1)]
    while stack:
        left, right = stack.pop()
        while left < right:
            i, j = left, right
            pivot = key(items[left])
            while i != j:
                while j > i and stays_right(key(items[j]), pivot):
                    j -= 1
                if j > i:
                    items[i], items[j] = items[j], items[i]
                    i += 1
                while j > i and stays_left(key(items[i]), pivot):
                    i += 1
                if j > i:
                    items[i], items[j] = items[j], items[i]
                    j -= 1

            if i > left:
                i -= 1
            if j < right:
                j += 1

            if i - left > right - j:
                if left < i:
                    stack.append((left, i))
                left = j
            else:
                if j < right:
                    stack.append((j, right))
                right = i


def sort_values(values: Iterable[T], descending: bool = False) -> list[T]:
    """Return the values in increasing (or decreasing) order."""
    items = list(values)
    _quicksort(items, lambda value: value, descending)
    return items


def sort_indices(
    indices: Iterable[Any],
    values: Union[Sequence[Any], Mapping[Any, Any]],
    descending: bool = False,
) -> list[Any]:
    """Return ``indices`` ordered so that ``values[result[k]]`` is the k'th
    smallest (or largest, when ``descending``) value."""
    items = list(indices)
    _quicksort(items, values.__getitem__, descending)
    return items