"""Strongly connected components of a directed graph on nodes 1..n."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any


def strong_components(adjacency: Any, node_count: int) -> list[list[int]]:
    """Return the strongly connected components of a directed graph.

    ``adjacency[v]`` gives the successors of node ``v`` for every node
    ``v`` in ``1..node_count``. Components are listed in the order the
    depth-first search closes them, so a component is listed before any
    component that has an arc into it. Within a component, nodes are
    listed in the order they leave the search stack.
    """
    number = [0] * (node_count + 1)
    lowlink = [0] * (node_count + 1)
    on_stack = [False] * (node_count + 1)
    stack: list[int] = []
    components: list[list[int]] = []
    counter = 0

    def visit(node: int) -> Iterator[int]:
        nonlocal counter
        counter += 1
        number[node] = counter
        lowlink[node] = counter
        stack.append(node)
        on_stack[node] = True
        successors: Iterable[int] = adjacency[node]
        return iter(successors)

    for root in range(1, node_count + 1):
        if number[root]:
            continue
        work: list[tuple[int, Iterator[int]]] = [(root, visit(root))]
        while work:
            node, successors = work[-1]
            for succ in successors:
                if number[succ] == 0:
                    work.append((succ, visit(succ)))
                    break
                if number[succ] < number[node] and on_stack[succ]:
                    lowlink[node] = min(lowlink[node], number[succ])
            else:
                work.pop()
                if lowlink[node] == number[node]:
                    component: list[int] = []
                    while stack and number[stack[-1]] >= number[node]:
                        member = stack.pop()
                        on_stack[member] = False
                        component.append(member)
                    components.append(component)
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

    return components


def _as_sequence(items: Iterable[int]) -> Sequence[int]:
    return list(items)