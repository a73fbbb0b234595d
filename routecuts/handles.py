"""Shrinking of a fractional support graph and generation of comb handles."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Any, Optional

import networkx as nx

from routecuts.components import strong_components
from routecuts.sorting import sort_indices

_ONE_LOW, _ONE_HIGH = 0.99, 1.01
_TWO_LOW, _TWO_HIGH = 1.99, 2.01
_POSITIVE = 0.001


@dataclass
class ShrunkGraph:
    """Super-node graph obtained by shrinking a support graph.

    Components are numbered from 1. Component ``c`` holds the nodes
    ``components[c - 1]``; the component holding the depot is the last one.
    ``s_matrix[a][b]`` is the total x-value between components ``a`` and
    ``b`` (the diagonal holds the x-value inside a component).
    """

    components: tuple[tuple[int, ...], ...]
    component_of: dict[int, int]
    demand: dict[int, int]
    boundary: dict[int, float]
    s_matrix: dict[int, dict[int, float]]

    @property
    def component_count(self) -> int:
        return len(self.components)

    @property
    def depot_component(self) -> int:
        return len(self.components)


def _label(
    components: list[list[int]], customer_count: int, demand: Any
) -> tuple[dict[int, int], dict[int, int], int]:
    component_of: dict[int, int] = {}
    comp_demand: dict[int, int] = {}
    depot_comp = 0
    for number, members in enumerate(components, start=1):
        comp_demand[number] = 0
        for node in members:
            component_of[node] = number
            if node > customer_count:
                depot_comp = number
            else:
                comp_demand[number] += demand[node]
    return component_of, comp_demand, depot_comp


def _weights(
    support: Any, customer_count: int, x: Any, component_of: dict[int, int], count: int
) -> tuple[dict[int, dict[int, float]], dict[int, float]]:
    s_matrix = {a: {b: 0.0 for b in range(1, count + 1)} for a in range(1, count + 1)}
    boundary = {c: 0.0 for c in range(1, count + 1)}
    for node in range(1, customer_count + 1):
        for other in support[node]:
            if other <= node:
                continue
            value = x[node][other]
            a, b = component_of[node], component_of[other]
            s_matrix[a][b] += value
            if a != b:
                s_matrix[b][a] += value
                boundary[a] += value
                boundary[b] += value
    return s_matrix, boundary


def _near(value: float, low: float, high: float) -> bool:
    return low <= value <= high


def _find_merge(
    s_matrix: dict[int, dict[int, float]],
    comp_demand: dict[int, int],
    depot_comp: int,
    qmin: int,
    use_depot_match: bool,
) -> Optional[list[tuple[int, int]]]:
    """Component pairs to link, or None when nothing can be shrunk."""
    count = len(s_matrix)
    customers = [c for c in range(1, count + 1) if c != depot_comp]

    def allowed(k: int, group: tuple[int, ...]) -> bool:
        if k != depot_comp:
            return True
        return bool(use_depot_match) and sum(comp_demand[c] for c in group) < qmin

    def one_edge_exists(group: tuple[int, ...]) -> bool:
        for k in range(1, count + 1):
            if k in group:
                continue
            edge_sum = sum(s_matrix[c][k] for c in group)
            if _near(edge_sum, _ONE_LOW, _ONE_HIGH) and allowed(k, group):
                return True
        return False

    for ci, cj in combinations(customers, 2):
        if not _near(s_matrix[ci][cj], _ONE_LOW, _ONE_HIGH):
            continue
        if one_edge_exists((ci, cj)):
            return [(ci, cj)]

    for ci, cj, ck in combinations(customers, 3):
        if (
            s_matrix[ci][cj] < _POSITIVE
            or s_matrix[ci][ck] < _POSITIVE
            or s_matrix[cj][ck] < _POSITIVE
        ):
            continue
        inside = s_matrix[ci][cj] + s_matrix[ci][ck] + s_matrix[cj][ck]
        if not _near(inside, _TWO_LOW, _TWO_HIGH):
            continue
        if one_edge_exists((ci, cj, ck)):
            return [(ci, cj), (ci, ck)]

    return None


def shrink(
    support: Any,
    customer_count: int,
    demand: Any,
    qmin: int,
    use_depot_match: bool,
    x: Any,
) -> ShrunkGraph:
    """Repeatedly shrink pairs and triplets of customer components whose
    total inside x-value and one-edge to a further component make them
    safe to contract.

    ``support[v]`` lists the neighbours of node ``v`` for ``v`` in
    ``1..customer_count + 1`` (the last node is the depot), ``x[i][j]``
    is the edge value and ``demand[i]`` the demand of customer ``i``.
    """
    depot = customer_count + 1
    links: dict[int, list[int]] = {node: [] for node in range(1, depot + 1)}

    while True:
        components = strong_components(links, depot)
        component_of, comp_demand, depot_comp = _label(components, customer_count, demand)
        s_matrix, _ = _weights(support, customer_count, x, component_of, len(components))
        merge = _find_merge(s_matrix, comp_demand, depot_comp, qmin, use_depot_match)
        if merge is None:
            break
        for a, b in merge:
            first, second = components[a - 1][0], components[b - 1][0]
            links[first].append(second)
            links[second].append(first)

    ordered = [
        tuple(members)
        for number, members in enumerate(components, start=1)
        if number != depot_comp
    ]
    ordered.append(tuple(components[depot_comp - 1]))

    component_of, comp_demand, _ = _label(
        [list(members) for members in ordered], customer_count, demand
    )
    s_matrix, boundary = _weights(support, customer_count, x, component_of, len(ordered))
    return ShrunkGraph(
        components=tuple(ordered),
        component_of=component_of,
        demand=comp_demand,
        boundary=boundary,
        s_matrix=s_matrix,
    )


def generate_handles(
    support: Any, customer_count: int, x: Any, max_handles: int
) -> list[tuple[int, ...]]:
    """Candidate comb handles from a greedy edge ordering.

    Customer edges are taken in increasing order of ``|x - 0.5|``. Every
    merge of two connected components yielding at least three nodes gives
    a handle; afterwards, every edge closing a block of more than two nodes
    gives that block as a handle unless the same node set was found before.
    At most ``max_handles`` handles are returned.
    """
    edges: list[tuple[int, int]] = [
        (node, other)
        for node in range(1, customer_count)
        for other in support[node]
        if node < other <= customer_count
    ]
    closeness = {
        number: abs(x[tail][head] - 0.5)
        for number, (tail, head) in enumerate(edges)
    }
    order = [edges[number] for number in sort_indices(range(len(edges)), closeness)]

    handles: list[tuple[int, ...]] = []

    component = {node: node for node in range(1, customer_count + 1)}
    for tail, head in order:
        if len(handles) >= max_handles:
            break
        tail_comp, head_comp = component[tail], component[head]
        if tail_comp == head_comp:
            continue
        members = []
        for node in range(1, customer_count + 1):
            if component[node] in (tail_comp, head_comp):
                component[node] = head_comp
                members.append(node)
        if len(members) >= 3:
            handles.append(tuple(members))

    known = {frozenset(handle) for handle in handles}
    graph = nx.Graph()
    graph.add_nodes_from(range(1, customer_count + 1))
    for tail, head in order:
        if len(handles) >= max_handles:
            break
        graph.add_edge(tail, head)
        for block in nx.biconnected_components(graph):
            if len(block) <= 2 or tail not in block or head not in block:
                continue
            key = frozenset(block)
            if key not in known:
                known.add(key)
                handles.append(tuple(sorted(block)))
            break

    return handles