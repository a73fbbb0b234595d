"""Exact separation of two-matching inequalities by odd minimum cuts."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import networkx as nx

_SCALE = 1000.0
_MAX_CAPACITY = 1000


class CutKind(enum.Enum):
    """The family a comb-type inequality belongs to."""

    TWO_MATCHING = "two_matching"
    STRENGTHENED_COMB = "strengthened_comb"


@dataclass(frozen=True)
class CombCut:
    """A handle, its teeth and the right-hand side of a comb-type cut."""

    kind: CutKind
    handle: tuple[int, ...]
    teeth: tuple[tuple[int, ...], ...]
    rhs: float


def two_matching_violation(
    support: Any,
    customer_count: int,
    x: Any,
    handle: Iterable[int],
    teeth: Iterable[Sequence[int]],
) -> float:
    """Violation of a two-matching inequality whose teeth are edge pairs."""
    in_handle = set(handle)
    other_boundary = 0.0
    for node in range(1, customer_count + 1):
        if node not in in_handle:
            continue
        for other in support[node]:
            if other not in in_handle:
                other_boundary += x[node][other]

    tooth_sum = 0.0
    tooth_count = 0
    for tail, head in teeth:
        tooth_count += 1
        tooth_sum += x[tail][head]
        other_boundary -= x[tail][head]

    return tooth_sum - other_boundary - tooth_count + 1.0


def cut_node_set(children: Mapping[int, Sequence[int]], source: int) -> list[int]:
    """Nodes of the subtree rooted at ``source``, in breadth-first order."""
    nodes = [source]
    for node in nodes:
        nodes.extend(children.get(node, ()))
    return nodes


def handle_is_connected(support: Any, customer_count: int, handle: Sequence[int]) -> bool:
    """Whether the customers of ``handle`` induce a connected subgraph."""
    if not handle:
        raise ValueError("a handle needs at least one node")
    members = set(handle)
    start = handle[0]
    reached = {start}
    order = [start]
    for node in order:
        for other in support[node]:
            if other <= customer_count and other in members and other not in reached:
                reached.add(other)
                order.append(other)
    return len(order) == len(handle)


def exact_two_matchings(
    support: Any, customer_count: int, depot_edge_bound: Any, x: Any
) -> list[CombCut]:
    """Find violated two-matching inequalities from a Gomory-Hu cut tree.

    Every customer edge, and every depot edge of a customer whose depot
    edge bound is 1, is split by a new node. Odd cuts of the resulting
    flow network yield handles; the split edges crossing them yield teeth.
    """
    depot = customer_count + 1

    split_edges: list[tuple[int, int]] = [
        (node, other)
        for node in range(1, customer_count + 1)
        for other in support[node]
        if (node < other <= customer_count)
        or (other == depot and depot_edge_bound[node] == 1)
    ]
    endpoints = {depot + idx: edge for idx, edge in enumerate(split_edges, start=1)}
    total = depot + len(split_edges)

    odd = {node: False for node in range(1, depot + 1)}
    for new_node, (tail, _head) in endpoints.items():
        odd[new_node] = True
        odd[tail] = not odd[tail]

    network = nx.Graph()
    network.add_nodes_from(range(1, total + 1))
    for new_node, (tail, head) in endpoints.items():
        capacity = min(max(int(x[tail][head] * _SCALE), 0), _MAX_CAPACITY)
        if capacity < _MAX_CAPACITY:
            network.add_edge(tail, new_node, capacity=_MAX_CAPACITY - capacity)
        if capacity > 0:
            network.add_edge(head, new_node, capacity=capacity)

    for customer in support[depot]:
        if depot_edge_bound[customer] == 1:
            continue
        capacity = int(x[depot][customer] * _SCALE)
        if capacity > 0:
            network.add_edge(depot, customer, capacity=capacity)

    tree = nx.gomory_hu_tree(network, capacity="capacity")
    parent = dict(nx.bfs_predecessors(tree, depot))
    children: dict[int, list[int]] = {}
    for node in range(1, total + 1):
        if node != depot:
            children.setdefault(parent[node], []).append(node)

    cuts: list[CombCut] = []
    for source in range(1, total + 1):
        if source == depot:
            continue
        nodes = cut_node_set(children, source)
        side = set(nodes)

        handle = [node for node in nodes if node <= customer_count]
        odd_cut = sum(1 for node in nodes if odd[node]) % 2 == 1
        if not odd_cut or len(handle) < 3:
            continue
        if not handle_is_connected(support, customer_count, handle):
            continue

        in_tooth: set[int] = set()
        teeth: list[tuple[int, int]] = []
        for new_node in range(depot + 1, total + 1):
            tail, head = endpoints[new_node]
            tail_side = tail in side
            if tail_side != (new_node in side) and tail_side != (head in side):
                if tail not in in_tooth and head not in in_tooth:
                    teeth.append((tail, head))
                    if tail <= customer_count:
                        in_tooth.add(tail)
                    if head <= customer_count:
                        in_tooth.add(head)

        if len(teeth) >= 3 and len(teeth) % 2 == 1:
            rhs = len(handle) + (len(teeth) - 1) // 2
            cuts.append(
                CombCut(
                    kind=CutKind.TWO_MATCHING,
                    handle=tuple(handle),
                    teeth=tuple(teeth),
                    rhs=float(rhs),
                )
            )
    return cuts