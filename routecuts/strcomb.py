"""Separation of strengthened comb inequalities for capacitated routing.

The support graph has customers ``1..customer_count`` and the depot as
node ``customer_count + 1``. It is first shrunk into super-nodes. Handles
come from a greedy edge ordering or, when that yields no cut, from exact
two-matching separation. Each tooth is grown greedily, and the comb found
is checked again on the original graph.
"""

from __future__ import annotations

from typing import Any, Optional

from routecuts.handles import ShrunkGraph, generate_handles, shrink
from routecuts.sorting import sort_indices
from routecuts.teeth import boundary_lhs, comb_rhs, expand_tooth_two_ways
from routecuts.twomatch import CombCut, CutKind, exact_two_matchings

_ADJACENCY_THRESHOLD = 0.01
_VIOLATION_MARGIN = 0.99


def _min_vehicles(total_demand: int, capacity: int) -> int:
    if total_demand <= 0:
        return 0
    return -(-total_demand // capacity)


class _CombSearch:
    """Evaluates candidate handles on a shrunk graph."""

    def __init__(
        self,
        support: Any,
        customer_count: int,
        capacity: int,
        demand: Any,
        x: Any,
        shrunk: ShrunkGraph,
    ) -> None:
        self.support = support
        self.customer_count = customer_count
        self.capacity = capacity
        self.demand = demand
        self.x = x
        self.shrunk = shrunk
        self.super_count = shrunk.component_count - 1
        s_matrix = shrunk.s_matrix
        count = shrunk.component_count
        self.adjacency = {
            node: [
                other
                for other in range(1, count + 1)
                if other != node and s_matrix[node][other] >= _ADJACENCY_THRESHOLD
            ]
            for node in range(1, count + 1)
        }

    def tooth_edges(self, qmin: int, use_depot_match: bool) -> list[tuple[int, int, float]]:
        """Super-node edges usable as teeth, by decreasing x-value."""
        demand = self.shrunk.demand
        edges: list[tuple[int, int, float]] = []
        for node in range(1, self.super_count + 1):
            for other in self.adjacency[node]:
                if other < node:
                    continue
                if other > self.super_count:
                    if demand[node] >= qmin or not use_depot_match:
                        continue
                elif demand[node] + demand[other] > self.capacity:
                    continue
                edges.append((node, other, self.shrunk.s_matrix[node][other]))
        values = {number: edge[2] for number, edge in enumerate(edges)}
        order = sort_indices(range(len(edges)), values, descending=True)
        return [edges[number] for number in order]

    def handle_boundary(self, in_handle: set[int]) -> float:
        s_matrix = self.shrunk.s_matrix
        return sum(
            s_matrix[node][other]
            for node in in_handle
            for other in self.adjacency[node]
            if other not in in_handle
        )

    @staticmethod
    def greedy_teeth(
        edges: list[tuple[int, int, float]], in_handle: set[int]
    ) -> list[tuple[int, int]]:
        """An odd number of handle-crossing edges, heaviest first."""
        chosen: list[tuple[int, int]] = []
        sums = [0.0]
        for tail, head, value in edges:
            if len(chosen) >= 3 and len(chosen) % 2 == 1 and value <= 0.5:
                break
            if (tail in in_handle) == (head in in_handle):
                continue
            chosen.append((tail, head))
            sums.append(sums[-1] + value)
            size = len(chosen)
            if size > 3 and size % 2 == 1 and sums[size] <= sums[size - 2] + 1.0:
                del chosen[-2:]
                break
        if len(chosen) > 3 and len(chosen) % 2 == 0:
            chosen.pop()
        return chosen

    def _expand(self, super_nodes: Any) -> tuple[int, ...]:
        components = self.shrunk.components
        return tuple(node for comp in super_nodes for node in components[comp - 1])

    def evaluate(
        self, handle: tuple[int, ...], tooth_pairs: list[tuple[int, int]]
    ) -> Optional[tuple[CombCut, float]]:
        """Grow the teeth for ``handle`` and return a violated comb, if any."""
        in_handle = set(handle)
        boundary = self.handle_boundary(in_handle)
        count = len(tooth_pairs)
        if count < 3 or boundary >= count + 1.0:
            return None

        teeth = [list(pair) for pair in tooth_pairs]
        lhs_sum = 0.0
        rhs_sum = 0
        surplus = 0.0
        for index in range(count):
            result = expand_tooth_two_ways(
                self.adjacency,
                self.super_count,
                index,
                self.shrunk.demand,
                self.capacity,
                self.shrunk.boundary,
                in_handle,
                teeth,
                self.shrunk.s_matrix,
            )
            teeth[index] = list(result.nodes)
            lhs_sum += result.lhs
            rhs_sum += result.rhs
            surplus += result.rhs - result.lhs
            if surplus + (count - index - 1) <= boundary - 1.0:
                return None

        if rhs_sum % 2 == 0:
            return None
        lhs_sum += boundary
        if lhs_sum >= rhs_sum + _VIOLATION_MARGIN:
            return None

        original_handle = self._expand(handle)
        original_teeth = tuple(self._expand(tooth) for tooth in teeth)
        lhs = boundary_lhs(
            self.support, self.customer_count, self.x, original_handle, original_teeth
        )
        rhs = comb_rhs(
            self.customer_count, self.demand, self.capacity, original_handle, original_teeth
        )
        if lhs >= rhs + _VIOLATION_MARGIN:
            return None
        cut = CombCut(
            kind=CutKind.STRENGTHENED_COMB,
            handle=original_handle,
            teeth=original_teeth,
            rhs=float(rhs + 1),
        )
        return cut, rhs + 1.0 - lhs


def strengthened_combs(
    support: Any,
    customer_count: int,
    capacity: int,
    demand: Any,
    qmin: int,
    x: Any,
    max_cuts: int,
) -> tuple[list[CombCut], float]:
    """Find violated strengthened comb inequalities.

    ``support[v]`` lists the neighbours of node ``v``, ``x[i][j]`` is the
    value of edge ``{i, j}`` and ``demand[i]`` the demand of customer ``i``.
    Returns the cuts found, in cut-set form with right-hand side ``rhs``,
    and the largest violation among them (0.0 when there is none).
    Generation stops once ``max_cuts`` cuts are found.
    """
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")

    depot = customer_count + 1
    total_demand = sum(demand[node] for node in range(1, customer_count + 1))
    depot_x = sum(x[depot][other] for other in support[depot])
    use_depot_match = depot_x <= 2.0 * _min_vehicles(total_demand, capacity) + 0.01

    shrunk = shrink(support, customer_count, demand, qmin, use_depot_match, x)
    search = _CombSearch(support, customer_count, capacity, demand, x, shrunk)
    super_count = search.super_count

    handles = generate_handles(
        search.adjacency, super_count, shrunk.s_matrix, 2 * super_count
    )
    edges = search.tooth_edges(qmin, use_depot_match)

    cuts: list[CombCut] = []
    max_violation = 0.0

    def record(found: Optional[tuple[CombCut, float]]) -> None:
        nonlocal max_violation
        if found is None:
            return
        cut, violation = found
        cuts.append(cut)
        max_violation = max(max_violation, violation)

    for handle in handles:
        teeth = search.greedy_teeth(edges, set(handle))
        record(search.evaluate(handle, teeth))
        if len(cuts) >= max_cuts:
            return cuts, max_violation

    if cuts:
        return cuts, max_violation

    depot_edge_bound = {
        node: 1 if shrunk.demand[node] < qmin and use_depot_match else 2
        for node in range(1, super_count + 1)
    }
    matchings = exact_two_matchings(
        search.adjacency, super_count, depot_edge_bound, shrunk.s_matrix
    )
    for matching in matchings:
        pairs = [(tail, head) for tail, head in matching.teeth]
        record(search.evaluate(matching.handle, pairs))
        if len(cuts) >= max_cuts:
            break

    return cuts, max_violation