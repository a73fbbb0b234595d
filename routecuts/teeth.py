"""Teeth of strengthened comb inequalities.

Teeth are node sets over ``1..customer_count + 1``, the last node being
the depot. The helpers here evaluate the cut-set left-hand side of a
comb, its strengthened right-hand side, and grow a tooth greedily so as
to make the comb as violated as possible.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

_SLACK_IMPROVEMENT = 0.001
_DEPOT_SLACK_IMPROVEMENT = 0.01


@dataclass(frozen=True)
class ToothResult:
    """A tooth's node list with the cut-set value and vehicle count it gives."""

    nodes: tuple[int, ...]
    lhs: float
    rhs: int

    @property
    def slack(self) -> float:
        return self.lhs - self.rhs


def _check_capacity(capacity: int) -> None:
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")


def _vehicles(load: int, capacity: int) -> int:
    """Smallest multiple count of ``capacity`` covering ``load``."""
    return -(-load // capacity)


def _tooth_loads(
    members: Collection[int],
    customer_count: int,
    demand: Any,
    in_handle: Collection[int],
) -> list[int]:
    """Demand inside the tooth and the handle, outside the handle, and in total."""
    loads = [0, 0, 0]
    for node in range(1, customer_count + 1):
        if node not in members:
            continue
        if node in in_handle:
            loads[0] += demand[node]
        else:
            loads[1] += demand[node]
        loads[2] += demand[node]
    return loads


def _effective(loads: Sequence[int], depot_in_tooth: bool, total_demand: int) -> list[int]:
    """Loads to be served; with the depot in the tooth, the outer parts are complemented."""
    if depot_in_tooth:
        return [loads[0], total_demand - loads[1], total_demand - loads[2]]
    return list(loads)


def boundary_lhs(
    support: Any,
    customer_count: int,
    x: Any,
    handle: Iterable[int],
    teeth: Iterable[Iterable[int]],
) -> float:
    """Sum of x over the boundaries of the handle and of every tooth."""
    sets = [set(handle)] + [set(tooth) for tooth in teeth]
    total = 0.0
    for node in range(1, customer_count + 1):
        for other in support[node]:
            if other <= node:
                continue
            value = x[node][other]
            for members in sets:
                if (node in members) != (other in members):
                    total += value
    return total


def comb_rhs(
    customer_count: int,
    demand: Any,
    capacity: int,
    handle: Iterable[int],
    teeth: Iterable[Iterable[int]],
) -> int:
    """Strengthened right-hand side of a comb: vehicle counts summed over teeth.

    Each tooth contributes the number of vehicles needed for its part inside
    the handle, its part outside the handle and the whole tooth, each at
    least one.
    """
    _check_capacity(capacity)
    depot = customer_count + 1
    in_handle = set(handle)
    total_demand = sum(demand[node] for node in range(1, customer_count + 1))

    rhs = 0
    for tooth in teeth:
        members = set(tooth)
        loads = _tooth_loads(members, customer_count, demand, in_handle)
        for load in _effective(loads, depot in members, total_demand):
            rhs += max(1, _vehicles(load, capacity))
    return rhs


def expand_tooth(
    support: Any,
    customer_count: int,
    tooth_nr: int,
    demand: Any,
    capacity: int,
    node_boundary: Any,
    in_handle: Collection[int],
    teeth: Sequence[Iterable[int]],
    x: Any,
) -> ToothResult:
    """Grow tooth ``teeth[tooth_nr]`` one customer at a time.

    A customer is chosen to minimise the tooth's slack (cut-set value minus
    vehicle count), falling back to the one with the largest x-value into
    the tooth. Customers that would make the tooth meet another tooth both
    inside and outside the handle, or meet another tooth inside the handle
    at all, are never chosen. The returned node list is the longest prefix
    reached with the lowest slack among those with an odd vehicle count
    (or the starting tooth, if none qualifies).
    """
    _check_capacity(capacity)
    depot = customer_count + 1
    tooth_sets = [set(tooth) for tooth in teeth]
    this_tooth = tooth_sets[tooth_nr]
    others = [t for t in range(len(tooth_sets)) if t != tooth_nr]

    selectable = {node: True for node in range(1, customer_count + 1)}
    selectable[depot] = False
    for node in this_tooth:
        selectable[node] = False

    touched = {tooth_nr}
    for t in others:
        members = teeth[t]
        meeting = next((node for node in members if node in this_tooth), None)
        if meeting is not None:
            touched.add(t)
            meets_in_handle = meeting in in_handle
            for node in members:
                if (node in in_handle) != meets_in_handle:
                    selectable[node] = False
        for node in members:
            if node in in_handle:
                selectable[node] = False

    in_set = set(this_tooth)
    depot_in_tooth = depot in in_set
    reached = {node: False for node in range(1, customer_count + 1)}
    x_into = {node: 0.0 for node in range(1, customer_count + 1)}
    delta = 0.0

    for node in range(1, customer_count + 1):
        for other in support[node]:
            if other <= node:
                continue
            value = x[node][other]
            if node in in_set and other <= customer_count:
                x_into[other] += value
                reached[other] = True
            if other in in_set:
                x_into[node] += value
                if other <= customer_count:
                    reached[node] = True
            if (node in in_set) != (other in in_set):
                delta += value

    total_demand = sum(demand[node] for node in range(1, customer_count + 1))
    loads = _tooth_loads(in_set, customer_count, demand, in_handle)
    counts = [
        max(1, _vehicles(load, capacity))
        for load in _effective(loads, depot_in_tooth, total_demand)
    ]

    best_lhs = delta
    best_rhs = sum(counts)
    best_slack = best_lhs - best_rhs

    node_list = sorted(in_set)
    best_size = len(node_list)

    while True:
        best_x = -1.0
        best_x_node = 0
        best_node = 0
        candidate_slack = 2.0 * (customer_count + 2)

        for node in range(1, customer_count + 1):
            if not selectable[node] or not reached[node]:
                continue
            if x_into[node] > best_x:
                best_x = x_into[node]
                best_x_node = node

            trial = list(loads)
            trial[0 if node in in_handle else 1] += demand[node]
            trial[2] += demand[node]
            trial_count = sum(
                _vehicles(load, capacity)
                for load in _effective(trial, depot_in_tooth, total_demand)
            )
            trial_slack = delta + node_boundary[node] - 2.0 * x_into[node] - trial_count
            if trial_slack < candidate_slack - _SLACK_IMPROVEMENT:
                candidate_slack = trial_slack
                best_node = node

        if best_node == 0:
            best_node = best_x_node
        if best_node == 0:
            break

        added_x = x_into[best_node]
        in_set.add(best_node)
        selectable[best_node] = False
        node_list.append(best_node)

        loads[0 if best_node in in_handle else 1] += demand[best_node]
        loads[2] += demand[best_node]
        count = sum(
            _vehicles(load, capacity)
            for load in _effective(loads, depot_in_tooth, total_demand)
        )

        delta += node_boundary[best_node] - 2.0 * added_x
        slack = delta - count

        if (slack < best_slack - _SLACK_IMPROVEMENT or best_rhs % 2 == 0) and count % 2 == 1:
            best_size = len(node_list)
            best_slack = slack
            best_lhs = delta
            best_rhs = count

        for other in support[best_node]:
            if other <= customer_count:
                x_into[other] += x[best_node][other]
                reached[other] = True

        for t in others:
            if best_node not in tooth_sets[t] or t in touched:
                continue
            meets_in_handle = best_node in in_handle
            for node in teeth[t]:
                if (node in in_handle) != meets_in_handle:
                    selectable[node] = False
            touched.add(t)

    return ToothResult(nodes=tuple(node_list[:best_size]), lhs=best_lhs, rhs=best_rhs)


def expand_tooth_two_ways(
    support: Any,
    customer_count: int,
    tooth_nr: int,
    demand: Any,
    capacity: int,
    node_boundary: Any,
    in_handle: Collection[int],
    teeth: Sequence[Iterable[int]],
    x: Any,
) -> ToothResult:
    """Grow a tooth as it stands and, where allowed, with the depot added.

    The depot may be added unless another tooth holding the depot already
    meets this tooth. The variant with the depot wins when its vehicle
    count is odd and either its slack is clearly lower or the plain
    variant's vehicle count is even.
    """
    depot = customer_count + 1
    teeth = [tuple(tooth) for tooth in teeth]
    this_tooth = set(teeth[tooth_nr])

    best = expand_tooth(
        support, customer_count, tooth_nr, demand, capacity,
        node_boundary, in_handle, teeth, x,
    )
    if depot in this_tooth:
        return best

    blocked = any(
        depot in tooth and any(node in this_tooth for node in tooth)
        for t, tooth in enumerate(teeth)
        if t != tooth_nr
    )
    if blocked:
        return best

    with_depot = list(teeth)
    with_depot[tooth_nr] = tuple(sorted(this_tooth | {depot}))
    trial = expand_tooth(
        support, customer_count, tooth_nr, demand, capacity,
        node_boundary, in_handle, with_depot, x,
    )
    if trial.rhs % 2 == 1 and (
        trial.slack < best.slack - _DEPOT_SLACK_IMPROVEMENT or best.rhs % 2 == 0
    ):
        return trial
    return best