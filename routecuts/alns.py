"""Adaptive large neighbourhood search with simulated-annealing acceptance."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Optional

from routecuts.bestsolutions import BestSolutionList

logger = logging.getLogger(__name__)

_TEMPERATURE_FLOOR = 0.00000396
_RESTART_AFTER = 10000


@dataclass
class OperatorStats:
    """Adaptive weight and scoring record of one destroy or repair operator."""

    operator: Any
    weight: float = 0.0
    selected: float = 1.0
    score: float = 1.0
    uses: int = 0
    interval_low: float = 0.0
    interval_high: float = 0.0

    def reset(self) -> None:
        self.weight = 0.0
        self.selected = 1.0
        self.score = 1.0
        self.uses = 0

    def refresh(self, reaction: float) -> None:
        self.weight = self.weight * (1 - reaction) + self.score / self.selected * reaction
        self.selected = 1.0
        self.score = 0.0


def _acceptance(delta: float, temperature: float) -> float:
    try:
        return math.exp(delta / temperature)
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        if delta > 0:
            return math.inf
        if delta < 0:
            return 0.0
        return math.nan


def _relative_gap(new: float, reference: float) -> float:
    try:
        return (new - reference) / reference
    except ZeroDivisionError:
        if new == reference:
            return math.nan
        return math.copysign(math.inf, new - reference)


class Alns:
    """Destroy-and-repair search over a solution.

    Solutions provide ``update()``, ``cost()``, ``is_feasible()``, ``copy()``
    and the attributes ``total_distance``, ``customer_count`` and
    ``unassigned_count``. Remove operators provide ``remove(solution, count)``
    and insert operators ``insert(solution)``.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.iteration_count = 25000
        self.temperature = 0.9996
        self.percentage_max = 0.4
        self.percentage_min = 0.1
        self.max_removed = 60
        self.min_removed = 30
        self.sigma1 = 4.0
        self.sigma2 = 1.0
        self.sigma3 = 0.0
        self.reaction = 0.05
        self.temperature_iter_init = 0.0
        self.acceptance_gap = 99999999.0
        self.insert_operators: list[OperatorStats] = []
        self.remove_operators: list[OperatorStats] = []

    def add_insert_operator(self, operator: Any) -> None:
        self.insert_operators.append(OperatorStats(operator))

    def add_remove_operator(self, operator: Any) -> None:
        self.remove_operators.append(OperatorStats(operator))

    def _select(self, stats: list[OperatorStats]) -> OperatorStats:
        total = sum(entry.weight for entry in stats)
        if total == 0:
            return stats[-1]
        bound = 0.0
        for entry in stats:
            entry.interval_low = bound
            bound += entry.weight / total
            entry.interval_high = bound
        draw = self.rng.random()
        for entry in stats:
            if entry.interval_low <= draw <= entry.interval_high:
                return entry
        return stats[-1]

    def _removal_size(self, item_count: int) -> int:
        upper = min(self.max_removed, int(item_count * self.percentage_max))
        lower = min(self.min_removed, int(item_count * self.percentage_min))
        if lower == upper:
            size = upper
        else:
            size = self.rng.randrange(upper) + lower
        return min(max(size, 10), item_count)

    def optimize(self, solution: Any, best_list: Optional[BestSolutionList] = None) -> Any:
        """Run the search from ``solution`` and return the best solution found."""
        if not self.insert_operators or not self.remove_operators:
            raise ValueError("at least one insert and one remove operator are required")

        solution.update()
        best = solution.copy()
        current = solution.copy()
        accepted = solution.copy()
        best_cost = solution.cost()
        if best_list is not None and solution.is_feasible():
            best_list.add(solution)

        initial_distance = solution.total_distance
        current_cost = best_cost

        for stats in (*self.insert_operators, *self.remove_operators):
            stats.reset()

        without_new_best = 0
        t_min = initial_distance * 1.05 * self.temperature ** self.temperature_iter_init
        t = t_min
        logger.info(
            "ALNS iterations:%d Tmin:%.10f Tmax:%.10f initial distance:%f",
            self.iteration_count, t_min, _TEMPERATURE_FLOOR, initial_distance,
        )

        for iteration in range(self.iteration_count):
            item_count = accepted.customer_count - accepted.unassigned_count
            removal = self._removal_size(item_count)

            remover = self._select(self.remove_operators)
            inserter = self._select(self.insert_operators)
            for stats in (inserter, remover):
                stats.uses += 1
                stats.selected += 1

            remover.operator.remove(current, removal)
            inserter.operator.insert(current)

            new_cost = current.cost()
            feasible = current.is_feasible()

            if iteration % 1000 == 0:
                logger.info(
                    "iter:%d removed:%d new cost:%.2f (%d,%d) cost:%.2f best:%.2f T:%.8f",
                    iteration, removal, new_cost, current.unassigned_count,
                    int(feasible), current_cost, best_cost, t,
                )

            if best_list is not None and feasible:
                best_list.add(current)

            gap_best = _relative_gap(new_cost, best_cost)

            if best_cost > new_cost and feasible:
                without_new_best = 0
                best_cost = new_cost
                current_cost = new_cost
                best = current.copy()
                accepted = current.copy()
                inserter.score += self.sigma1
                remover.score += self.sigma1
            else:
                without_new_best += 1
                draw = self.rng.random()
                threshold = _acceptance(current_cost - new_cost, t)
                if draw < threshold and gap_best <= self.acceptance_gap:
                    accepted = current.copy()
                    reward = self.sigma2 if new_cost < current_cost else self.sigma3
                    inserter.score += reward
                    remover.score += reward
                    current_cost = new_cost
                else:
                    current = accepted.copy()

            if iteration % 100 == 0:
                for stats in (*self.insert_operators, *self.remove_operators):
                    stats.refresh(self.reaction)

            t *= self.temperature
            if (t < _TEMPERATURE_FLOOR or t < 0.000001) and without_new_best >= _RESTART_AFTER:
                t = t_min

        return best