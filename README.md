# routecuts

Separation routines for the capacitated vehicle routing problem (CVRP), and a
small adaptive large neighbourhood search (ALNS) driver.

Given a fractional LP solution on a support graph, the package looks for
violated two-matching and strengthened comb inequalities.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Input conventions

- Customers are the nodes `1..customer_count`; the depot is node
  `customer_count + 1`.
- `support[v]` lists the neighbours of node `v` in the support graph.
- `x[i][j]` is the LP value of edge `{i, j}`; a symmetric list of lists or a
  mapping of mappings both work.
- `demand[i]` is the demand of customer `i`; the depot has none.
- `capacity` must be positive; the routines that use it raise `ValueError`
  otherwise.

## Cuts

Cuts are returned as `routecuts.twomatch.CombCut` records with a `kind`
(`CutKind.TWO_MATCHING` or `CutKind.STRENGTHENED_COMB`), a `handle` (tuple of
nodes), `teeth` (tuple of node tuples) and a right-hand side `rhs`.

### Strengthened combs

```python
from routecuts.strcomb import strengthened_combs

cuts, max_violation = strengthened_combs(
    support, customer_count, capacity, demand, qmin, x, max_cuts=10
)
for cut in cuts:
    print(cut.handle, cut.teeth, cut.rhs)
```

`strengthened_combs` shrinks the support graph into super-nodes
(`routecuts.handles.shrink`), builds candidate handles
(`routecuts.handles.generate_handles`), picks an odd number of heavy
handle-crossing edges as starting teeth and grows each tooth greedily
(`routecuts.teeth.expand_tooth_two_ways`). If no cut turns up that way, the
handles and teeth of exact two-matching separation on the shrunk graph are
tried instead. Every comb found is re-evaluated on the original graph; it is
kept when the sum of `x` over the boundaries of the handle and the teeth is
below `rhs - 0.01`, where `rhs` is the strengthened right-hand side plus one.
The function returns the cuts and the largest violation (`rhs` minus that
sum, or `0.0` when nothing is found), and stops once `max_cuts` cuts are found.

### Two-matchings

`routecuts.twomatch.exact_two_matchings(support, customer_count,
depot_edge_bound, x)` splits every customer edge, and every depot edge of a
customer whose `depot_edge_bound` is `1`, by a new node, builds a Gomory–Hu
tree of the resulting network with networkx, and turns odd cuts into handles
and crossing split edges into teeth. Each cut has a connected handle of at
least three customers, an odd number (at least three) of two-node teeth, and
`rhs` equal to the handle size plus `(teeth - 1) // 2`.
`two_matching_violation` evaluates such a cut for given values of `x`.

### Building blocks

- `routecuts.teeth.boundary_lhs` and `routecuts.teeth.comb_rhs` evaluate the
  cut-set left-hand side and strengthened right-hand side of a comb;
  `expand_tooth` and `expand_tooth_two_ways` return a `ToothResult` with the
  tooth's `nodes`, `lhs`, `rhs` and `slack`.
- `routecuts.handles.shrink` returns a `ShrunkGraph` (components, demand,
  boundary and the x-value matrix between components, the depot component
  last).
- `routecuts.components.strong_components(adjacency, node_count)` lists the
  strongly connected components of a directed graph on `1..node_count`.
- `routecuts.sorting.sort_values(values, descending=False)` and
  `sort_indices(indices, values, descending=False)` sort with a quicksort
  whose order of equal keys is fixed by the partitioning scheme.

## Neighbourhood search

`routecuts.alns.Alns` runs ALNS with simulated-annealing acceptance. It
chooses among registered remove and insert operators by adaptive weights,
each kept in an `OperatorStats` record. Settings such as `iteration_count`,
`temperature`, `min_removed`, `max_removed`, `percentage_min`,
`percentage_max`, `sigma1`..`sigma3`, `reaction` and `acceptance_gap` are
plain attributes. Progress is logged through the `routecuts.alns` logger.

`routecuts.bestsolutions.BestSolutionList` keeps copies of up to `max_count`
solutions of distinct cost, cheapest first. It tells listeners added with
`add_listener` (objects with `increase(solution)` and `decrease(solution)`)
when solutions enter or are evicted. `resize` refuses to shrink below the
number of kept solutions.

```python
import random
from routecuts.alns import Alns
from routecuts.bestsolutions import BestSolutionList

search = Alns(random.Random(1))
search.add_remove_operator(remover)
search.add_insert_operator(inserter)
pool = BestSolutionList(problem, 20)
best = search.optimize(initial_solution, pool)
```

`optimize` raises `ValueError` unless at least one operator of each kind is
registered.

## What the package does not provide

There is no routing solution model, no remove or insert operator and no cost
function: the search works on objects you supply. A solution needs
`update()`, `cost()`, `is_feasible()` and `copy()`, the attributes
`total_distance`, `customer_count` and `unassigned_count`, and, to go into a
`BestSolutionList`, `last_cost`. A remove operator needs
`remove(solution, count)` and an insert operator `insert(solution)`.

The package separates two-matching and strengthened comb inequalities only;
it has no LP solver, no constraint pool and no command-line tool.