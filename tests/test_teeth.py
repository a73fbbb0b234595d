import pytest

from routecuts.teeth import (
    ToothResult,
    boundary_lhs,
    comb_rhs,
    expand_tooth,
    expand_tooth_two_ways,
)

N = 6
DEPOT = N + 1


def _graph():
    """A cycle depot-1-2-3-4-5-6-depot plus two fractional chords."""
    edges = {
        (1, DEPOT): 1.0,
        (1, 2): 0.5,
        (2, 3): 1.0,
        (3, 4): 0.5,
        (4, 5): 1.0,
        (5, 6): 1.0,
        (6, DEPOT): 1.0,
        (1, 3): 0.5,
        (2, 4): 0.5,
    }
    support = {node: [] for node in range(1, DEPOT + 1)}
    x = {a: {b: 0.0 for b in range(1, DEPOT + 1)} for a in range(1, DEPOT + 1)}
    for (a, b), value in edges.items():
        support[a].append(b)
        support[b].append(a)
        x[a][b] = value
        x[b][a] = value
    boundary = {node: sum(x[node][k] for k in support[node]) for node in range(1, DEPOT + 1)}
    return support, x, boundary


DEMAND = {node: 1 for node in range(1, N + 1)}
HANDLE = {1, 2, 3}
TEETH = [(3, 4), (1, 6)]


def test_boundary_of_all_customers_is_depot_degree():
    support, x, _ = _graph()
    lhs = boundary_lhs(support, N, x, range(1, N + 1), [])
    assert lhs == pytest.approx(sum(x[k][DEPOT] for k in support[DEPOT]))


def test_boundary_same_for_set_and_complement():
    support, x, _ = _graph()
    complement = [node for node in range(1, DEPOT + 1) if node not in HANDLE]
    assert boundary_lhs(support, N, x, HANDLE, []) == pytest.approx(
        boundary_lhs(support, N, x, complement, [])
    )


def test_tooth_equal_to_handle_doubles_boundary():
    support, x, _ = _graph()
    single = boundary_lhs(support, N, x, HANDLE, [])
    assert boundary_lhs(support, N, x, HANDLE, [sorted(HANDLE)]) == pytest.approx(2 * single)


def test_comb_rhs_with_ample_capacity_is_three_per_tooth():
    assert comb_rhs(N, DEMAND, 100, HANDLE, TEETH) == 3 * len(TEETH)


def test_comb_rhs_counts_extra_vehicles():
    demand = {node: 5 for node in range(1, N + 1)}
    # tooth {1, 2, 3, 4}: 15 inside the handle, 5 outside, 20 in total
    assert comb_rhs(N, demand, 10, HANDLE, [(1, 2, 3, 4)]) == 5


def test_comb_rhs_rejects_nonpositive_capacity():
    with pytest.raises(ValueError):
        comb_rhs(N, DEMAND, 0, HANDLE, TEETH)


def test_expand_tooth_rejects_nonpositive_capacity():
    support, x, boundary = _graph()
    with pytest.raises(ValueError):
        expand_tooth(support, N, 0, DEMAND, 0, boundary, HANDLE, TEETH, x)


@pytest.mark.parametrize("tooth_nr", [0, 1])
def test_expanded_tooth_starts_with_original_nodes(tooth_nr):
    support, x, boundary = _graph()
    result = expand_tooth(support, N, tooth_nr, DEMAND, 3, boundary, HANDLE, TEETH, x)
    original = tuple(sorted(TEETH[tooth_nr]))
    assert result.nodes[: len(original)] == original
    assert len(set(result.nodes)) == len(result.nodes)


@pytest.mark.parametrize("tooth_nr", [0, 1])
def test_expanded_tooth_lhs_is_its_boundary(tooth_nr):
    support, x, boundary = _graph()
    result = expand_tooth(support, N, tooth_nr, DEMAND, 3, boundary, HANDLE, TEETH, x)
    assert result.lhs == pytest.approx(boundary_lhs(support, N, x, result.nodes, []))


def test_expanded_tooth_rhs_matches_comb_rhs():
    support, x, boundary = _graph()
    result = expand_tooth(support, N, 0, DEMAND, 3, boundary, HANDLE, TEETH, x)
    assert result.rhs == comb_rhs(N, DEMAND, 3, HANDLE, [result.nodes])
    assert result.slack == pytest.approx(result.lhs - result.rhs)


@pytest.mark.parametrize("tooth_nr", [0, 1])
def test_expansion_avoids_handle_nodes_of_other_teeth(tooth_nr):
    support, x, boundary = _graph()
    result = expand_tooth(support, N, tooth_nr, DEMAND, 3, boundary, HANDLE, TEETH, x)
    other = {node for t, tooth in enumerate(TEETH) if t != tooth_nr for node in tooth}
    added = result.nodes[len(TEETH[tooth_nr]):]
    assert not any(node in HANDLE and node in other for node in added)


def test_two_ways_picks_one_of_the_variants():
    support, x, boundary = _graph()
    plain = expand_tooth(support, N, 0, DEMAND, 3, boundary, HANDLE, TEETH, x)
    with_depot = list(TEETH)
    with_depot[0] = (3, 4, DEPOT)
    depot_variant = expand_tooth(support, N, 0, DEMAND, 3, boundary, HANDLE, with_depot, x)
    result = expand_tooth_two_ways(support, N, 0, DEMAND, 3, boundary, HANDLE, TEETH, x)
    assert result in (plain, depot_variant)


def test_two_ways_with_depot_already_in_tooth_is_plain_expansion():
    support, x, boundary = _graph()
    teeth = [(3, 4), (1, DEPOT)]
    plain = expand_tooth(support, N, 1, DEMAND, 3, boundary, HANDLE, teeth, x)
    result = expand_tooth_two_ways(support, N, 1, DEMAND, 3, boundary, HANDLE, teeth, x)
    assert result == plain


def test_two_ways_does_not_add_depot_when_blocked():
    support, x, boundary = _graph()
    teeth = [(3, 4), (4, 5, DEPOT)]
    plain = expand_tooth(support, N, 0, DEMAND, 3, boundary, HANDLE, teeth, x)
    result = expand_tooth_two_ways(support, N, 0, DEMAND, 3, boundary, HANDLE, teeth, x)
    assert result == plain
    assert DEPOT not in result.nodes


def test_tooth_result_slack():
    result = ToothResult(nodes=(1, 2), lhs=2.5, rhs=3)
    assert result.slack == pytest.approx(-0.5)