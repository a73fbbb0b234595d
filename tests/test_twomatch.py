import pytest

from routecuts.twomatch import (
    CombCut,
    CutKind,
    cut_node_set,
    exact_two_matchings,
    handle_is_connected,
    two_matching_violation,
)

# Prism: triangle {1,2,3}, triangle {4,5,6}; node 6 is the depot.
CUSTOMERS = 5
SUPPORT = {
    1: [2, 3, 4],
    2: [1, 3, 5],
    3: [1, 2, 6],
    4: [5, 6, 1],
    5: [4, 6, 2],
    6: [4, 5, 3],
}


def _prism_x():
    x = [[0.0] * 7 for _ in range(7)]
    for a, b, value in [
        (1, 2, 0.5), (1, 3, 0.5), (2, 3, 0.5),
        (4, 5, 0.5), (4, 6, 0.5), (5, 6, 0.5),
        (1, 4, 1.0), (2, 5, 1.0), (3, 6, 1.0),
    ]:
        x[a][b] = value
        x[b][a] = value
    return x


def test_prism_comb_violation():
    violation = two_matching_violation(
        SUPPORT, CUSTOMERS, _prism_x(), [1, 2, 3], [(1, 4), (2, 5), (3, 6)]
    )
    assert violation == pytest.approx(1.0)


def test_violation_without_teeth_is_one_minus_boundary():
    x = _prism_x()
    violation = two_matching_violation(SUPPORT, CUSTOMERS, x, [1, 2, 3], [])
    boundary = x[1][4] + x[2][5] + x[3][6]
    assert violation == pytest.approx(1.0 - boundary)


def test_cut_node_set_is_subtree():
    children = {1: [2, 3], 2: [4], 3: [], 4: []}
    assert cut_node_set(children, 1)[0] == 1
    assert sorted(cut_node_set(children, 1)) == [1, 2, 3, 4]
    assert sorted(cut_node_set(children, 2)) == [2, 4]
    assert cut_node_set(children, 3) == [3]


def test_handle_connectivity():
    assert handle_is_connected(SUPPORT, CUSTOMERS, [1, 2, 3]) is True
    assert handle_is_connected(SUPPORT, CUSTOMERS, [1, 4, 5]) is True
    assert handle_is_connected(SUPPORT, CUSTOMERS, [3, 4]) is False


def test_depot_does_not_connect_handle():
    assert handle_is_connected(SUPPORT, CUSTOMERS, [3, 6]) is False


def test_empty_handle_rejected():
    with pytest.raises(ValueError):
        handle_is_connected(SUPPORT, CUSTOMERS, [])


def test_prism_yields_comb_on_triangle():
    bound = {node: 1 for node in range(1, CUSTOMERS + 1)}
    cuts = exact_two_matchings(SUPPORT, CUSTOMERS, bound, _prism_x())
    assert cuts
    for cut in cuts:
        assert cut.kind is CutKind.TWO_MATCHING
        assert sorted(cut.handle) == [1, 2, 3]
    expected = {(1, 4), (2, 5), (3, 6)}
    assert any(set(cut.teeth) == expected for cut in cuts)


def test_found_cuts_satisfy_structure():
    bound = {node: 1 for node in range(1, CUSTOMERS + 1)}
    x = _prism_x()
    for cut in exact_two_matchings(SUPPORT, CUSTOMERS, bound, x):
        assert len(cut.teeth) >= 3 and len(cut.teeth) % 2 == 1
        assert cut.rhs == len(cut.handle) + (len(cut.teeth) - 1) // 2
        assert handle_is_connected(SUPPORT, CUSTOMERS, list(cut.handle))
        handle = set(cut.handle)
        for tail, head in cut.teeth:
            assert head in SUPPORT[tail]
            assert (tail in handle) != (head in handle)
        assert two_matching_violation(
            SUPPORT, CUSTOMERS, x, cut.handle, cut.teeth
        ) == pytest.approx(1.0)


def test_too_few_customers_yield_nothing():
    support = {1: [2, 3], 2: [1, 3], 3: [1, 2]}
    x = [[0.0] * 4 for _ in range(4)]
    for a, b in [(1, 2), (1, 3), (2, 3)]:
        x[a][b] = x[b][a] = 1.0
    assert exact_two_matchings(support, 2, {1: 1, 2: 1}, x) == []


def test_comb_cut_is_immutable():
    cut = CombCut(CutKind.TWO_MATCHING, (1, 2, 3), ((1, 4),), 3.0)
    with pytest.raises(AttributeError):
        cut.rhs = 5.0
    assert cut.rhs == 3.0