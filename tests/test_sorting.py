import random

import pytest

from routecuts.sorting import sort_indices, sort_values


def _is_ordered(seq, descending):
    pairs = zip(seq, seq[1:])
    if descending:
        return all(a >= b for a, b in pairs)
    return all(a <= b for a, b in pairs)


@pytest.mark.parametrize("descending", [False, True])
def test_sort_values_random_ints(descending):
    rng = random.Random(7)
    for _ in range(60):
        values = [rng.randint(-15, 15) for _ in range(rng.randint(0, 40))]
        result = sort_values(values, descending)
        assert sorted(result) == sorted(values)
        assert _is_ordered(result, descending)


@pytest.mark.parametrize("descending", [False, True])
def test_sort_values_floats(descending):
    rng = random.Random(11)
    values = [rng.uniform(-1.0, 1.0) for _ in range(100)]
    result = sort_values(values, descending)
    assert len(result) == len(values)
    assert _is_ordered(result, descending)
    assert set(result) == set(values)


def test_sort_values_small_inputs():
    assert sort_values([]) == []
    assert sort_values([5]) == [5]
    assert sort_values([3, 1, 2]) == [1, 2, 3]
    assert sort_values([3, 1, 2], descending=True) == [3, 2, 1]


def test_sort_values_leaves_input_untouched():
    values = [4, 2, 9, 1]
    sort_values(values)
    assert values == [4, 2, 9, 1]


@pytest.mark.parametrize("descending", [False, True])
def test_sort_indices_orders_by_value(descending):
    rng = random.Random(3)
    for _ in range(40):
        n = rng.randint(0, 30)
        values = [rng.randint(0, 6) for _ in range(n)]
        result = sort_indices(range(n), values, descending)
        assert sorted(result) == list(range(n))
        assert _is_ordered([values[i] for i in result], descending)


def test_sort_indices_with_mapping():
    values = {"a": 2.5, "b": 0.5, "c": 1.5}
    assert sort_indices(["a", "b", "c"], values) == ["b", "c", "a"]
    assert sort_indices(["a", "b", "c"], values, descending=True) == ["a", "c", "b"]


def test_sort_indices_subset_of_positions():
    values = [9, 8, 7, 6, 5]
    result = sort_indices([0, 2, 4], values)
    assert result == [4, 2, 0]


def test_sort_indices_does_not_modify_arguments():
    indices = [2, 0, 1]
    values = [3, 1, 2]
    sort_indices(indices, values)
    assert indices == [2, 0, 1]
    assert values == [3, 1, 2]