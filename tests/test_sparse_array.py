import numpy as np
import pytest

from logics.sparse_array import (
    PositionalValue, coerce_cell, compact, expand, positional_values,
)


@pytest.mark.parametrize("cell, expected", [
    (10, 10.0),
    ("15.2", 15.2),
    ("  7 ", 7.0),
    ("1e2", 100.0),
    (np.float64(3.5), 3.5),
])
def test_coerce_cell_numbers(cell, expected):
    assert coerce_cell(cell) == expected


@pytest.mark.parametrize("cell", [None, "", "   ", "abc", "12MPa", float('nan'), float('inf'),
                                  "-inf", "NaN", True, [], {}])
def test_coerce_cell_rejects(cell):
    assert coerce_cell(cell) is None


def test_compact_keeps_order_and_indices():
    result = compact([10, None, "", 15.2, 20])
    assert result.dense == [10.0, 15.2, 20.0]
    assert result.index_map == [0, 3, 4]
    assert len(result) == 3
    assert not result.is_empty


def test_compact_all_empty():
    result = compact([None, "", "x", float('nan')])
    assert result.is_empty
    assert result.dense == []
    assert result.index_map == []


def test_compact_does_not_mutate_input():
    raw = [" 1", None, "2"]
    compact(raw)
    assert raw == [" 1", None, "2"]


def test_positional_values():
    assert positional_values(["3", "", 4]) == [
        PositionalValue(3.0, 0), PositionalValue(None, 1), PositionalValue(4.0, 2),
    ]


def test_expand_is_inverse_of_compact():
    raw = [None, "5", "bad", 6.5, None, "7"]
    c = compact(raw)
    restored = expand(c.dense, c.index_map, len(raw))
    assert restored == [None, 5.0, None, 6.5, None, 7.0]


def test_expand_validates_lengths():
    with pytest.raises(ValueError):
        expand([1.0, 2.0], [0], 3)
    with pytest.raises(ValueError):
        expand([1.0], [5], 3)