import math

import pytest

from logics.errors import ContractError
from logics.property_sets import BOTTOM_HOLE, PVT, WELLHEAD
from logics.reconciler import inverse, reconcile, sanitize_value, sentinel_row
from logics.sparse_array import compact


def pvt_item(z):
    return {'z': z, 'p_over_z': 1.0, 'bg': 0.004, 'niandu': 0.02, 'cg': 0.1, 'density': 80.0}


def identity_mapper(orig, item):
    return (orig, item, None, None, None, None, None)


def test_sentinel_rows_fill_gaps():
    original = [10, None, "", 15.2, 20]
    c = compact(original)
    results = [pvt_item(0.9), pvt_item(0.85), pvt_item(0.8)]

    rows = reconcile(original, c.index_map, results, PVT.row_mapper)

    assert len(rows) == 5
    assert rows[1] == (None, None, None, None, None, None, None)
    assert rows[2] == ("", None, None, None, None, None, None)
    assert [rows[i][1] for i in (0, 3, 4)] == [0.9, 0.85, 0.8]


def test_input_column_echoed_unchanged():
    original = ["10", None, " 12 ", "abc"]
    c = compact(original)
    rows = reconcile(original, c.index_map, [pvt_item(1.0), pvt_item(1.0)], PVT.row_mapper)
    assert [r[0] for r in rows] == original


def test_exactly_k_rows_populated():
    original = [None, 1, None, None, 2, 3, None]
    c = compact(original)
    rows = reconcile(original, c.index_map, list(c.dense), identity_mapper)
    populated = [i for i, r in enumerate(rows) if r[1:] != (None,) * 6]
    assert populated == [1, 4, 5]


def test_roundtrip_with_identity_mapper():
    original = [3.5, "", "4", None, 9]
    c = compact(original)
    rows = reconcile(original, c.index_map, list(c.dense), identity_mapper)
    for idx, value in zip(c.index_map, c.dense):
        assert rows[idx][1] == value == float(original[idx])


@pytest.mark.parametrize("results", [[], [pvt_item(1)], [pvt_item(1)] * 3, None])
def test_length_mismatch_is_contract_error(results):
    original = [1, None, 2]
    c = compact(original)
    with pytest.raises(ContractError):
        reconcile(original, c.index_map, results, PVT.row_mapper)


def test_missing_field_is_contract_error():
    original = [1]
    with pytest.raises(ContractError):
        reconcile(original, [0], [{'z': 0.9}], PVT.row_mapper)


def test_bottom_hole_mapper_inverts_bg():
    item = {'pwbs': 30.0, 'z': 0.95, 'p_over_z': 31.6, 'bg': 0.004, 'niandu': 0.02, 'cg': 0.03}
    row = BOTTOM_HOLE.row_mapper(8.0, item)
    assert row[0] == 8.0
    assert row[1] == 30.0
    assert row[4] == pytest.approx(250.0)


def test_zero_bg_gives_no_inverse():
    item = {'ph': 8.0, 'z': 0.95, 'p_over_z': 31.6, 'bg': 0, 'niandu': 0.02, 'cg': 0.03}
    assert WELLHEAD.row_mapper(30.0, item)[4] is None


def test_non_finite_values_sanitized():
    assert sanitize_value(float('nan')) is None
    assert sanitize_value(math.inf) is None
    assert sanitize_value("0.5") == 0.5
    assert sanitize_value(None) is None
    assert inverse(4) == 0.25


def test_sentinel_row_width():
    assert sentinel_row(5) == (5, None, None, None, None, None, None)
