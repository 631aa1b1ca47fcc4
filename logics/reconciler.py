import numpy as np

from logics.config import GRID_COLUMN_COUNT
from logics.errors import ContractError


def sentinel_row(original_value, width=GRID_COLUMN_COUNT):
    """Row for a position that had no valid input: the input echoed, everything else None."""
    return (original_value,) + (None,) * (width - 1)


def sanitize_value(value):
    """Replace NaN, ±inf and non-numeric payload values with None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if np.isfinite(value) else None


def inverse(value):
    """1/value, or None when value is missing or zero."""
    value = sanitize_value(value)
    if value is None or value == 0:
        return None
    return sanitize_value(1.0 / value)


def make_row_mapper(columns, width=GRID_COLUMN_COUNT):
    """
    Build a row mapper from an ordered list of result columns.

    Args:
        columns: List of (field, transform) pairs for grid columns 1..width-1.
            transform may be None (value sanitized as-is) or a callable(value).
        width: Total row width including the input column.

    Returns:
        callable(original_value, result_item) -> tuple of length width.
        The mapper raises ContractError if result_item lacks a field.
    """
    if len(columns) != width - 1:
        raise ValueError(f"Expected {width - 1} result columns, got {len(columns)}")

    def row_mapper(original_value, item):
        if not isinstance(item, dict):
            raise ContractError(f"Expected an object per row, got {type(item).__name__}")
        cells = [original_value]
        for field, transform in columns:
            if field not in item:
                raise ContractError(f"Result row is missing field '{field}'")
            cells.append((transform or sanitize_value)(item[field]))
        return tuple(cells)

    return row_mapper


def reconcile(original, index_map, results, row_mapper, width=GRID_COLUMN_COUNT):
    """
    Map a dense response back onto the full-length input column.

    Args:
        original: The raw input column exactly as read from the grid.
        index_map: index_map[k] is the grid row of results[k].
        results: Dense response list from the service.
        row_mapper: callable(original_value, result_item) -> row tuple.
        width: Row width, used for sentinel rows.

    Returns:
        list of row tuples, one per entry of original. Column 0 of every row
        is original[i] unchanged.

    Raises:
        ContractError: If results and index_map differ in length, or an index
            is outside the column. Nothing is returned in that case, so
            nothing can be written to the grid.
    """
    if results is None or len(results) != len(index_map):
        got = 'no' if results is None else len(results)
        raise ContractError(
            f"Service returned {got} results for {len(index_map)} inputs."
        )

    rows = [sentinel_row(cell, width) for cell in original]
    for k, idx in enumerate(index_map):
        if idx < 0 or idx >= len(original):
            raise ContractError(f"Index {idx} is outside the input column ({len(original)} rows).")
        row = tuple(row_mapper(original[idx], results[k]))
        if len(row) != width:
            raise ContractError(f"Row mapper produced {len(row)} cells, expected {width}.")
        rows[idx] = row
    return rows
