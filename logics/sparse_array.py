from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass(frozen=True)
class PositionalValue:
    """A grid cell after coercion. value is None for empty, non-numeric or non-finite cells."""
    value: Optional[float]
    index: int


@dataclass(frozen=True)
class CompactedInput:
    """
    Dense values plus the map back to their grid rows.

    index_map[k] is the original row of dense[k]. Both lists are built by the
    same pass so they can never drift apart.
    """
    dense: List[float]
    index_map: List[int]

    def __len__(self):
        return len(self.dense)

    @property
    def is_empty(self):
        return not self.dense


def coerce_cell(cell):
    """
    Convert one raw grid cell to a finite float, or None.

    Strings are stripped first; '', None, NaN, ±inf, booleans and anything
    float() rejects all become None.
    """
    if cell is None or isinstance(cell, bool):
        return None
    if isinstance(cell, str):
        cell = cell.strip()
        if not cell:
            return None
    try:
        value = float(cell)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(value):
        return None
    return value


def positional_values(raw):
    """Return a PositionalValue for every cell of raw, in order."""
    return [PositionalValue(coerce_cell(cell), idx) for idx, cell in enumerate(raw)]


def compact(raw):
    """
    Compact a fixed-length column that may contain empty cells.

    Args:
        raw: Sequence of numbers, strings or None (one entry per grid row).

    Returns:
        CompactedInput with the non-null values in original order and their
        original indices. Callers must reject an empty result as an input error.
    """
    dense = []
    index_map = []
    for pv in positional_values(raw):
        if pv.value is not None:
            dense.append(pv.value)
            index_map.append(pv.index)
    return CompactedInput(dense, index_map)


def expand(dense, index_map, length, fill=None):
    """
    Inverse of compact: place dense values back at their original positions.

    Raises:
        ValueError: If dense and index_map differ in length or an index is out of range.
    """
    if len(dense) != len(index_map):
        raise ValueError(f"{len(dense)} values for {len(index_map)} indices")
    out = [fill] * length
    for value, idx in zip(dense, index_map):
        if idx < 0 or idx >= length:
            raise ValueError(f"Index {idx} outside column of length {length}")
        out[idx] = value
    return out
