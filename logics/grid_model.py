import threading

import numpy as np
import pandas as pd


class GridModel:
    """
    Boundary between the calculation layer and whatever displays the grid.

    The calculation layer only needs three operations: read the raw input
    column, replace the whole store in one go (batch path) and write a single
    cell (sequential pipeline).
    """

    def read_column(self, col_index):
        raise NotImplementedError

    def bulk_write(self, rows):
        raise NotImplementedError

    def write_cell(self, row, col, value):
        raise NotImplementedError


class FrameGridModel(GridModel):
    """
    In-memory grid backed by an object-dtype DataFrame.

    Thread-safe: pipeline workers write cells concurrently while the UI thread
    reads. Listeners are called after every change with ('bulk', None) or
    ('cell', (row, col)); they run on the writing thread, so UI listeners must
    hop back to the main loop themselves.
    """

    def __init__(self, headers, row_count=20):
        self._lock = threading.RLock()
        self._listeners = []
        self.headers = list(headers)
        self._df = self._empty_frame(self.headers, row_count)

    @staticmethod
    def _empty_frame(headers, row_count):
        return pd.DataFrame(
            [[None] * len(headers) for _ in range(row_count)],
            columns=headers,
            dtype=object,
        )

    # ── Listeners ─────────────────────────────────────────────

    def add_listener(self, fn):
        self._listeners.append(fn)

    def remove_listener(self, fn):
        if fn in self._listeners:
            self._listeners.remove(fn)

    def _notify(self, kind, where=None):
        for fn in list(self._listeners):
            fn(kind, where)

    # ── GridModel API ─────────────────────────────────────────

    def read_column(self, col_index):
        with self._lock:
            series = self._df.iloc[:, col_index]
            return [None if _is_missing(v) else v for v in series.tolist()]

    def bulk_write(self, rows):
        """Replace the entire store with rows (one change notification)."""
        rows = [list(r) for r in rows]
        for r in rows:
            if len(r) != len(self.headers):
                raise ValueError(f"Row has {len(r)} cells, grid has {len(self.headers)} columns")
        with self._lock:
            self._df = pd.DataFrame(rows, columns=self.headers, dtype=object)
        self._notify('bulk')

    def write_cell(self, row, col, value):
        with self._lock:
            self._df.iat[row, col] = value
        self._notify('cell', (row, col))

    def read_cell(self, row, col):
        with self._lock:
            value = self._df.iat[row, col]
        return None if _is_missing(value) else value

    # ── Helpers for views and exports ─────────────────────────

    def reset(self, headers=None, row_count=None):
        with self._lock:
            if headers is not None:
                self.headers = list(headers)
            self._df = self._empty_frame(self.headers, row_count or len(self._df))
        self._notify('bulk')

    def set_input_column(self, values):
        """Fill column 0 with user input, clearing derived columns. Grows the grid if needed."""
        values = list(values)
        with self._lock:
            n = max(len(values), len(self._df))
            rows = [[values[i] if i < len(values) else None] + [None] * (len(self.headers) - 1)
                    for i in range(n)]
            self._df = pd.DataFrame(rows, columns=self.headers, dtype=object)
        self._notify('bulk')

    def ensure_rows(self, row_count):
        """Append empty rows until the grid has at least row_count rows."""
        with self._lock:
            missing = row_count - len(self._df)
            if missing <= 0:
                return
            extra = self._empty_frame(self.headers, missing)
            self._df = pd.concat([self._df, extra], ignore_index=True)
        self._notify('bulk')

    def clear_derived(self):
        with self._lock:
            self._df.iloc[:, 1:] = None
        self._notify('bulk')

    def rows(self):
        with self._lock:
            return [[None if _is_missing(v) else v for v in row]
                    for row in self._df.itertuples(index=False, name=None)]

    def to_frame(self):
        """Copy of the store with numeric-looking cells converted to floats."""
        with self._lock:
            df = self._df.copy()
        return df.apply(pd.to_numeric, errors='coerce')

    def __len__(self):
        with self._lock:
            return len(self._df)


def _is_missing(value):
    return value is None or (isinstance(value, (float, np.floating)) and np.isnan(value))
