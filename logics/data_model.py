import threading
from dataclasses import dataclass, fields, replace

from logics import config
from logics.grid_model import FrameGridModel


NUMERIC_FIELDS = ('md', 'th', 'tb', 'rg', 'pc', 'tc', 'n2', 'co2', 'h2s')


def _to_float(value):
    """Lenient float parse for parameter-table cells; unparsable input becomes NaN."""
    if value is None:
        return float('nan')
    if isinstance(value, str):
        value = value.strip()
    try:
        return float(value)
    except (TypeError, ValueError):
        return float('nan')


@dataclass(frozen=True)
class WellContext:
    """
    Immutable snapshot of the well/reservoir parameters used by every request.

    Units are the service's own: depth in m, temperatures in K, pressures in
    MPa, gas mole fractions in percent (0-100).
    """
    well_no: str
    md: float       # mid-depth
    th: float       # wellhead temperature
    tb: float       # bottom-hole temperature
    rg: float       # relative gas density
    pc: float       # critical pressure
    tc: float       # critical temperature
    n2: float
    co2: float
    h2s: float

    @classmethod
    def from_record(cls, record):
        """Build from one getWellData record (wellname, md, th, tb, ...)."""
        return cls(
            well_no=str(record.get('wellname', '')),
            **{name: _to_float(record.get(name)) for name in NUMERIC_FIELDS},
        )

    @classmethod
    def from_row(cls, row):
        """Build from a parameter-table row in WELL_INFO_HEADERS order."""
        row = list(row) + [None] * (len(NUMERIC_FIELDS) + 1 - len(row))
        well_no = '' if row[0] is None else str(row[0]).strip()
        values = [_to_float(v) for v in row[1:len(NUMERIC_FIELDS) + 1]]
        return cls(well_no, *values)

    def to_row(self):
        return [self.well_no] + [getattr(self, name) for name in NUMERIC_FIELDS]

    def with_values(self, **changes):
        """Return a new snapshot with some parameters replaced."""
        return replace(self, **changes)

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


class CalculationSession:
    """
    Per-window state: the loaded well, its parameters and the result grid.

    The generation counter is bumped whenever a different well is loaded or
    a different property set is shown. A submission records the generation it
    started under and may only write into the grid while that generation is
    still current; the check and the write share the session lock.
    """

    def __init__(self, grid=None, headers=None):
        self.well_records = []                      # Raw getWellData records
        self.context = None                         # Current WellContext
        self.grid = grid or FrameGridModel(
            headers or [f"col{i}" for i in range(config.GRID_COLUMN_COUNT)],
            config.GRID_ROW_COUNT,
        )
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def generation(self):
        with self._lock:
            return self._generation

    def is_current(self, stamp):
        with self._lock:
            return stamp == self._generation

    def write_if_current(self, stamp, write):
        """
        Call write() only while stamp is still the current generation.

        Args:
            stamp: Generation captured when the submission started.
            write: callable() performing the grid write.

        Returns:
            True if write() ran, False if the stamp was stale.
        """
        with self._lock:
            if stamp != self._generation:
                return False
            write()
            return True

    def load_well(self, records, headers=None, row_count=None):
        """
        Replace the active well. Returns the new generation stamp.

        Any submission started before this call becomes stale.
        """
        if not records:
            raise ValueError("No well records to load.")
        context = WellContext.from_record(records[0])
        with self._lock:
            self._generation += 1
            self.well_records = list(records)
            self.context = context
            self.grid.reset(headers=headers, row_count=row_count or config.GRID_ROW_COUNT)
            return self._generation

    def switch_headers(self, headers):
        """
        Show another property set: new headers, same input column.

        Derived columns are cleared and any submission still in flight becomes
        stale. Returns the new generation stamp.
        """
        with self._lock:
            self._generation += 1
            inputs = self.grid.read_column(0)
            self.grid.reset(headers=headers)
            self.grid.set_input_column(inputs)
            return self._generation

    def update_context(self, context):
        """Install parameters edited in the parameter table."""
        self.context = context

    @property
    def is_initialized(self):
        return self.context is not None
