from dataclasses import dataclass, field
from typing import List

from logics import config
from logics.errors import InputError, TransportError
from logics.pipeline import COMPLETE, STALE, SequentialPipeline, StageFailure
from logics.reconciler import reconcile, sentinel_row
from logics.sparse_array import compact
from logics.validation import validate_context, validate_well_no


@dataclass
class CalculationReport:
    """What happened to one submission. Failures are StageFailure records."""
    property_set: str
    mode: str
    rows_requested: int = 0
    rows_written: int = 0
    failures: List[StageFailure] = field(default_factory=list)
    stale: bool = False
    outcomes: list = field(default_factory=list)

    @property
    def partial(self):
        return bool(self.failures)

    def summary(self):
        if self.stale:
            return "Discarded: the well or property set changed while the calculation was running."
        text = f"{self.rows_written}/{self.rows_requested} rows calculated ({self.mode})."
        if self.failures:
            text += f" {len(self.failures)} value(s) could not be calculated."
        return text


def load_well(session, client, well_no, property_set=None):
    """
    Fetch a well's parameters and make it the session's active well.

    The grid is reset (with the property set's headers, if given) and any
    submission still in flight for the previous well becomes stale.

    Returns:
        The new generation stamp.

    Raises:
        InputError: Empty well number or unknown well.
        TransportError: Service unreachable.
    """
    well_no = validate_well_no(well_no)
    records = client.get_well_data(well_no)
    headers = property_set.headers if property_set is not None else None
    stamp = session.load_well(records, headers=headers)
    print(f"[WELL] Loaded {well_no} ({len(records)} record(s)), generation {stamp}")
    return stamp


def _prepare(session):
    """Validate the session's context and compact its input column."""
    if not session.is_initialized:
        raise InputError("Load a well first.")
    context = validate_context(session.context)
    original = session.grid.read_column(0)
    compacted = compact(original)
    if compacted.is_empty:
        raise InputError("No valid pressure values in the input column.")
    return context, original, compacted


def run_batch(session, client, property_set, stamp=None, progress_callback=None):
    """
    Batch path: one request for all populated rows, one bulk grid write.

    All-or-nothing: any transport or contract error propagates and the grid
    is left untouched.

    Args:
        session: CalculationSession.
        client: CalcServiceClient (or a test double with calculate()).
        property_set: PropertySet to compute.
        stamp: Generation the submission belongs to. Defaults to the current one.
        progress_callback: Optional callable(current, total, label).

    Returns:
        CalculationReport.
    """
    stamp = session.generation if stamp is None else stamp
    context, original, compacted = _prepare(session)
    report = CalculationReport(property_set.key, 'batch', rows_requested=len(compacted))

    if progress_callback:
        progress_callback(0, 1, property_set.batch_layout.endpoint)
    print(f"[BATCH] {property_set.batch_layout.endpoint}: {len(compacted)} of {len(original)} rows")

    results = client.calculate(property_set.batch_layout, compacted.dense, context)
    rows = reconcile(original, compacted.index_map, results, property_set.row_mapper)

    if not session.write_if_current(stamp, lambda: session.grid.bulk_write(rows)):
        print(f"[BATCH] Dropping stale result for generation {stamp}")
        report.stale = True
        return report

    report.rows_written = len(compacted)
    if progress_callback:
        progress_callback(1, 1, property_set.batch_layout.endpoint)
    return report


def run_sequential(session, client, property_set, stamp=None, on_event=None,
                   progress_callback=None, max_workers=None):
    """
    Fallback path: per-row stage chains written cell by cell.

    Blocks until every row task has finished (call it from a background
    thread). Stage failures are collected in the report and forwarded to
    on_event as they happen; they never raise.

    Raises:
        ValueError: If the property set has no stage chain.
        InputError / ValidationError: Before any remote call.
    """
    if not property_set.supports_sequential:
        raise ValueError(f"{property_set.title} can only be calculated in batch mode.")

    stamp = session.generation if stamp is None else stamp
    context, original, compacted = _prepare(session)
    report = CalculationReport(property_set.key, 'sequential', rows_requested=len(compacted))

    def forward(event):
        if isinstance(event, StageFailure):
            report.failures.append(event)
        if on_event:
            on_event(event)

    def guard(write):
        return session.write_if_current(stamp, write)

    # Clear previous results in one write; inputs are echoed unchanged
    cleared = [sentinel_row(cell) for cell in original]
    if not guard(lambda: session.grid.bulk_write(cleared)):
        report.stale = True
        return report

    pipeline = SequentialPipeline(property_set.stages, client, max_workers=max_workers, on_event=forward)
    outcomes = pipeline.start(context, original, session.grid, guard).wait(progress_callback)

    report.outcomes = outcomes
    report.stale = any(o.state == STALE for o in outcomes) or not session.is_current(stamp)
    report.rows_written = sum(1 for o in outcomes if o.completed)
    report.failures.sort(key=lambda f: (f.row, f.stage))
    complete = sum(1 for o in outcomes if o.state == COMPLETE)
    print(f"[PIPELINE] Done: {complete} complete, {len(report.failures)} stage failure(s)")
    return report


def calculate(session, client, property_set, mode=None, on_event=None,
              progress_callback=None, max_workers=None):
    """
    Compute property_set for the session's input column.

    Modes:
        batch: batch endpoint only.
        sequential: per-row stage chains only.
        auto: batch endpoint first; if the server does not provide it
            (404/405/501), fall back to the per-row chains. Any other
            failure aborts the submission.

    The generation stamp is captured here, so loading a well or switching the
    property set while this call is running makes its results stale instead
    of overwriting the new grid.
    """
    mode = mode or config.CALCULATION_MODE
    if mode not in config.CALCULATION_MODES:
        raise ValueError(f"Unknown calculation mode '{mode}'")

    stamp = session.generation

    if mode == 'sequential':
        return run_sequential(session, client, property_set, stamp, on_event,
                              progress_callback, max_workers)

    try:
        return run_batch(session, client, property_set, stamp, progress_callback)
    except TransportError as e:
        if mode == 'auto' and e.endpoint_missing and property_set.supports_sequential:
            print(f"[BATCH] {e}; falling back to per-row calculation")
            return run_sequential(session, client, property_set, stamp, on_event,
                                  progress_callback, max_workers)
        raise
