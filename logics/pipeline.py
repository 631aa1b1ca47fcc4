import traceback
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from logics import config
from logics.errors import CalculationError, ContractError, InputError
from logics.reconciler import sanitize_value
from logics.sparse_array import compact
from logics.validation import validate_context


# Row states
PENDING = 'pending'
COMPLETE = 'complete'
PARTIAL = 'partial'
FAILED = 'failed'
STALE = 'stale'

# Stage name reported when a row task dies outside any stage
ROW_ABORTED = '_row'


@dataclass(frozen=True)
class Stage:
    """
    One step of a per-row calculation chain.

    Args:
        name: Key the stage produces in the row's value dict (e.g. 'z').
        compute: callable(client, context, values) -> float or dict.
            values holds everything earlier stages produced plus 'input'.
            A dict result may carry several keys; later stages whose key is
            already present are not called again.
        requires: Keys that must have been produced before this stage runs.
        column: Grid column the value is written to, or None for intermediates.
        display: Optional callable(value) -> cell value (e.g. 1/Bg).
    """
    name: str
    compute: Callable
    requires: Tuple[str, ...] = ()
    column: Optional[int] = None
    display: Optional[Callable] = None


@dataclass(frozen=True)
class StageFailure:
    """Structured report of one failed stage on one row."""
    row: int
    stage: str
    message: str
    error_type: str


@dataclass
class RowOutcome:
    row: int
    input_value: float
    state: str = PENDING
    values: Dict[str, float] = field(default_factory=dict)
    completed: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self):
        return self.state == COMPLETE


def remote_stage(name, layout, source='input', requires=None, column=None, display=None):
    """
    Stage that sends one value to a single-value endpoint.

    The endpoint must answer with a one-element list.
    """
    def compute(client, context, values):
        result = client.calculate(layout, [values[source]], context)
        if len(result) != 1:
            raise ContractError(f"{layout.endpoint} returned {len(result)} values for 1 input")
        value = sanitize_value(result[0])
        if value is None:
            raise ContractError(f"{layout.endpoint} returned a non-numeric value: {result[0]!r}")
        return value

    if requires is None:
        requires = () if source == 'input' else (source,)
    return Stage(name, compute, tuple(requires), column, display)


def ratio_stage(name, numerator, denominator, column=None):
    """Local stage: values[numerator] / values[denominator]."""
    def compute(client, context, values):
        den = values[denominator]
        if den == 0:
            raise ContractError(f"{denominator} is zero, cannot compute {name}")
        return values[numerator] / den

    return Stage(name, compute, (numerator, denominator), column)


def _unguarded(write):
    write()
    return True


class SequentialPipeline:
    """
    Per-row dependent calculation chain with per-stage failure isolation.

    Every populated row becomes one task on a worker pool. Within a row the
    stages run in order; a stage is skipped when a stage it requires did not
    succeed, and a failing stage only leaves its own column empty. Results are
    written cell by cell as they arrive, so rows may complete in any order.

    Args:
        stages: Ordered list of Stage.
        client: Service client (anything with calculate(layout, dense, context)).
        max_workers: Upper bound on concurrently running rows.
        on_event: Optional callable(event) receiving StageFailure and
            RowOutcome objects as they happen (called from worker threads).
    """

    def __init__(self, stages, client, max_workers=None, on_event=None):
        names = [s.name for s in stages]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate stage names: {names}")
        self.stages = list(stages)
        self.client = client
        self.max_workers = max_workers or config.PIPELINE_MAX_WORKERS
        self.on_event = on_event

    def start(self, context, original, grid, write_guard=None):
        """
        Validate, then launch one task per populated row without waiting.

        Args:
            context: WellContext snapshot; validated before any call.
            original: Raw input column.
            grid: GridModel receiving write_cell calls.
            write_guard: Optional callable(write) -> bool that runs write() and
                returns True, or returns False without running it once the
                submission is stale. Writes stop after the first False.

        Returns:
            PipelineRun handle; call wait() to collect the RowOutcome list.

        Raises:
            ValidationError / InputError: Before any task is started.
        """
        validate_context(context)
        compacted = compact(original)
        if compacted.is_empty:
            raise InputError("No valid pressure values in the input column.")

        write_guard = write_guard or _unguarded
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='pipeline')
        futures = {
            executor.submit(self._run_row, context, value, idx, grid, write_guard): idx
            for value, idx in zip(compacted.dense, compacted.index_map)
        }
        # Already-submitted tasks keep running; only the pool stops accepting work
        executor.shutdown(wait=False)
        print(f"[PIPELINE] Started {len(futures)} rows x {len(self.stages)} stages "
              f"on {self.max_workers} workers")
        return PipelineRun(futures)

    def run(self, context, original, grid, write_guard=None):
        """Blocking variant of start(): returns the RowOutcome list in row order."""
        return self.start(context, original, grid, write_guard).wait()

    # ── Row task ─────────────────────────────────────────────

    def _run_row(self, context, value, row, grid, write_guard):
        outcome = RowOutcome(row=row, input_value=value)
        outcome.values['input'] = value
        try:
            self._run_stages(context, outcome, grid, write_guard)
        except Exception as e:
            # Unexpected bug in a stage definition; keep it inside this row
            print(f"[ERROR] Row {row} aborted: {e}")
            traceback.print_exc()
            self._record_failure(outcome, ROW_ABORTED, e)
        outcome.state = self._final_state(outcome)
        self._emit(outcome)
        return outcome

    def _run_stages(self, context, outcome, grid, write_guard):
        for stage in self.stages:
            if outcome.state == STALE:
                return

            missing = [r for r in stage.requires if r not in outcome.values]
            if missing:
                outcome.skipped.append(stage.name)
                continue

            if stage.name not in outcome.values:
                try:
                    produced = stage.compute(self.client, context, dict(outcome.values))
                except (CalculationError, ArithmeticError) as e:
                    self._record_failure(outcome, stage.name, e)
                    continue
                if isinstance(produced, dict):
                    for key, v in produced.items():
                        v = sanitize_value(v)
                        if v is not None:
                            outcome.values.setdefault(key, v)
                    if stage.name not in outcome.values:
                        self._record_failure(
                            outcome, stage.name,
                            ContractError(f"{stage.name} missing from stage result"),
                        )
                        continue
                else:
                    outcome.values[stage.name] = produced

            outcome.completed.append(stage.name)
            outcome.state = f"{stage.name}_done"

            if stage.column is not None:
                cell = outcome.values[stage.name]
                if stage.display is not None:
                    cell = stage.display(cell)
                if not write_guard(lambda: grid.write_cell(outcome.row, stage.column, cell)):
                    outcome.state = STALE
                    return

    def _record_failure(self, outcome, stage_name, error):
        outcome.failures[stage_name] = str(error)
        failure = StageFailure(outcome.row, stage_name, str(error), type(error).__name__)
        print(f"[PIPELINE] Row {outcome.row}: stage '{stage_name}' failed: {error}")
        self._emit(failure)

    @staticmethod
    def _final_state(outcome):
        if outcome.state == STALE:
            return STALE
        if not outcome.failures and not outcome.skipped:
            return COMPLETE
        return PARTIAL if outcome.completed else FAILED

    def _emit(self, event):
        if self.on_event is None:
            return
        try:
            self.on_event(event)
        except Exception:
            traceback.print_exc()


class PipelineRun:
    """Handle on a started pipeline. Rows keep running whether or not wait() is called."""

    def __init__(self, futures):
        self._futures = futures

    def __len__(self):
        return len(self._futures)

    def wait(self, progress_callback=None):
        """
        Block until every row has finished.

        Args:
            progress_callback: Optional callable(done_count, total, row_label).

        Returns:
            list of RowOutcome sorted by row.
        """
        outcomes = []
        total = len(self._futures)
        for future in as_completed(self._futures):
            outcome = future.result()
            outcomes.append(outcome)
            if progress_callback:
                progress_callback(len(outcomes), total, f"row {outcome.row + 1}")
        return sorted(outcomes, key=lambda o: o.row)
