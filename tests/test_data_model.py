import math
import threading

import pytest

from conftest import WELL_RECORD
from logics.data_model import CalculationSession, WellContext
from logics.grid_model import FrameGridModel


def test_context_from_record():
    ctx = WellContext.from_record(WELL_RECORD)
    assert ctx.well_no == 'SN-12'
    assert ctx.tb == 375.0
    assert ctx.to_row() == ['SN-12', 3250.0, 293.15, 375.0, 0.62, 4.6, 195.0, 1.2, 2.5, 0.0]


def test_context_from_row_parses_text():
    ctx = WellContext.from_row(['W1', '100', ' 290 ', '350', '0.6', 'abc', '190', '0', '1', '2'])
    assert ctx.md == 100.0
    assert ctx.th == 290.0
    assert math.isnan(ctx.pc)


def test_context_is_immutable():
    ctx = WellContext.from_record(WELL_RECORD)
    with pytest.raises(Exception):
        ctx.pc = 1.0
    changed = ctx.with_values(pc=5.0)
    assert changed.pc == 5.0 and ctx.pc == 4.6


def test_session_generation_bumps_on_load():
    session = CalculationSession()
    assert not session.is_initialized
    first = session.load_well([WELL_RECORD])
    second = session.load_well([dict(WELL_RECORD, wellname='B')])
    assert second == first + 1
    assert session.is_current(second)
    assert not session.is_current(first)
    assert session.context.well_no == 'B'


def test_write_if_current_skips_stale_stamp():
    session = CalculationSession()
    stamp = session.load_well([WELL_RECORD])
    writes = []
    assert session.write_if_current(stamp, lambda: writes.append(stamp))
    session.load_well([WELL_RECORD])
    assert not session.write_if_current(stamp, lambda: writes.append('late'))
    assert writes == [stamp]


def test_well_load_waits_for_guarded_write():
    session = CalculationSession()
    stamp = session.load_well([WELL_RECORD])
    loader = threading.Thread(target=session.load_well, args=([dict(WELL_RECORD, wellname='B')],))

    def write():
        loader.start()
        loader.join(0.2)
        # The load cannot bump the generation while this write holds the session
        assert loader.is_alive()
        session.grid.write_cell(0, 1, 0.9)

    assert session.write_if_current(stamp, write)
    loader.join(5)
    assert session.context.well_no == 'B'
    assert not session.is_current(stamp)
    assert session.grid.read_cell(0, 1) is None


def test_switch_headers_keeps_inputs_and_bumps_generation():
    session = CalculationSession(headers=['P', 'Z'])
    first = session.load_well([WELL_RECORD])
    session.grid.bulk_write([(10.0, 0.9), (None, None), (12.0, 0.8)])

    second = session.switch_headers(['Pwh', 'Pwbs'])

    assert second == first + 1
    assert session.grid.headers == ['Pwh', 'Pwbs']
    assert session.grid.rows() == [[10.0, None], [None, None], [12.0, None]]

def test_session_load_requires_records():
    with pytest.raises(ValueError):
        CalculationSession().load_well([])


def test_grid_read_and_write():
    grid = FrameGridModel(['a', 'b', 'c'], row_count=3)
    grid.write_cell(1, 0, "12.5")
    grid.write_cell(2, 2, 0.3)
    assert grid.read_column(0) == [None, "12.5", None]
    assert grid.read_cell(2, 2) == 0.3
    assert len(grid) == 3


def test_grid_bulk_write_replaces_store():
    grid = FrameGridModel(['a', 'b'], row_count=5)
    grid.bulk_write([(1, 2), (None, None)])
    assert grid.rows() == [[1, 2], [None, None]]
    with pytest.raises(ValueError):
        grid.bulk_write([(1, 2, 3)])


def test_grid_set_input_column_grows_and_clears():
    grid = FrameGridModel(['in', 'out'], row_count=2)
    grid.bulk_write([(1, 9), (2, 9)])
    grid.set_input_column([5, 6, 7])
    assert grid.rows() == [[5, None], [6, None], [7, None]]


def test_grid_ensure_rows_and_clear_derived():
    grid = FrameGridModel(['in', 'out'], row_count=1)
    grid.bulk_write([(1, 9)])
    grid.ensure_rows(3)
    grid.clear_derived()
    assert grid.rows() == [[1, None], [None, None], [None, None]]


def test_grid_listeners():
    grid = FrameGridModel(['a'], row_count=1)
    seen = []
    listener = lambda kind, where: seen.append((kind, where))
    grid.add_listener(listener)
    grid.write_cell(0, 0, 1)
    grid.bulk_write([(2,)])
    grid.remove_listener(listener)
    grid.write_cell(0, 0, 3)
    assert seen == [('cell', (0, 0)), ('bulk', None)]


def test_grid_concurrent_cell_writes():
    grid = FrameGridModel(['a', 'b'], row_count=50)

    def fill(col):
        for row in range(50):
            grid.write_cell(row, col, row * 10 + col)

    threads = [threading.Thread(target=fill, args=(c,)) for c in (0, 1)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert grid.rows()[49] == [490, 491]
