import threading

import pytest

from logics import request_builder
from logics.data_model import CalculationSession, WellContext
from logics.errors import TransportError


WELL_RECORD = {
    'wellname': 'SN-12', 'md': 3250.0, 'th': 293.15, 'tb': 375.0, 'rg': 0.62,
    'pc': 4.6, 'tc': 195.0, 'n2': 1.2, 'co2': 2.5, 'h2s': 0.0,
}


class FakeClient:
    """
    Stand-in for CalcServiceClient.

    handlers maps endpoint name -> callable(body) returning the decoded JSON.
    An endpoint without a handler answers like a server that lacks it (404).
    """

    def __init__(self, handlers=None, records=None):
        self.handlers = dict(handlers or {})
        self.records = records if records is not None else [dict(WELL_RECORD)]
        self.calls = []
        self._lock = threading.Lock()

    def calculate(self, layout, dense, context):
        body = request_builder.build(dense, context, layout)
        with self._lock:
            self.calls.append((layout.endpoint, body))
        handler = self.handlers.get(layout.endpoint)
        if handler is None:
            raise TransportError(f"{layout.endpoint} returned HTTP 404", layout.endpoint, 404)
        return handler(body)

    def get_well_data(self, well_no):
        with self._lock:
            self.calls.append(('getWellData', {'well_no': well_no}))
        return [dict(r, wellname=well_no) for r in self.records]

    def endpoints_called(self):
        return [endpoint for endpoint, _ in self.calls]


def per_value(fn):
    """Handler for single-value endpoints: apply fn to every pressure."""
    def handler(body):
        values = body.get('pressures', body.get('pts'))
        if isinstance(values, list):
            return [fn(v) for v in values]
        return [fn(values)]
    return handler


def failing(status=500):
    def handler(body):
        raise TransportError(f"HTTP {status}", status=status)
    return handler


@pytest.fixture
def context():
    return WellContext.from_record(WELL_RECORD)


@pytest.fixture
def session():
    s = CalculationSession()
    s.load_well([dict(WELL_RECORD)])
    return s


@pytest.fixture
def fake_client():
    return FakeClient()
