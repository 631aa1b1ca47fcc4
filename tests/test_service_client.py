import pytest
import requests

from logics import request_builder as rb
from logics.errors import ContractError, InputError, TransportError
from logics.service_client import CalcServiceClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._text is not None:
            raise ValueError("not json")
        return self._payload


class FakeHTTPSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response or FakeResponse()
        self.error = error
        self.requests = []
        self.closed = False

    def post(self, url, json=None, timeout=None):
        self.requests.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def make_client(**kwargs):
    http = FakeHTTPSession(**kwargs)
    return CalcServiceClient(base_url='http://calc.local/', timeout=5, session=http), http


def test_post_sends_json_with_timeout(context):
    payload = [{'z': 0.9, 'p_over_z': 1, 'bg': 1, 'niandu': 1, 'cg': 1, 'density': 1}]
    client, http = make_client(response=FakeResponse(200, payload))

    result = client.calculate(rb.BATCH_PVT, [10.0], context)

    assert result == payload
    url, body, timeout = http.requests[0]
    assert url == 'http://calc.local/api/calculateBatchPVT'
    assert body['pressures'] == [10.0]
    assert timeout == 5
    assert http.headers['Content-Type'] == 'application/json'


def test_http_error_becomes_transport_error(context):
    client, _ = make_client(response=FakeResponse(404))
    with pytest.raises(TransportError) as exc:
        client.calculate(rb.BATCH_PB, [1.0], context)
    assert exc.value.status == 404
    assert exc.value.endpoint == 'calculateBatchPb'
    assert exc.value.endpoint_missing


def test_server_error_is_not_missing_endpoint(context):
    client, _ = make_client(response=FakeResponse(500))
    with pytest.raises(TransportError) as exc:
        client.calculate(rb.Z, [1.0], context)
    assert not exc.value.endpoint_missing


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_network_failures(context, error):
    client, _ = make_client(error=error)
    with pytest.raises(TransportError) as exc:
        client.calculate(rb.Z, [1.0], context)
    assert exc.value.status is None


def test_non_list_payload_is_contract_error(context):
    client, _ = make_client(response=FakeResponse(200, {'z': 1}))
    with pytest.raises(ContractError):
        client.calculate(rb.Z, [1.0], context)


def test_invalid_json_is_contract_error(context):
    client, _ = make_client(response=FakeResponse(200, text='oops'))
    with pytest.raises(ContractError):
        client.calculate(rb.Z, [1.0], context)


def test_get_well_data():
    records = [{'wellname': 'SN-12', 'md': 1}]
    client, http = make_client(response=FakeResponse(200, records))
    assert client.get_well_data('SN-12') == records
    assert http.requests[0][1] == {'well_no': 'SN-12'}


@pytest.mark.parametrize("response", [FakeResponse(404), FakeResponse(200, [])])
def test_unknown_well_is_input_error(response):
    client, _ = make_client(response=response)
    with pytest.raises(InputError):
        client.get_well_data('NOPE')


def test_login():
    client, http = make_client(response=FakeResponse(200, text='ok'))
    assert client.login('alice', 'secret') is True
    assert http.requests[0][1] == {'username': 'alice', 'password': 'secret'}

    client, _ = make_client(response=FakeResponse(401))
    assert client.login('alice', 'wrong') is False


def test_login_network_failure_raises():
    client, _ = make_client(error=requests.ConnectionError("down"))
    with pytest.raises(TransportError):
        client.login('alice', 'secret')


def test_context_manager_closes_session():
    http = FakeHTTPSession()
    with CalcServiceClient(session=http):
        pass
    assert http.closed
