import requests

from logics import config
from logics import request_builder
from logics.errors import ContractError, InputError, TransportError


class CalcServiceClient:
    """
    JSON-over-HTTP client for the gas-property calculation service.

    Every call is a POST to {base_url}/api/{endpoint} with a bounded timeout.
    Failures are translated into the calculation error types:
        - connection errors, timeouts, non-2xx statuses -> TransportError
        - a body that is not the expected JSON shape -> ContractError

    Args:
        base_url: Service root, e.g. 'http://localhost:3000'.
        timeout: Seconds per request.
        session: Optional requests.Session (tests pass a fake one).
    """

    def __init__(self, base_url=None, timeout=None, session=None):
        self.base_url = (base_url or config.SERVICE_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ── Transport ────────────────────────────────────────────

    def post(self, endpoint, body):
        """POST body to an endpoint and return the decoded JSON."""
        url = f"{self.base_url}/api/{endpoint}"
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.Timeout:
            raise TransportError(f"{endpoint} timed out after {self.timeout:g}s", endpoint=endpoint)
        except requests.RequestException as e:
            raise TransportError(f"{endpoint} failed: {e}", endpoint=endpoint)

        try:
            response.raise_for_status()
        except requests.HTTPError:
            print(f"[HTTP] {endpoint} -> {response.status_code}")
            raise TransportError(
                f"{endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ContractError(f"{endpoint} did not return JSON")

    def calculate(self, layout, dense, context):
        """
        Build a request for layout and return the service's result list.

        Raises:
            TransportError: On any transport failure.
            ContractError: If the body is not a JSON array.
        """
        body = request_builder.build(dense, context, layout)
        result = self.post(layout.endpoint, body)
        if not isinstance(result, list):
            raise ContractError(f"{layout.endpoint} returned {type(result).__name__}, expected a list")
        return result

    # ── Endpoints ────────────────────────────────────────────

    def get_well_data(self, well_no):
        """
        Fetch the parameter records of one well.

        Raises:
            InputError: If the service knows no such well.
        """
        try:
            records = self.post('getWellData', {'well_no': well_no})
        except TransportError as e:
            if e.status == 404:
                raise InputError(f"No well data found for '{well_no}'.")
            raise
        if not isinstance(records, list):
            raise ContractError("getWellData did not return a list of records")
        if not records:
            raise InputError(f"No well data found for '{well_no}'.")
        return records

    def login(self, username, password):
        """Return True for valid credentials, False for any non-2xx answer."""
        try:
            self.post('login', {'username': username, 'password': password})
        except TransportError as e:
            if e.status is None:
                raise
            return False
        except ContractError:
            # The login endpoint answers with plain text
            pass
        return True
