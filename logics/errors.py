class CalculationError(Exception):
    """Base class for every error the calculation layer reports to the user."""
    pass


class InputError(CalculationError):
    """No usable input (no valid pressures, empty well number). No request is issued."""
    pass


class ValidationError(CalculationError):
    """A well parameter is non-finite or out of range. No request is issued."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class TransportError(CalculationError):
    """
    Non-success HTTP status, network failure or timeout while calling the service.

    Args:
        message: Human readable description.
        endpoint: Endpoint name, e.g. 'calculateBatchPVT'.
        status: HTTP status code, or None when no response was received.
    """

    def __init__(self, message, endpoint=None, status=None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status

    @property
    def endpoint_missing(self):
        """True when the server does not provide the endpoint at all."""
        return self.status in (404, 405, 501)


class ContractError(CalculationError):
    """The service answered with a payload that cannot be aligned with the request."""
    pass
