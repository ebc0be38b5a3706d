"""Custom exceptions for network clients."""

import httpx


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConnectionError(ClientError):
    """Raised when the endpoint cannot be reached or the request times out."""

    pass


class APIError(ClientError):
    """Raised when the API returns a non-2xx response."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response: httpx.Response | None = None,
        *args,
        **kwargs,
    ):
        self.status_code = status_code
        self.response = response
        super().__init__(message, *args, **kwargs)


class RemoteRejectionError(APIError):
    """Raised when the agency received a deposit but rejected it.

    Either the endpoint answered with its rejection status code, or a
    successful exchange reported a non-zero failure count.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        batch_id: str | None = None,
        diagnostic: str | None = None,
        response: httpx.Response | None = None,
    ):
        self.batch_id = batch_id
        self.diagnostic = diagnostic
        super().__init__(message, status_code=status_code, response=response)


class MalformedResponseError(ClientError):
    """Raised when a response that should be parseable is not."""

    pass
