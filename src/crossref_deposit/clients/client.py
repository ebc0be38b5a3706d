"""Base client for network requests."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from .exceptions import APIError, ConnectionError

logger = logging.getLogger(__name__)


class Client(ABC):
    """Base class for network clients.

    Provides lazy-initialized httpx.Client with context manager support,
    configurable timeout and headers via dict config. Each request is made
    exactly once; scheduling repeated attempts is left to the caller.

    Config keys:
        base_url (required): Base URL for relative request paths
        timeout: Request timeout in seconds (default: 30)
        headers: Additional headers to include in requests
    """

    def __init__(self, config: dict):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"])

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.get("headers", {}))

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Args:
            response: The HTTP response to check

        Returns:
            The response if successful

        Raises:
            APIError: For non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code
        raise APIError(
            f"API error {status_code}: {response.url}",
            status_code=status_code,
            response=response,
        )

    def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> httpx.Response:
        """Make a single request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: URL path (appended to base_url) or absolute URL
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            The HTTP response

        Raises:
            ConnectionError: If the request fails before a usable response
                arrives (transport, decoding or redirect errors)
            APIError: If the API returns a non-2xx response
        """
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"Request error for {method} {path}: {e}")
            raise ConnectionError(f"Request to {path} failed: {e}") from e
        return self._handle_response(response)

    def post(self, path: str, **kwargs) -> httpx.Response:
        """Convenience method for POST requests.

        Args:
            path: URL path (appended to base_url) or absolute URL
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            The HTTP response
        """
        return self._request("POST", path, **kwargs)

    @abstractmethod
    def deposit(self, *args, **kwargs) -> Any:
        """Send a document to the API. Must be implemented by subclasses."""
        pass
