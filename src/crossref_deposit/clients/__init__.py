"""Network clients for registration agencies."""

from .client import Client
from .deposit_client import CrossrefDepositClient
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    MalformedResponseError,
    RemoteRejectionError,
)

__all__ = [
    "Client",
    "CrossrefDepositClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RemoteRejectionError",
    "MalformedResponseError",
]
