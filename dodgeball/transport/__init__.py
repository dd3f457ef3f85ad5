"""HTTP transport and request construction."""

from dodgeball.transport.builder import construct_api_headers, construct_api_url
from dodgeball.transport.client import HttpTransport, TransportError, TransportResult

__all__ = [
    "HttpTransport",
    "TransportError",
    "TransportResult",
    "construct_api_headers",
    "construct_api_url",
]
