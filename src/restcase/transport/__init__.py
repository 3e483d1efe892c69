"""Transports: the pipeline's only suspension point."""

from .base import BODY_METHODS, RequestConfig, Transport, TransportResponse
from .http import HttpxTransport

__all__ = [
    "BODY_METHODS",
    "RequestConfig",
    "Transport",
    "TransportResponse",
    "HttpxTransport",
]
