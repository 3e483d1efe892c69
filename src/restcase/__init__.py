"""Restcase - declarative REST resource clients with an entity cache.

Describe an endpoint once (url template, parameter defaults, actions) and get
a resource class whose actions send HTTP requests, merge responses into
identity-stable instances and serve repeated reads from a cache.

Quick Start:
    >>> from restcase import HttpxTransport, ResourceFactory
    >>>
    >>> factory = ResourceFactory(HttpxTransport(base_url="https://api.example.com"))
    >>> Volume = factory("volume", "/api/volume/:id", {"id": "@id"})
    >>>
    >>> volume = Volume.get({"id": 7})          # pending instance, returned immediately
    >>> await volume                            # GET /api/volume/7
    >>> volume.name
    'X'
    >>> await Volume.get({"id": 7})             # served from the "volume" cache

Calling styles:
    >>> Volume.get({"id": 7}, on_success)                     # positional
    >>> Volume.save(params={"id": 7}, data={"name": "Y"})     # named
    >>> await volume.save()                                   # instance shorthand

Interceptors:
    >>> Volume = factory("volume", "/api/volume/:id", actions={
    ...     "get": {"method": "GET", "interceptor": {"response": lambda r: r.data}},
    ... })
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from .errors import (
    BadArgumentCount,
    BadMemberPath,
    BadParamName,
    BadResponseShape,
    ErrorCode,
    ResourceError,
    ResourceException,
    TransportError,
    classify_exception,
)

# Configuration & logging
from .config import RestcaseSettings, clear_settings_cache, get_settings
from .log import configure_logging

# Building blocks
from .routing import Route, build_url, encode_uri_query, encode_uri_segment
from .params import extract_params, is_valid_dotted_path, lookup_dotted_path
from .signature import ActionCall

# Cache
from .cache import CacheAdapter, CacheStore, MemoryResourceCache, NullCache

# Transport
from .transport import HttpxTransport, RequestConfig, Transport, TransportResponse

# Resources
from .resource import (
    DEFAULT_ACTIONS,
    Action,
    Interceptor,
    RequestPipeline,
    Resource,
    ResourceCollection,
    ResourceFactory,
    Response,
)

__all__ = [
    "__version__",
    # Errors
    "ErrorCode", "ResourceError", "ResourceException", "classify_exception",
    "BadMemberPath", "BadParamName", "BadArgumentCount", "BadResponseShape", "TransportError",
    # Configuration & logging
    "RestcaseSettings", "get_settings", "clear_settings_cache", "configure_logging",
    # Building blocks
    "Route", "build_url", "encode_uri_query", "encode_uri_segment",
    "extract_params", "lookup_dotted_path", "is_valid_dotted_path",
    "ActionCall",
    # Cache
    "CacheAdapter", "CacheStore", "MemoryResourceCache", "NullCache",
    # Transport
    "Transport", "RequestConfig", "TransportResponse", "HttpxTransport",
    # Resources
    "Action", "Interceptor", "DEFAULT_ACTIONS",
    "Resource", "ResourceCollection", "ResourceFactory",
    "RequestPipeline", "Response",
]
