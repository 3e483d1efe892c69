"""URL templates and URI encoding."""

from .encoding import build_url, encode_uri_query, encode_uri_segment, stringify
from .route import Route, url_params

__all__ = [
    "Route",
    "url_params",
    "build_url",
    "encode_uri_query",
    "encode_uri_segment",
    "stringify",
]
