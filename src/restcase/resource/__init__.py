"""Generated resource classes and the request pipeline behind them."""

from .action import DEFAULT_ACTIONS, Action, Interceptor
from .factory import ResourceFactory
from .instance import ActionMethod, Resource, ResourceCollection
from .pipeline import RequestPipeline, Response

__all__ = [
    "Action",
    "ActionMethod",
    "DEFAULT_ACTIONS",
    "Interceptor",
    "RequestPipeline",
    "Resource",
    "ResourceCollection",
    "ResourceFactory",
    "Response",
]
