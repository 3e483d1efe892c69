"""Testing utilities for resource clients."""

from .mock import Invocation, MockTransport

__all__ = ["Invocation", "MockTransport"]
