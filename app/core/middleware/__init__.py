"""Core application middleware.

Imported in app_factory to compose the middleware stack.
"""

from .logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
