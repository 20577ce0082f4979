"""Common middleware for boxoffice."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
