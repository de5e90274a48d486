"""Resource helpers built on the query builder and executor."""
from .products import Products

__all__ = ["Products"]
