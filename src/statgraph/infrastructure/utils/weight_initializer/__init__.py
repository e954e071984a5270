"""
Weight initialization public API.

Importing this package registers the built-in initializers (``uniform``,
``zeros``, ``ones``, ``xavier``, ``xavier_uniform``, ``kaiming``) with the
`WeightInitializer` registry. Only the dispatcher is exported; initializer
functions are reached through their registry names.
"""

from ._constants import *
from ._xavier import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]
