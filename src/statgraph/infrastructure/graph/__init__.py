"""
Static computation graph runtime.

Importing this package registers the built-in operation rules.
"""

from . import rules
from ._catalog import OperationCatalog, OperationRule
from ._node import Node, Variable, Placeholder, Operation
from ._graph import Graph, collect
from ._session import Session

__all__ = [
    OperationCatalog.__name__,
    OperationRule.__name__,
    Node.__name__,
    Variable.__name__,
    Placeholder.__name__,
    Operation.__name__,
    Graph.__name__,
    collect.__name__,
    Session.__name__,
]
