"""
Domain layer: backend-agnostic contracts, enumerations and errors.
"""

from ._errors import (
    StatGraphError,
    ShapeError,
    AllocationError,
    UnboundPlaceholderError,
    NotEvaluatedError,
    UnknownOperationError,
    UnsupportedAxisError,
)
from ._axes import RANK, Axis, check_axis
from ._tensor import ITensor
from ._node import INode, NodeKind
from ._operation import OpKind, IOperationRule

__all__ = [
    StatGraphError.__name__,
    ShapeError.__name__,
    AllocationError.__name__,
    UnboundPlaceholderError.__name__,
    NotEvaluatedError.__name__,
    UnknownOperationError.__name__,
    UnsupportedAxisError.__name__,
    "RANK",
    Axis.__name__,
    check_axis.__name__,
    ITensor.__name__,
    INode.__name__,
    NodeKind.__name__,
    OpKind.__name__,
    IOperationRule.__name__,
]
