"""
Rank-5 tensor engine.

Exports the `Shape` descriptor and the NumPy-backed `Tensor`.
"""

from ._shape import Shape
from ._tensor import Tensor

__all__ = [
    Shape.__name__,
    Tensor.__name__,
]
