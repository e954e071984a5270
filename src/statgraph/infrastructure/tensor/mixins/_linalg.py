"""
Matrix products on the trailing (HEIGHT, CHANNEL) axes.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ....domain._errors import ShapeError
from .._shape import Shape
from ._base import TensorMixinBase, allocates


def matmul_output_shape(lhs: Shape, rhs: Shape) -> Shape:
    """
    Validate a batched matrix product and return its output shape.

    Raises
    ------
    ShapeError
        On an inner-dimension mismatch, or a batch axis of `rhs` that is
        neither 1 nor equal to the one of `lhs`.
    """
    if lhs[4] != rhs[3]:
        raise ShapeError(
            f"inner dimensions differ ({lhs[4]} vs {rhs[3]})",
            op="matmul",
            shapes=(lhs, rhs),
        )
    for axis in range(3):
        if rhs[axis] not in (1, lhs[axis]):
            raise ShapeError(
                f"batch axis {axis} has sizes {lhs[axis]} and {rhs[axis]}",
                op="matmul",
                shapes=(lhs, rhs),
            )
    return Shape(lhs[0], lhs[1], lhs[2], lhs[3], rhs[4])


class TensorMixinLinalg(TensorMixinBase):
    """Mixin implementing batched matrix multiply and the Kronecker product."""

    @allocates
    def matmul(self, other: Any) -> Any:
        """
        Batched matrix product.

        The last two axes are the (rows x cols) matrix; the leading three axes
        are batch axes. A batch axis of `other` with size 1 is shared across
        the corresponding batch axis of `self` (weight sharing).

        Parameters
        ----------
        other : Tensor
            Right operand of shape (B0', B1', B2', K, N) with each ``Bi'``
            equal to ``Bi`` or 1.

        Returns
        -------
        Tensor
            Product of shape (B0, B1, B2, M, N).

        Raises
        ------
        ShapeError
            On an inner-dimension mismatch, or a batch axis of `other` that is
            neither 1 nor equal to the one of `self`.
        """
        matmul_output_shape(self._shape, other._shape)
        return self._new(np.matmul(self._data, other._data))

    def __matmul__(self, other: Any) -> Any:
        return self.matmul(other)

    @allocates
    def kronecker(self, other: Any) -> Any:
        """
        Kronecker product over all five axes.

        The result has shape ``self.shape[k] * other.shape[k]`` on every axis;
        block ``i`` of the result is ``self[i] * other``.
        """
        return self._new(np.kron(self._data, other._data))
