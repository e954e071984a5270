"""
Reduction operations for rank-5 tensors.

Reductions keep the rank: a reduced axis collapses to size 1 rather than
disappearing, so results can be broadcast back against their source under the
single-axis rule.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ....domain._axes import RANK, check_axis
from ....domain._errors import ShapeError
from .._shape import Shape
from ._base import TensorMixinBase, allocates


class TensorMixinReduction(TensorMixinBase):
    """Mixin implementing sum / mean reductions and extrema."""

    @allocates
    def reduce_sum(self, axis: Optional[int] = None) -> Any:
        """
        Sum along one axis, or over all five axes.

        Parameters
        ----------
        axis : Optional[int]
            Axis in ``0..4`` to collapse to size 1. ``None`` collapses every
            axis and returns a (1, 1, 1, 1, 1) tensor.

        Returns
        -------
        Tensor
            Reduced tensor.

        Raises
        ------
        UnsupportedAxisError
            If `axis` is outside ``0..4``.
        """
        if axis is None:
            return self._new(self._data.sum(keepdims=True, axis=tuple(range(RANK))))
        axis = check_axis(axis, "reduce_sum")
        return self._new(self._data.sum(axis=axis, keepdims=True))

    def reduce_mean(self, axis: Optional[int] = None) -> Any:
        """
        Mean along one axis (``reduce_sum(axis) / dim(axis)``), or over all axes.
        """
        if axis is None:
            return self.reduce_sum(None) / self._shape.count()
        axis = check_axis(axis, "reduce_mean")
        return self.reduce_sum(axis) / self._shape.dim(axis)

    @allocates
    def sum_to(self, shape: Any) -> Any:
        """
        Sum over every axis where `shape` has size 1 and this tensor does not.

        This undoes a single-axis (or batch) broadcast when propagating
        gradients back to the smaller operand.

        Raises
        ------
        ShapeError
            If `shape` differs from this tensor's shape on an axis where the
            target size is not 1.
        """
        target = Shape.of(shape)
        axes = []
        for axis, (src, dst) in enumerate(zip(self._shape, target)):
            if src == dst:
                continue
            if dst != 1:
                raise ShapeError(
                    f"cannot sum axis {axis} from {src} to {dst}",
                    op="sum_to",
                    shapes=(self._shape, target),
                )
            axes.append(axis)
        if not axes:
            return self._new(self._data, copy=True)
        return self._new(self._data.sum(axis=tuple(axes), keepdims=True))

    def find_max(self) -> float:
        """Return the largest element as a Python float."""
        return float(self._data.max())

    def find_min(self) -> float:
        """Return the smallest element as a Python float."""
        return float(self._data.min())
