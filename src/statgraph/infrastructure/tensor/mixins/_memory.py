"""
Layout and memory-movement operations for rank-5 tensors.

Includes reshape/permute/flatten/slice/transpose and the spatial border
helpers used by convolution gradients (padding, clipping, dilation, trailing
extension and 180-degree rotation). Every method returns a tensor with its own
buffer.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from ....domain._axes import RANK, Axis, check_axis
from ....domain._errors import ShapeError
from ...ops.conv_cpu import dilate_cpu, extend_to_cpu
from .._shape import Shape
from ._base import TensorMixinBase, allocates

_SPATIAL = (Axis.WIDTH, Axis.HEIGHT)


def _check_non_negative(value: Any, what: str, op: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ShapeError(f"{what} must be a non-negative integer, got {value!r}", op=op)
    return int(value)


class TensorMixinMemory(TensorMixinBase):
    """Mixin implementing reshapes, permutations and spatial border edits."""

    # ----------------------------
    # Reshaping
    # ----------------------------
    @allocates
    def reshape(self, shape: Any) -> Any:
        """
        Return the same elements (row-major order) laid out in `shape`.

        Raises
        ------
        ShapeError
            If `shape` holds a different number of elements.
        """
        target = Shape.of(shape)
        if target.count() != self._shape.count():
            raise ShapeError(
                f"cannot reshape {self._shape.count()} elements into {target.count()}",
                op="reshape",
                shapes=(self._shape, target),
            )
        return self._new(self._data.reshape(target.as_tuple()), copy=True)

    def flatten(self, axis: int = Axis.WIDTH) -> Any:
        """Collapse axes ``axis..4`` into the channel axis (see `Shape.flatten_from`)."""
        return self.reshape(self._shape.flatten_from(axis))

    @allocates
    def permute(self, order: Sequence[int]) -> Any:
        """
        Reorder the axes: result axis ``k`` is source axis ``order[k]``.

        Raises
        ------
        ShapeError
            If `order` is not a permutation of ``(0, 1, 2, 3, 4)``.
        """
        order = tuple(order)
        if len(order) != RANK or sorted(order) != list(range(RANK)):
            raise ShapeError(
                f"{order} is not a permutation of the five axes",
                op="permute",
                shapes=(self._shape,),
            )
        return self._new(np.transpose(self._data, order), copy=True)

    def transpose(self) -> Any:
        """Swap the last two axes (HEIGHT and CHANNEL)."""
        return self.permute((0, 1, 2, 4, 3))

    @allocates
    def slice(self, start: int, end: int, axis: int) -> Any:
        """
        Copy the half-open range ``[start, end)`` along `axis`.

        Raises
        ------
        UnsupportedAxisError
            If `axis` is outside ``0..4``.
        ShapeError
            If the range is empty or outside the axis extent.
        """
        axis = check_axis(axis, "slice")
        size = self._shape.dim(axis)
        if not 0 <= start < end <= size:
            raise ShapeError(
                f"range [{start}, {end}) is invalid for axis {axis} of size {size}",
                op="slice",
                shapes=(self._shape,),
            )
        index = [slice(None)] * RANK
        index[axis] = slice(start, end)
        return self._new(self._data[tuple(index)], copy=True)

    # ----------------------------
    # Spatial borders
    # ----------------------------
    @allocates
    def padding(self, width: int) -> Any:
        """Zero-pad `width` elements on both sides of the width and height axes."""
        width = _check_non_negative(width, "padding width", "padding")
        pad = [(0, 0)] * RANK
        for axis in _SPATIAL:
            pad[axis] = (width, width)
        return self._new(np.pad(self._data, pad))

    @allocates
    def clipping(self, margin: int) -> Any:
        """
        Crop `margin` elements from both sides of the width and height axes.

        This is the inverse of ``padding(margin)``.

        Raises
        ------
        ShapeError
            If nothing would remain on either spatial axis.
        """
        margin = _check_non_negative(margin, "clipping margin", "clipping")
        if margin == 0:
            return self._new(self._data, copy=True)
        for axis in _SPATIAL:
            if 2 * margin >= self._shape.dim(axis):
                raise ShapeError(
                    f"margin {margin} clips away axis {int(axis)}",
                    op="clipping",
                    shapes=(self._shape,),
                )
        return self._new(
            self._data[:, :, margin:-margin, margin:-margin, :], copy=True
        )

    @allocates
    def dilate(self, stride: int, axes: Sequence[int] = _SPATIAL) -> Any:
        """
        Insert ``stride - 1`` zeros between neighbouring elements along `axes`.

        An axis of length L becomes ``(L - 1) * stride + 1``. Used to turn a
        strided convolution's output gradient into a unit-stride one.
        """
        if isinstance(stride, bool) or not isinstance(stride, int) or stride < 1:
            raise ShapeError(f"stride must be a positive integer, got {stride!r}", op="dilate")
        checked = [check_axis(a, "dilate") for a in axes]
        return self._new(dilate_cpu(self._data, stride, checked))

    @allocates
    def extend_to(self, shape: Any) -> Any:
        """
        Zero-pad at the trailing end of every axis up to `shape`.

        Raises
        ------
        ShapeError
            If `shape` is smaller than this tensor on any axis.
        """
        target = Shape.of(shape)
        if any(dst < src for src, dst in zip(self._shape, target)):
            raise ShapeError(
                "target shape must not be smaller on any axis",
                op="extend_to",
                shapes=(self._shape, target),
            )
        return self._new(extend_to_cpu(self._data, target.as_tuple()))

    @allocates
    def rotate180(self) -> Any:
        """Reverse the traversal order of both the width and height axes."""
        return self._new(self._data[:, :, ::-1, ::-1, :], copy=True)
