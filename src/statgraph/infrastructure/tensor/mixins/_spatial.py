"""
Convolution, pooling and upsampling on the spatial axes.

Geometry is validated here, before any kernel from `infrastructure.ops` runs,
so shape problems surface as `ShapeError` without allocating an output.

Filter layout is (K, D, KW, KH, C): K filters, depth D over frames (always 1
for `conv2d`), a KW x KH spatial window, and C input channels.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from ....domain._errors import ShapeError
from ...ops.conv_cpu import (
    conv2d_forward_cpu,
    conv3d_forward_cpu,
    correlate_backward_filter_cpu,
    correlate_backward_input_cpu,
    output_extent,
)
from ...ops.pool_cpu import pool2d_forward_cpu, pool2d_route_backward_cpu
from .._shape import Shape
from ._base import TensorMixinBase, allocates


def _check_positive(value: Any, what: str, op: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ShapeError(f"{what} must be a positive integer, got {value!r}", op=op)
    return int(value)


def conv_output_shape(
    input_shape: Shape, filter_shape: Shape, stride: int, *, volumetric: bool
) -> Shape:
    """
    Validate a convolution's geometry and return its output shape.

    Parameters
    ----------
    input_shape : Shape
        (N, F, W, H, C).
    filter_shape : Shape
        (K, D, KW, KH, C); ``D`` must be 1 unless `volumetric`.
    stride : int
        Stride on width/height, and on frames when `volumetric`.
    volumetric : bool
        True for `conv3d`.

    Raises
    ------
    ShapeError
        On a channel mismatch, a non-positive stride, a filter larger than the
        input, or (2D only) a filter depth other than 1.
    """
    op = "conv3d" if volumetric else "conv2d"
    stride = _check_positive(stride, "stride", op)
    n, f, w, h, c = input_shape
    k, kd, kw, kh, kc = filter_shape

    if kc != c:
        raise ShapeError(
            f"filter has {kc} channels, input has {c}",
            op=op,
            shapes=(input_shape, filter_shape),
        )
    if not volumetric and kd != 1:
        raise ShapeError(
            f"2D filters must have depth 1, got {kd}",
            op=op,
            shapes=(input_shape, filter_shape),
        )
    if kw > w or kh > h or (volumetric and kd > f):
        raise ShapeError(
            "filter is larger than the input",
            op=op,
            shapes=(input_shape, filter_shape),
        )

    f_out = output_extent(f, kd, stride) if volumetric else f
    return Shape(n, f_out, output_extent(w, kw, stride), output_extent(h, kh, stride), k)


def pool_output_shape(input_shape: Shape, width: int, op: str) -> Shape:
    """
    Validate a pooling window and return the pooled shape.

    Raises
    ------
    ShapeError
        If `width` is not positive or exceeds the width or height extent.
    """
    width = _check_positive(width, "pooling width", op)
    n, f, w, h, c = input_shape
    if width > w or width > h:
        raise ShapeError(
            f"window {width} is larger than the spatial extent ({w}, {h})",
            op=op,
            shapes=(input_shape,),
        )
    return Shape(n, f, w // width, h // width, c)


class TensorMixinSpatial(TensorMixinBase):
    """Mixin implementing convolution, pooling and their reverse operations."""

    # ----------------------------
    # Convolution
    # ----------------------------
    def _check_bias(self, bias: Any, filters: int, op: str) -> None:
        if bias is not None and bias._shape.as_tuple() != (1, 1, 1, 1, filters):
            raise ShapeError(
                f"bias must have shape (1, 1, 1, 1, {filters})",
                op=op,
                shapes=(bias._shape,),
            )

    @allocates
    def conv2d(self, filter: Any, bias: Optional[Any] = None, stride: int = 1) -> Any:
        """
        Valid 2D cross-correlation over width/height, applied per frame.

        Parameters
        ----------
        filter : Tensor
            Filters of shape (K, 1, KW, KH, C).
        bias : Optional[Tensor]
            Per-filter bias of shape (1, 1, 1, 1, K).
        stride : int
            Spatial stride (>= 1).

        Returns
        -------
        Tensor
            Output of shape (N, F, (W-KW)//stride+1, (H-KH)//stride+1, K).
        """
        conv_output_shape(self._shape, filter._shape, stride, volumetric=False)
        self._check_bias(bias, filter._shape[0], "conv2d")
        b = None if bias is None else bias._data
        return self._new(conv2d_forward_cpu(self._data, filter._data, b, stride))

    @allocates
    def conv3d(self, filter: Any, bias: Optional[Any] = None, stride: int = 1) -> Any:
        """
        Valid 3D cross-correlation sliding over frames, width and height.

        The filter is (K, D, KW, KH, C); the output frame extent is
        ``(F - D) // stride + 1``.
        """
        conv_output_shape(self._shape, filter._shape, stride, volumetric=True)
        self._check_bias(bias, filter._shape[0], "conv3d")
        b = None if bias is None else bias._data
        return self._new(conv3d_forward_cpu(self._data, filter._data, b, stride))

    @allocates
    def conv_filter_grad(
        self, grad: Any, filter_shape: Any, stride: int = 1, *, volumetric: bool = False
    ) -> Any:
        """
        Gradient of a convolution with respect to its filter.

        ``self`` is the convolution input and `grad` the gradient of its
        output; the result has `filter_shape`.
        """
        filter_shape = Shape.of(filter_shape)
        strides: Tuple[int, int, int] = (stride if volumetric else 1, stride, stride)
        return self._new(
            correlate_backward_filter_cpu(
                self._data, grad._data, filter_shape.as_tuple(), strides
            )
        )

    @allocates
    def conv_input_grad(
        self, filter: Any, input_shape: Any, stride: int = 1, *, volumetric: bool = False
    ) -> Any:
        """
        Gradient of a convolution with respect to its input, by direct scatter.

        ``self`` is the output gradient; the result has `input_shape`.
        """
        input_shape = Shape.of(input_shape)
        strides: Tuple[int, int, int] = (stride if volumetric else 1, stride, stride)
        return self._new(
            correlate_backward_input_cpu(
                self._data, filter._data, input_shape.as_tuple(), strides
            )
        )

    # ----------------------------
    # Pooling
    # ----------------------------
    @allocates
    def max_pooling(self, width: int) -> Any:
        """Maximum over non-overlapping ``width x width`` windows."""
        pool_output_shape(self._shape, width, "max_pooling")
        return self._new(pool2d_forward_cpu(self._data, width, "max"))

    @allocates
    def min_pooling(self, width: int) -> Any:
        """Minimum over non-overlapping ``width x width`` windows."""
        pool_output_shape(self._shape, width, "min_pooling")
        return self._new(pool2d_forward_cpu(self._data, width, "min"))

    @allocates
    def avg_pooling(self, width: int) -> Any:
        """Window sum divided by ``width ** 2``."""
        pool_output_shape(self._shape, width, "avg_pooling")
        return self._new(pool2d_forward_cpu(self._data, width, "avg"))

    # ----------------------------
    # Upsampling (pooling reversal)
    # ----------------------------
    def _route(self, input: Any, width: int, mode: str) -> Any:
        op = f"{mode}_upsampling"
        pooled = pool_output_shape(input._shape, width, op)
        if self._shape != pooled:
            raise ShapeError(
                f"expected pooled shape {pooled.as_tuple()}",
                op=op,
                shapes=(self._shape, input._shape),
            )
        return self._new(pool2d_route_backward_cpu(self._data, input._data, width, mode))

    @allocates
    def max_upsampling(self, input: Any, width: int) -> Any:
        """
        Send each pooled value to the position of its window's maximum in `input`.

        On ties the first position (row-major within the window) wins. Every
        other position, including uncovered trailing rows/columns, is zero.
        """
        return self._route(input, width, "max")

    @allocates
    def min_upsampling(self, input: Any, width: int) -> Any:
        """Like `max_upsampling`, routing to each window's minimum."""
        return self._route(input, width, "min")

    @allocates
    def avg_upsampling(self, width: int, shape: Any) -> Any:
        """
        Spread each value uniformly (divided by ``width ** 2``) over its window.

        Parameters
        ----------
        width : int
            Pooling window used in the forward pass.
        shape : Shape-like
            Shape of the pooled input; trailing rows/columns not covered by a
            window are zero.
        """
        target = Shape.of(shape)
        pooled = pool_output_shape(target, width, "avg_upsampling")
        if self._shape != pooled:
            raise ShapeError(
                f"expected pooled shape {pooled.as_tuple()}",
                op="avg_upsampling",
                shapes=(self._shape, target),
            )
        window = type(self).full((1, 1, width, width, 1), 1.0 / (width * width))
        return self.kronecker(window).extend_to(target)

