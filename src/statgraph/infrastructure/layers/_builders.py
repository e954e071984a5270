"""
Builder functions that create `Operation` nodes.

Each builder validates its scalar arguments, packs them into the operation's
attribute mapping and returns the new node. Operations that own weights
(convolutions, fully connected) create them when a `Session` compiles the
graph, because their shapes depend on the input's channel extent.
"""

from __future__ import annotations

from typing import Optional

from ...domain._axes import Axis, check_axis
from ...domain._operation import OpKind
from ..graph._node import Node, Operation
from ..tensor import Shape
from ..tensor._shape import ShapeLike


def _positive(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{what} must be a positive integer, got {value!r}")
    return value


def _non_negative(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")
    return value


# ----------------------------
# Arithmetic
# ----------------------------
def add(x: Node, y: Node, name: Optional[str] = None) -> Operation:
    """``x + y`` (single-axis broadcast)."""
    return Operation(OpKind.ADD, [x, y], name=name)


def matmul(x: Node, y: Node, name: Optional[str] = None) -> Operation:
    """Batched matrix product on the trailing two axes."""
    return Operation(OpKind.MATMUL, [x, y], name=name)


# ----------------------------
# Convolution and pooling
# ----------------------------
def _conv(
    kind: OpKind,
    x: Node,
    width: int,
    n_filters: int,
    padding: int,
    stride: int,
    kernel_initializer: str,
    bias_initializer: str,
    name: Optional[str],
) -> Operation:
    attrs = {
        "width": _positive(width, "width"),
        "n_filters": _positive(n_filters, "n_filters"),
        "padding": _non_negative(padding, "padding"),
        "stride": _positive(stride, "stride"),
        "kernel_initializer": kernel_initializer,
        "bias_initializer": bias_initializer,
    }
    return Operation(kind, [x], attrs, name=name)


def conv2d(
    x: Node,
    width: int,
    n_filters: int,
    padding: int = 0,
    stride: int = 1,
    *,
    kernel_initializer: str = "uniform",
    bias_initializer: str = "uniform",
    name: Optional[str] = None,
) -> Operation:
    """
    2D convolution layer with a ``width x width`` kernel.

    Parameters
    ----------
    x : Node
        Input of shape (N, F, W, H, C).
    width : int
        Kernel side length.
    n_filters : int
        Number of output channels.
    padding : int
        Zeros added on both sides of the width and height axes.
    stride : int
        Spatial stride.
    kernel_initializer, bias_initializer : str
        Registered initializer names for the weights. Both default to
        ``"uniform"``, like every other Variable.

    Returns
    -------
    Operation
        Node producing (N, F, W', H', n_filters); it owns a kernel
        (n_filters, 1, width, width, C) and a bias (1, 1, 1, 1, n_filters).
    """
    return _conv(
        OpKind.CONV2D, x, width, n_filters, padding, stride,
        kernel_initializer, bias_initializer, name,
    )


def conv3d(
    x: Node,
    width: int,
    n_filters: int,
    padding: int = 0,
    stride: int = 1,
    *,
    kernel_initializer: str = "uniform",
    bias_initializer: str = "uniform",
    name: Optional[str] = None,
) -> Operation:
    """
    3D convolution layer sliding a ``width`` cube over frames, width and
    height. Padding applies to width and height only.
    """
    return _conv(
        OpKind.CONV3D, x, width, n_filters, padding, stride,
        kernel_initializer, bias_initializer, name,
    )


def max_pooling(x: Node, width: int, name: Optional[str] = None) -> Operation:
    """Non-overlapping ``width x width`` max pooling."""
    return Operation(OpKind.MAX_POOLING, [x], {"width": _positive(width, "width")}, name)


def min_pooling(x: Node, width: int, name: Optional[str] = None) -> Operation:
    """Non-overlapping ``width x width`` min pooling."""
    return Operation(OpKind.MIN_POOLING, [x], {"width": _positive(width, "width")}, name)


def avg_pooling(x: Node, width: int, name: Optional[str] = None) -> Operation:
    """Non-overlapping ``width x width`` average pooling."""
    return Operation(OpKind.AVG_POOLING, [x], {"width": _positive(width, "width")}, name)


# ----------------------------
# Layout
# ----------------------------
def reshape(x: Node, shape: ShapeLike, name: Optional[str] = None) -> Operation:
    """Reshape to a fixed five-axis shape."""
    return Operation(OpKind.RESHAPE, [x], {"shape": Shape.of(shape)}, name)


def flatten(x: Node, axis: int = Axis.WIDTH, name: Optional[str] = None) -> Operation:
    """Collapse axes ``axis..4`` into the channel axis."""
    return Operation(OpKind.FLATTEN, [x], {"axis": check_axis(axis, "flatten")}, name)


def full_connected(
    x: Node,
    n_outputs: int,
    *,
    kernel_initializer: str = "uniform",
    bias_initializer: str = "uniform",
    name: Optional[str] = None,
) -> Operation:
    """
    Dense layer ``x . weight + bias`` over the channel axis.

    The weight (1, 1, 1, C, n_outputs) and bias (1, 1, 1, 1, n_outputs) are
    created on compile from the input's channel extent C.
    """
    attrs = {
        "n_outputs": _positive(n_outputs, "n_outputs"),
        "kernel_initializer": kernel_initializer,
        "bias_initializer": bias_initializer,
    }
    return Operation(OpKind.FULL_CONNECTED, [x], attrs, name)


# ----------------------------
# Activations
# ----------------------------
def sigmoid(x: Node, name: Optional[str] = None) -> Operation:
    return Operation(OpKind.SIGMOID, [x], name=name)


def tanh(x: Node, name: Optional[str] = None) -> Operation:
    return Operation(OpKind.TANH, [x], name=name)


def relu(
    x: Node,
    max_value: Optional[float] = None,
    threshold: float = 0.0,
    name: Optional[str] = None,
) -> Operation:
    """Rectified linear unit, optionally saturating at `max_value`."""
    attrs = {"max_value": max_value, "threshold": threshold, "negative_slope": 0.0}
    return Operation(OpKind.RELU, [x], attrs, name)


def leaky_relu(
    x: Node,
    max_value: Optional[float] = None,
    threshold: float = 0.0,
    negative_slope: float = 0.01,
    name: Optional[str] = None,
) -> Operation:
    """ReLU passing ``negative_slope * (x - threshold)`` below `threshold`."""
    attrs = {
        "max_value": max_value,
        "threshold": threshold,
        "negative_slope": negative_slope,
    }
    return Operation(OpKind.LEAKY_RELU, [x], attrs, name)


def softmax(x: Node, axis: int = Axis.FRAME, name: Optional[str] = None) -> Operation:
    """Softmax along `axis` (the frame axis by default)."""
    return Operation(OpKind.SOFTMAX, [x], {"axis": check_axis(axis, "softmax")}, name)


# ----------------------------
# Losses
# ----------------------------
def mse(pred: Node, target: Node, name: Optional[str] = None) -> Operation:
    """Mean squared error, reduced to a (1, 1, 1, 1, 1) scalar."""
    return Operation(OpKind.MSE, [pred, target], name=name)


def cross_entropy(pred: Node, target: Node, name: Optional[str] = None) -> Operation:
    """Binary cross-entropy of probabilities `pred` against `target`."""
    return Operation(OpKind.CROSS_ENTROPY, [pred, target], name=name)
