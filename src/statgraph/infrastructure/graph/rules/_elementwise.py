"""
Elementwise operation rules: addition and activations.

Activation gradients are expressed through the cached forward output where
that is cheaper than re-evaluating the function (sigmoid, tanh, softmax), and
through the cached input otherwise (ReLU family).
"""

from ....domain._axes import Axis
from ....domain._operation import OpKind
from ...tensor import Shape
from ...tensor.mixins._arithmetic import broadcast_axis
from .._catalog import OperationCatalog


@OperationCatalog.register(OpKind.ADD)
class AddRule:
    """``x + y`` under the single-axis broadcast rule."""

    arity = 2

    @staticmethod
    def infer_shape(input_shapes, attrs):
        x, y = input_shapes
        broadcast_axis(x.as_tuple(), y.as_tuple(), "add")
        return Shape(max(a, b) for a, b in zip(x, y))

    @staticmethod
    def compute(inputs, attrs):
        x, y = inputs
        return x + y

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        # a broadcast operand receives the sum over its repeated axis
        x, y = inputs
        return grad_out.sum_to(x.shape), grad_out.sum_to(y.shape)


class _UnaryShape:
    arity = 1

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return input_shapes[0]


@OperationCatalog.register(OpKind.SIGMOID)
class SigmoidRule(_UnaryShape):
    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].sigmoid()

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out * output * (1.0 - output),)


@OperationCatalog.register(OpKind.TANH)
class TanhRule(_UnaryShape):
    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].tanh()

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out * (1.0 - output * output),)


def _relu_params(attrs, default_slope):
    return (
        attrs.get("max_value"),
        attrs.get("threshold", 0.0),
        attrs.get("negative_slope", default_slope),
    )


@OperationCatalog.register(OpKind.RELU)
class ReluRule(_UnaryShape):
    """Generalized ReLU; attrs ``max_value``, ``threshold``, ``negative_slope``."""

    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].relu(*_relu_params(attrs, 0.0))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out * inputs[0].relu_grad(*_relu_params(attrs, 0.0)),)


LEAKY_RELU_SLOPE = 0.01


@OperationCatalog.register(OpKind.LEAKY_RELU)
class LeakyReluRule(_UnaryShape):
    """ReLU with a non-zero default ``negative_slope`` of 0.01."""

    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].relu(*_relu_params(attrs, LEAKY_RELU_SLOPE))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        mask = inputs[0].relu_grad(*_relu_params(attrs, LEAKY_RELU_SLOPE))
        return (grad_out * mask,)


@OperationCatalog.register(OpKind.SOFTMAX)
class SoftmaxRule(_UnaryShape):
    """Softmax along ``attrs["axis"]`` (frame axis by default)."""

    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].softmax(attrs.get("axis", Axis.FRAME))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        axis = attrs.get("axis", Axis.FRAME)
        # s * (g - sum_axis(g * s))
        dot = (grad_out * output).reduce_sum(axis)
        return (output * (grad_out - dot),)
