"""
Matrix-product operation rules.

`FULL_CONNECTED` owns two weights, created lazily from the input's channel
extent when the operation is built:

- ``weight``: (1, 1, 1, C_in, n_outputs), shared across all batch axes
- ``bias``:   (1, 1, 1, 1, n_outputs)
"""

from ....domain._errors import ShapeError
from ....domain._operation import OpKind
from ...tensor import Shape
from ...tensor.mixins._linalg import matmul_output_shape
from .._catalog import OperationCatalog


@OperationCatalog.register(OpKind.MATMUL)
class MatMulRule:
    """Batched ``x . y`` on the trailing two axes."""

    arity = 2

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return matmul_output_shape(*input_shapes)

    @staticmethod
    def compute(inputs, attrs):
        x, y = inputs
        return x.matmul(y)

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        x, y = inputs
        grad_x = grad_out.matmul(y.transpose())
        # y may be shared across batch axes
        grad_y = x.transpose().matmul(grad_out).sum_to(y.shape)
        return grad_x, grad_y


@OperationCatalog.register(OpKind.FULL_CONNECTED)
class FullConnectedRule:
    """Dense layer ``x . weight + bias``; attrs ``n_outputs`` and initializers."""

    arity = 1

    @staticmethod
    def build(input_shape, attrs):
        n_outputs = attrs["n_outputs"]
        return (
            (
                "weight",
                (1, 1, 1, input_shape[4], n_outputs),
                True,
                attrs.get("kernel_initializer", "uniform"),
                "dense",
            ),
            (
                "bias",
                (1, 1, 1, 1, n_outputs),
                True,
                attrs.get("bias_initializer", "uniform"),
                "dense",
            ),
        )

    @staticmethod
    def infer_shape(input_shapes, attrs):
        x, w, b = input_shapes
        out = matmul_output_shape(x, w)
        if b != Shape(1, 1, 1, 1, out[4]):
            raise ShapeError(
                "bias does not match the number of outputs",
                op="full_connected",
                shapes=(out, b),
            )
        return out

    @staticmethod
    def compute(inputs, attrs):
        x, w, b = inputs
        return x.matmul(w).add_channel_bias(b)

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        x, w, b = inputs
        return (
            grad_out.matmul(w.transpose()),
            x.transpose().matmul(grad_out).sum_to(w.shape),
            grad_out.sum_to(b.shape),
        )
