"""
Convolution operation rules.

Both kinds own a kernel and a bias, created lazily from the input channel
extent:

- CONV2D kernel: (n_filters, 1, width, width, C_in)
- CONV3D kernel: (n_filters, width, width, width, C_in)
- bias:          (1, 1, 1, 1, n_filters)

Attributes: ``width``, ``n_filters``, ``padding`` (zeros added on both sides
of the width and height axes before correlating) and ``stride``.

Input gradient of CONV2D
------------------------
The output gradient is dilated by the stride, zero-padded by ``width - 1``
and cross-correlated with the kernel rotated by 180 degrees whose filter and
channel axes are swapped. The result covers the receptive field of the last
output position; it is zero-extended to the padded input shape and the
forward padding is clipped away.

CONV3D slides over frames as well, where the rotation trick would also need
a frame reversal, so its input gradient is computed by direct scatter.
"""

from ....domain._errors import ShapeError
from ....domain._operation import OpKind
from ...tensor import Shape
from ...tensor.mixins._spatial import conv_output_shape
from .._catalog import OperationCatalog


def _padded(shape, padding):
    return shape.with_dim(2, shape[2] + 2 * padding).with_dim(3, shape[3] + 2 * padding)


def _conv_shape(input_shapes, attrs, volumetric):
    x, kernel, bias = input_shapes
    out = conv_output_shape(
        _padded(x, attrs.get("padding", 0)),
        kernel,
        attrs.get("stride", 1),
        volumetric=volumetric,
    )
    if bias != Shape(1, 1, 1, 1, kernel[0]):
        raise ShapeError(
            "bias does not match the number of filters",
            op="conv3d" if volumetric else "conv2d",
            shapes=(kernel, bias),
        )
    return out


def _conv_weights(input_shape, attrs, depth):
    width, n_filters = attrs["width"], attrs["n_filters"]
    return (
        (
            "kernel",
            (n_filters, depth, width, width, input_shape[4]),
            True,
            attrs.get("kernel_initializer", "uniform"),
            "conv",
        ),
        (
            "bias",
            (1, 1, 1, 1, n_filters),
            True,
            attrs.get("bias_initializer", "uniform"),
            "dense",
        ),
    )


@OperationCatalog.register(OpKind.CONV2D)
class Conv2DRule:
    arity = 1

    @staticmethod
    def build(input_shape, attrs):
        return _conv_weights(input_shape, attrs, 1)

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return _conv_shape(input_shapes, attrs, volumetric=False)

    @staticmethod
    def compute(inputs, attrs):
        x, kernel, bias = inputs
        padding = attrs.get("padding", 0)
        return x.padding(padding).conv2d(kernel, bias, attrs.get("stride", 1))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        x, kernel, bias = inputs
        padding, stride = attrs.get("padding", 0), attrs.get("stride", 1)
        x_padded = x.padding(padding)

        flipped = kernel.rotate180().permute((4, 1, 2, 3, 0))
        grad_x = (
            grad_out.dilate(stride)
            .padding(kernel.shape[2] - 1)
            .conv2d(flipped)
            .extend_to(x_padded.shape)
            .clipping(padding)
        )
        grad_kernel = x_padded.conv_filter_grad(grad_out, kernel.shape, stride)
        grad_bias = grad_out.sum_to(bias.shape)
        return grad_x, grad_kernel, grad_bias


@OperationCatalog.register(OpKind.CONV3D)
class Conv3DRule:
    arity = 1

    @staticmethod
    def build(input_shape, attrs):
        return _conv_weights(input_shape, attrs, attrs["width"])

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return _conv_shape(input_shapes, attrs, volumetric=True)

    @staticmethod
    def compute(inputs, attrs):
        x, kernel, bias = inputs
        padding = attrs.get("padding", 0)
        return x.padding(padding).conv3d(kernel, bias, attrs.get("stride", 1))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        x, kernel, bias = inputs
        padding, stride = attrs.get("padding", 0), attrs.get("stride", 1)
        x_padded = x.padding(padding)

        grad_x = grad_out.conv_input_grad(
            kernel, x_padded.shape, stride, volumetric=True
        ).clipping(padding)
        grad_kernel = x_padded.conv_filter_grad(
            grad_out, kernel.shape, stride, volumetric=True
        )
        return grad_x, grad_kernel, grad_out.sum_to(bias.shape)
