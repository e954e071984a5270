"""
Layout operation rules; gradients are reshaped back to the input layout.
"""

from ....domain._axes import Axis
from ....domain._errors import ShapeError
from ....domain._operation import OpKind
from ...tensor import Shape
from .._catalog import OperationCatalog


@OperationCatalog.register(OpKind.RESHAPE)
class ReshapeRule:
    """Reshape to ``attrs["shape"]`` (same element count)."""

    arity = 1

    @staticmethod
    def infer_shape(input_shapes, attrs):
        source, target = input_shapes[0], Shape.of(attrs["shape"])
        if source.count() != target.count():
            raise ShapeError(
                f"cannot reshape {source.count()} elements into {target.count()}",
                op="reshape",
                shapes=(source, target),
            )
        return target

    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].reshape(attrs["shape"])

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out.reshape(inputs[0].shape),)


@OperationCatalog.register(OpKind.FLATTEN)
class FlattenRule:
    """Collapse axes ``attrs["axis"]..4`` (default 2) into the channel axis."""

    arity = 1

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return input_shapes[0].flatten_from(attrs.get("axis", Axis.WIDTH))

    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].flatten(attrs.get("axis", Axis.WIDTH))

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out.reshape(inputs[0].shape),)
