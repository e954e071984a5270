"""
Pooling operation rules (attribute ``width``: window side and stride).

Max/min pooling send each pooled gradient to the input position that won its
window; average pooling spreads it evenly over the window.
"""

from ....domain._operation import OpKind
from ...tensor.mixins._spatial import pool_output_shape
from .._catalog import OperationCatalog


class _PoolShape:
    arity = 1

    @staticmethod
    def infer_shape(input_shapes, attrs):
        return pool_output_shape(input_shapes[0], attrs["width"], "pooling")


@OperationCatalog.register(OpKind.MAX_POOLING)
class MaxPoolingRule(_PoolShape):
    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].max_pooling(attrs["width"])

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out.max_upsampling(inputs[0], attrs["width"]),)


@OperationCatalog.register(OpKind.MIN_POOLING)
class MinPoolingRule(_PoolShape):
    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].min_pooling(attrs["width"])

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out.min_upsampling(inputs[0], attrs["width"]),)


@OperationCatalog.register(OpKind.AVG_POOLING)
class AvgPoolingRule(_PoolShape):
    @staticmethod
    def compute(inputs, attrs):
        return inputs[0].avg_pooling(attrs["width"])

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        return (grad_out.avg_upsampling(attrs["width"], inputs[0].shape),)
