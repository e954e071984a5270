"""
Loss operation rules.

Both losses take ``(prediction, target)`` of identical shape and reduce to a
(1, 1, 1, 1, 1) scalar tensor. Their gradients use the simplified
``prediction - target`` form scaled by the upstream scalar gradient:

- MSE: exact up to the constant ``2 / n`` factor of the mean.
- CrossEntropy: the gradient with respect to the logits when the prediction
  comes from a paired sigmoid/softmax. The target receives no gradient.
"""

import numpy as np

from ....domain._errors import ShapeError
from ....domain._operation import OpKind
from ..._config import get_config
from ...tensor import Shape
from .._catalog import OperationCatalog

_SCALAR = Shape(1, 1, 1, 1, 1)


def _check_pair(pred_shape, target_shape, op):
    if pred_shape != target_shape:
        raise ShapeError(
            "prediction and target shapes differ",
            op=op,
            shapes=(pred_shape, target_shape),
        )


class _LossShape:
    arity = 2
    name = "loss"

    @classmethod
    def infer_shape(cls, input_shapes, attrs):
        _check_pair(input_shapes[0], input_shapes[1], cls.name)
        return _SCALAR


@OperationCatalog.register(OpKind.MSE)
class MSERule(_LossShape):
    """``mean((prediction - target) ** 2)``."""

    name = "mse"

    @staticmethod
    def compute(inputs, attrs):
        pred, target = inputs
        _check_pair(pred.shape, target.shape, "mse")
        diff = pred - target
        return (diff * diff).reduce_mean()

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        pred, target = inputs
        delta = (pred - target) * grad_out.item()
        return delta, delta.neg()


@OperationCatalog.register(OpKind.CROSS_ENTROPY)
class CrossEntropyRule(_LossShape):
    """
    Binary cross-entropy ``-mean(t * log(p) + (1 - t) * log(1 - p))``.

    Probabilities are clamped to ``[eps, 1 - eps]`` where ``eps`` is the
    configured ``log_epsilon``, raised to the machine epsilon of the dtype
    when smaller.
    """

    name = "cross_entropy"

    @staticmethod
    def compute(inputs, attrs):
        pred, target = inputs
        _check_pair(pred.shape, target.shape, "cross_entropy")
        # never below the dtype resolution, or 1 - eps rounds back to 1
        eps = max(get_config().log_epsilon, float(np.finfo(pred.dtype).eps))
        p = pred.clamp(eps, 1.0 - eps)
        log_likelihood = target * p.log() + (1.0 - target) * (1.0 - p).log()
        return log_likelihood.reduce_mean().neg()

    @staticmethod
    def gradient(grad_out, inputs, output, attrs):
        pred, target = inputs
        return (pred - target) * grad_out.item(), None
