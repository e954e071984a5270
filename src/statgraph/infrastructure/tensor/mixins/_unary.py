"""
Elementwise math and activation functions.

Activations used by the graph runtime live here so that operation rules can
express both their forward value and their local derivative in tensor terms.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ....domain._axes import Axis, check_axis
from ._base import TensorMixinBase, allocates


class TensorMixinUnary(TensorMixinBase):
    """Mixin implementing exp/log, sigmoid, tanh, ReLU variants, hinge and softmax."""

    @allocates
    def exp(self) -> Any:
        """Elementwise natural exponential."""
        return self._new(np.exp(self._data))

    @allocates
    def log(self) -> Any:
        """
        Elementwise natural logarithm.

        Non-positive inputs follow IEEE semantics (``-inf`` / ``nan``).
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._new(np.log(self._data))

    @allocates
    def clamp(self, low: float, high: float) -> Any:
        """Limit every element to the closed interval ``[low, high]``."""
        return self._new(np.clip(self._data, low, high))

    @allocates
    def sigmoid(self) -> Any:
        """
        Elementwise logistic function ``1 / (1 + exp(-x))``.

        Evaluated as ``0.5 * (1 + tanh(x / 2))``, which does not overflow for
        large negative inputs.
        """
        return self._new(0.5 * (1.0 + np.tanh(0.5 * self._data)))

    @allocates
    def tanh(self) -> Any:
        """Elementwise hyperbolic tangent."""
        return self._new(np.tanh(self._data))

    @allocates
    def relu(
        self,
        max_value: Optional[float] = None,
        threshold: float = 0.0,
        negative_slope: float = 0.0,
    ) -> Any:
        """
        Generalized rectified linear unit.

        Parameters
        ----------
        max_value : Optional[float]
            Saturation value. Inputs ``>= max_value`` map to `max_value`.
            ``None`` disables saturation.
        threshold : float
            Inputs ``>= threshold`` (and below `max_value`) pass through.
        negative_slope : float
            Inputs below `threshold` map to
            ``negative_slope * (x - threshold)``.

        Returns
        -------
        Tensor
            Activated tensor. The defaults give the standard ReLU.
        """
        x = self._data
        out = np.where(x >= threshold, x, negative_slope * (x - threshold))
        if max_value is not None:
            out = np.where(x >= max_value, max_value, out)
        return self._new(out.astype(x.dtype, copy=False))

    @allocates
    def relu_grad(
        self,
        max_value: Optional[float] = None,
        threshold: float = 0.0,
        negative_slope: float = 0.0,
    ) -> Any:
        """
        Derivative mask of `relu` evaluated at this tensor.

        Returns 0 where saturated, 1 on the linear region and `negative_slope`
        below `threshold`.
        """
        x = self._data
        out = np.where(x >= threshold, 1.0, negative_slope)
        if max_value is not None:
            out = np.where(x >= max_value, 0.0, out)
        return self._new(out.astype(x.dtype))

    @allocates
    def hinge(self, label: float) -> Any:
        """
        Elementwise hinge ``max(0, 1 - label * x)``.

        Parameters
        ----------
        label : float
            Target label, usually ``+1`` or ``-1``.
        """
        x = self._data
        return self._new(np.maximum(1.0 - label * x, 0.0).astype(x.dtype, copy=False))

    @allocates
    def softmax(self, axis: int = Axis.FRAME) -> Any:
        """
        Softmax along `axis`: ``exp(x) / reduce_sum(exp(x), axis)``.

        The per-slice maximum is subtracted before exponentiation; the result
        is unchanged but does not overflow.

        Raises
        ------
        UnsupportedAxisError
            If `axis` is outside ``0..4``.
        """
        axis = check_axis(axis, "softmax")
        shifted = self._data - self._data.max(axis=axis, keepdims=True)
        e = np.exp(shifted)
        return self._new(e / e.sum(axis=axis, keepdims=True))
