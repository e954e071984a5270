"""
Elementwise arithmetic for rank-5 tensors.

Binary operators accept another tensor or a Python/NumPy scalar. Between two
tensors the single-axis broadcast rule applies:

- shapes equal on every axis: plain elementwise operation;
- shapes differ on exactly one axis: one operand must have size 1 there, and
  its only slice is repeated across the other operand's extent;
- shapes differ on more than one axis: `ShapeError`.

This is deliberately stricter than NumPy broadcasting, so the rule is checked
before NumPy is allowed to broadcast.
"""

from __future__ import annotations

import numbers
from typing import Any, Tuple, Union

import numpy as np

from ....domain._axes import RANK, Axis
from ....domain._errors import ShapeError
from ._base import TensorMixinBase, allocates

Number = Union[int, float]


def broadcast_axis(
    lhs: Tuple[int, ...], rhs: Tuple[int, ...], op: str
) -> Union[int, None]:
    """
    Return the axis on which two shapes broadcast, or None if they are equal.

    Raises
    ------
    ShapeError
        If the shapes differ on more than one axis, or differ on one axis
        where neither side has size 1.
    """
    diff = [axis for axis in range(RANK) if lhs[axis] != rhs[axis]]
    if not diff:
        return None
    if len(diff) > 1:
        raise ShapeError(
            f"shapes differ on axes {diff}; at most one broadcast axis is allowed",
            op=op,
            shapes=(lhs, rhs),
        )
    axis = diff[0]
    if lhs[axis] != 1 and rhs[axis] != 1:
        raise ShapeError(
            f"axis {axis} has sizes {lhs[axis]} and {rhs[axis]}; one must be 1",
            op=op,
            shapes=(lhs, rhs),
        )
    return axis


class TensorMixinArithmetic(TensorMixinBase):
    """
    Mixin implementing ``+ - * /``, negation, powers and channel bias.

    Notes
    -----
    Scalars are applied to every element and never change the result dtype.
    Unsupported operand types make the operators return ``NotImplemented``,
    so Python raises its usual `TypeError`.
    """

    def _operand(self, other: Any, op: str) -> Any:
        if self._is_tensor(other):
            broadcast_axis(self._shape.as_tuple(), other._shape.as_tuple(), op)
            return other._data
        if isinstance(other, numbers.Real) and not isinstance(other, bool):
            return float(other)
        return NotImplemented

    @allocates
    def _binary(self, other: Any, op: str, fn, reflected: bool = False) -> Any:
        rhs = self._operand(other, op)
        if rhs is NotImplemented:
            return NotImplemented
        if reflected:
            return self._new(fn(rhs, self._data))
        return self._new(fn(self._data, rhs))

    # ----------------------------
    # Addition / subtraction
    # ----------------------------
    def __add__(self, other: Union[Any, Number]) -> Any:
        """Elementwise ``self + other`` (single-axis broadcast)."""
        return self._binary(other, "add", np.add)

    def __radd__(self, other: Number) -> Any:
        return self._binary(other, "add", np.add, reflected=True)

    def __sub__(self, other: Union[Any, Number]) -> Any:
        """Elementwise ``self - other`` (single-axis broadcast)."""
        return self._binary(other, "sub", np.subtract)

    def __rsub__(self, other: Number) -> Any:
        return self._binary(other, "sub", np.subtract, reflected=True)

    # ----------------------------
    # Multiplication / division
    # ----------------------------
    def __mul__(self, other: Union[Any, Number]) -> Any:
        """Elementwise ``self * other`` (single-axis broadcast)."""
        return self._binary(other, "mul", np.multiply)

    def __rmul__(self, other: Number) -> Any:
        return self._binary(other, "mul", np.multiply, reflected=True)

    def __truediv__(self, other: Union[Any, Number]) -> Any:
        """
        Elementwise ``self / other`` (single-axis broadcast).

        Division by zero follows IEEE semantics (``inf`` / ``nan``).
        """
        return self._binary(other, "div", np.true_divide)

    def __rtruediv__(self, other: Number) -> Any:
        return self._binary(other, "div", np.true_divide, reflected=True)

    # ----------------------------
    # Unary arithmetic
    # ----------------------------
    @allocates
    def neg(self) -> Any:
        """Return ``-self``."""
        return self._new(np.negative(self._data))

    def __neg__(self) -> Any:
        return self.neg()

    @allocates
    def pow(self, exponent: Number) -> Any:
        """Raise every element to the scalar power `exponent`."""
        return self._new(np.power(self._data, float(exponent)).astype(self._data.dtype))

    def __pow__(self, exponent: Number) -> Any:
        return self.pow(exponent)

    @allocates
    def add_channel_bias(self, bias: Any) -> Any:
        """
        Add one bias value per channel.

        Parameters
        ----------
        bias : Tensor
            Tensor of shape (1, 1, 1, 1, C), where C is this tensor's channel
            extent.

        Returns
        -------
        Tensor
            ``self[..., c] + bias[0, 0, 0, 0, c]`` for every position.

        Raises
        ------
        ShapeError
            If `bias` does not have shape (1, 1, 1, 1, C).
        """
        channels = self._shape.dim(Axis.CHANNEL)
        if bias._shape.as_tuple() != (1, 1, 1, 1, channels):
            raise ShapeError(
                f"bias must have shape (1, 1, 1, 1, {channels})",
                op="add_channel_bias",
                shapes=(self._shape, bias._shape),
            )
        return self._new(self._data + bias._data.reshape(channels))
