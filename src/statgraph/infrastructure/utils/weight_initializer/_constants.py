"""
Constant and uniform weight initializers.

Provided initializers
---------------------
- ``uniform``:
    Independent samples from ``U[0, 1)``; the default for `Variable`.
- ``zeros``:
    All elements zero; typical for biases.
- ``ones``:
    All elements one; handy for deterministic tests.
"""

from typing import Optional

from ._base import WeightInitializer
from ...tensor._tensor import Tensor
from ..._config import rng


@WeightInitializer.register_initializer("uniform")
def uniform(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """
    Fill `tensor` with samples from ``U[0, 1)``.

    Parameters
    ----------
    tensor : Tensor
        The tensor to initialize in-place.
    layout : Optional[str]
        Unused; the samples do not depend on fans.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    tensor.copy_from_numpy(rng().random(tensor.shape.as_tuple(), dtype=tensor.dtype))
    return tensor


@WeightInitializer.register_initializer("zeros")
def zeros(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """Fill `tensor` with zeros."""
    tensor.fill(0.0)
    return tensor


@WeightInitializer.register_initializer("ones")
def ones(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """Fill `tensor` with ones."""
    tensor.fill(1.0)
    return tensor
