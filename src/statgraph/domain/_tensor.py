"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the properties the graph runtime
relies on, so domain contracts (node and operation protocols) can be typed
without importing the NumPy-backed implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Rank-5 tensor interface.

    An `ITensor` owns a dense buffer whose length always equals the product of
    its five dimensions. Transforming operations return new tensors and never
    alias the buffer of their operands.
    """

    @property
    def shape(self) -> Any:
        """
        Return the five-axis shape descriptor of the tensor.

        Returns
        -------
        Shape
            The tensor's shape.
        """
        ...

    @property
    def dtype(self) -> Any:
        """Return the element type of the buffer."""
        ...

    def numel(self) -> int:
        """Return the number of elements (product of the dimensions)."""
        ...

    def to_numpy(self) -> Any:
        """Return an independent NumPy copy of the buffer, shaped (5 axes)."""
        ...

    def copy(self) -> "ITensor":
        """Return a deep copy with its own buffer."""
        ...

    def reshape(self, shape: Any) -> "ITensor":
        """Return a tensor with the same elements laid out in `shape`."""
        ...

    def __add__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __sub__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __truediv__(self, other: Union["ITensor", Number]) -> "ITensor": ...
