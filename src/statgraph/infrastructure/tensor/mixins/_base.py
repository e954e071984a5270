"""
Shared plumbing for Tensor mixins.

Every mixin operates on the two attributes owned by the concrete `Tensor`:

- ``_data``: a C-contiguous NumPy array of rank 5
- ``_shape``: the matching `Shape`

Mixins never construct tensors directly. They compute a NumPy result and hand
it to `_new`, which wraps it in an instance of the receiver's class. Results
that could alias the receiver's buffer (views produced by reshape, slicing or
transposition) are wrapped with ``copy=True`` so every tensor keeps exclusive
ownership of its buffer.
"""

from __future__ import annotations

import functools
from abc import ABC
from typing import Any, Callable, TypeVar

import numpy as np

from ....domain._errors import AllocationError
from .._shape import Shape

F = TypeVar("F", bound=Callable[..., Any])


def allocates(fn: F) -> F:
    """
    Translate NumPy allocation failures inside `fn` into `AllocationError`.

    The wrapped method is a Tensor method; the receiver's shape and dtype are
    reported in the error.
    """

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except AllocationError:
            raise
        except MemoryError as e:
            raise AllocationError(self._shape, self._data.dtype) from e

    return wrapper  # type: ignore[return-value]


class TensorMixinBase(ABC):
    """
    Common base of all Tensor mixins.

    Declares the storage attributes and the result-wrapping hook. The concrete
    `Tensor` provides `_wrap`.
    """

    _data: np.ndarray
    _shape: Shape

    @classmethod
    def _wrap(cls, array: np.ndarray, *, copy: bool = False) -> Any:
        raise NotImplementedError

    def _new(self, array: np.ndarray, *, copy: bool = False) -> Any:
        """Wrap a rank-5 result array in the receiver's tensor class."""
        return type(self)._wrap(array, copy=copy)

    @staticmethod
    def _is_tensor(obj: Any) -> bool:
        return isinstance(obj, TensorMixinBase)
