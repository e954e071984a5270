"""
Concrete rank-5 Tensor implementation (NumPy backend).

A `Tensor` owns one C-contiguous NumPy buffer of exactly five axes, ordered
(sample, frame, width, height, channel), together with the matching `Shape`.
The class itself provides construction, factories, element access and
equality; the numeric operations are contributed by the mixins in
`tensor.mixins`.

Design notes
------------
- Value semantics: every transforming operation returns a new tensor with a
  freshly allocated buffer; no tensor ever aliases another tensor's buffer.
- The element type of new buffers comes from the engine configuration
  (``float32`` by default) unless given explicitly.
- NumPy allocation failures surface as `AllocationError`.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np

from ...domain._axes import RANK, Axis
from ...domain._errors import AllocationError, ShapeError
from ...domain._tensor import ITensor
from .._config import get_config, rng
from ._shape import Shape, ShapeLike
from .mixins import (
    TensorMixinArithmetic,
    TensorMixinLinalg,
    TensorMixinMemory,
    TensorMixinReduction,
    TensorMixinSpatial,
    TensorMixinUnary,
)

Number = Union[int, float]


def _resolve_dtype(dtype: Any) -> np.dtype:
    return get_config().np_dtype if dtype is None else np.dtype(dtype)


def _allocate(shape: Shape, dtype: np.dtype, fill: Number = 0.0) -> np.ndarray:
    """Allocate a filled rank-5 buffer, translating `MemoryError`."""
    try:
        return np.full(shape.as_tuple(), fill, dtype=dtype)
    except MemoryError as e:
        raise AllocationError(shape, dtype) from e


class Tensor(
    TensorMixinArithmetic,
    TensorMixinReduction,
    TensorMixinMemory,
    TensorMixinUnary,
    TensorMixinLinalg,
    TensorMixinSpatial,
    ITensor,
):
    """
    Dense rank-5 tensor.

    Parameters
    ----------
    shape : Shape or Iterable[int]
        Five positive dimension sizes.
    data : optional
        Initial values: any array-like holding exactly ``shape.count()``
        elements (nested or flat, read in row-major order). When omitted the
        tensor is zero-filled.
    dtype : optional
        Element type; defaults to the configured engine dtype.

    Raises
    ------
    ShapeError
        If `shape` is invalid or `data` holds a different number of elements.
    AllocationError
        If the buffer cannot be allocated.
    """

    __hash__ = None  # mutable, compared with tolerance

    def __init__(
        self, shape: ShapeLike, data: Any = None, *, dtype: Any = None
    ) -> None:
        self._shape = Shape.of(shape)
        dt = _resolve_dtype(dtype)

        if data is None:
            self._data = _allocate(self._shape, dt)
            return

        try:
            flat = np.array(data, dtype=dt).reshape(-1)
        except MemoryError as e:
            raise AllocationError(self._shape, dt) from e
        if flat.size != self._shape.count():
            raise ShapeError(
                f"data holds {flat.size} elements, shape needs {self._shape.count()}",
                op="Tensor",
                shapes=(self._shape,),
            )
        self._data = flat.reshape(self._shape.as_tuple())

    @classmethod
    def _wrap(cls, array: np.ndarray, *, copy: bool = False) -> "Tensor":
        """
        Adopt a rank-5 NumPy result without re-validating it.

        Parameters
        ----------
        array : np.ndarray
            Result of an internal computation.
        copy : bool
            Force a copy; required when `array` may be a view of another
            tensor's buffer.
        """
        obj = cls.__new__(cls)
        data = np.array(array, copy=True) if copy else np.asarray(array)
        obj._data = np.ascontiguousarray(data)
        obj._shape = Shape(obj._data.shape)
        return obj

    # ----------------------------
    # Factories
    # ----------------------------
    @classmethod
    def zeros(cls, shape: ShapeLike, *, dtype: Any = None) -> "Tensor":
        """Return a zero-filled tensor."""
        return cls(shape, dtype=dtype)

    @classmethod
    def ones(cls, shape: ShapeLike, *, dtype: Any = None) -> "Tensor":
        """Return a tensor filled with ones."""
        return cls.full(shape, 1.0, dtype=dtype)

    @classmethod
    def full(cls, shape: ShapeLike, value: Number, *, dtype: Any = None) -> "Tensor":
        """Return a tensor with every element equal to `value`."""
        shape = Shape.of(shape)
        return cls._wrap(_allocate(shape, _resolve_dtype(dtype), value))

    @classmethod
    def random(cls, shape: ShapeLike, *, dtype: Any = None) -> "Tensor":
        """
        Return a tensor of independent uniform samples in ``[0, 1)``.

        Samples are drawn from the configured generator, so a configured seed
        makes the result reproducible. Samples are generated in the target
        float type, so float32 results stay strictly below 1.
        """
        shape = Shape.of(shape)
        dt = _resolve_dtype(dtype)
        try:
            values = rng().random(shape.as_tuple(), dtype=dt)
        except MemoryError as e:
            raise AllocationError(shape, dt) from e
        return cls._wrap(values)

    @classmethod
    def identity(cls, n: int, *, dtype: Any = None) -> "Tensor":
        """Return the (1, 1, 1, n, n) identity matrix."""
        return cls._wrap(np.eye(n, dtype=_resolve_dtype(dtype)).reshape(1, 1, 1, n, n))

    @classmethod
    def mask(cls, shape: ShapeLike, rate: float, *, dtype: Any = None) -> "Tensor":
        """
        Return a dropout-style mask: each element is 0 with probability `rate`,
        1 otherwise.
        """
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"rate must be in [0, 1], got {rate}")
        shape = Shape.of(shape)
        keep = rng().random(shape.as_tuple()) >= rate
        return cls._wrap(keep.astype(_resolve_dtype(dtype)))

    @classmethod
    def from_numpy(cls, array: Any, *, dtype: Any = None) -> "Tensor":
        """
        Build a tensor from a NumPy array (copied).

        Arrays of rank below five are left-padded with unit axes, so a (H, C)
        matrix becomes (1, 1, 1, H, C).

        Raises
        ------
        ShapeError
            If the array has more than five axes or an empty axis.
        """
        arr = np.asarray(array)
        if arr.ndim > RANK:
            raise ShapeError(
                f"array has {arr.ndim} axes; at most {RANK} are supported",
                op="from_numpy",
            )
        shape = Shape((1,) * (RANK - arr.ndim) + arr.shape)
        if dtype is None and arr.dtype.kind == "f":
            dtype = arr.dtype
        return cls(shape, arr, dtype=dtype)

    def one_hot(self, num: int) -> "Tensor":
        """
        One-hot encode the values of a single-channel tensor.

        Distinct values (truncated to int) receive codes ``0, 1, ...`` in the
        order they are first met in row-major traversal. The result has `num`
        channels with a single 1 at each position's code.

        Raises
        ------
        ShapeError
            If this tensor has more than one channel, or holds more than `num`
            distinct values.
        """
        if self._shape.dim(Axis.CHANNEL) != 1:
            raise ShapeError(
                "one_hot expects a single channel", op="one_hot", shapes=(self._shape,)
            )
        values = self._data.reshape(-1).astype(np.int64)
        codes = {}
        for v in values.tolist():
            if v not in codes:
                codes[v] = len(codes)
        if len(codes) > num:
            raise ShapeError(
                f"{len(codes)} distinct values do not fit in {num} classes",
                op="one_hot",
                shapes=(self._shape,),
            )
        index = np.array([codes[v] for v in values.tolist()], dtype=np.int64)
        out = np.zeros((values.size, num), dtype=self._data.dtype)
        out[np.arange(values.size), index] = 1.0
        return self._wrap(out.reshape(self._shape.with_dim(Axis.CHANNEL, num).as_tuple()))

    # ----------------------------
    # Properties
    # ----------------------------
    @property
    def shape(self) -> Shape:
        """Return the five-axis shape."""
        return self._shape

    @property
    def dtype(self) -> np.dtype:
        """Return the NumPy element type of the buffer."""
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """
        Return the flat buffer (a view; writes modify this tensor).

        The buffer length always equals ``shape.count()``.
        """
        return self._data.reshape(-1)

    def numel(self) -> int:
        """Return the number of elements."""
        return self._shape.count()

    # ----------------------------
    # Element access
    # ----------------------------
    def at(self, *index: int) -> float:
        """Return the element at a five-axis index."""
        return float(self._data.reshape(-1)[self._shape.linear_index(*index)])

    def set(self, value: Number, *index: int) -> None:
        """Overwrite the element at a five-axis index."""
        self._data.reshape(-1)[self._shape.linear_index(*index)] = value

    def item(self) -> float:
        """
        Return the only element of a one-element tensor.

        Raises
        ------
        ShapeError
            If the tensor holds more than one element.
        """
        if self._shape.count() != 1:
            raise ShapeError(
                "item() requires a single-element tensor",
                op="item",
                shapes=(self._shape,),
            )
        return float(self._data.reshape(-1)[0])

    def to_numpy(self) -> np.ndarray:
        """Return an independent rank-5 NumPy copy of the buffer."""
        return self._data.copy()

    def copy_from_numpy(self, array: Any) -> None:
        """
        Overwrite the buffer in place from an array holding the same number
        of elements.

        Raises
        ------
        ShapeError
            If the element counts differ.
        """
        arr = np.asarray(array, dtype=self._data.dtype)
        if arr.size != self._shape.count():
            raise ShapeError(
                f"array holds {arr.size} elements, tensor holds {self._shape.count()}",
                op="copy_from_numpy",
                shapes=(self._shape,),
            )
        self._data[...] = arr.reshape(self._shape.as_tuple())

    def copy(self) -> "Tensor":
        """Return a deep copy with its own buffer."""
        return self._wrap(self._data, copy=True)

    def fill(self, value: Number) -> None:
        """Set every element to `value` in place."""
        self._data.fill(value)

    # ----------------------------
    # Comparison and display
    # ----------------------------
    def equals(self, other: Any, tolerance: Optional[float] = None) -> bool:
        """
        Approximate equality.

        True iff `other` is a tensor of the same shape and every element pair
        differs by at most `tolerance` (default: the configured tolerance).
        """
        if not isinstance(other, Tensor) or self._shape != other._shape:
            return False
        tol = get_config().tolerance if tolerance is None else float(tolerance)
        return bool(np.all(np.abs(self._data - other._data) <= tol))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.equals(other)

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return not self.equals(other)

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape.as_tuple()}, dtype={self._data.dtype})"
