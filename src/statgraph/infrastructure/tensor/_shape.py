"""
Fixed rank-5 shape descriptor.

`Shape` is the only shape type used by statgraph. It stores exactly five
positive dimension sizes, ordered (sample, frame, width, height, channel), and
provides row-major index linearization for the flat tensor buffer.

Textual form
------------
A shape serializes to five space-separated integers, e.g. ``"1 1 28 28 3"``,
and `Shape.deserialize` accepts the same form back.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple, Union

from typing_extensions import Self

from ...domain._axes import RANK, check_axis
from ...domain._errors import ShapeError

ShapeLike = Union["Shape", Iterable[int]]


class Shape:
    """
    Immutable five-axis shape.

    Parameters
    ----------
    *dims : int or Iterable[int]
        Either five integers, or a single iterable holding five integers.

    Raises
    ------
    ShapeError
        If the number of dims is not five, or any dim is not an integer >= 1.

    Examples
    --------
    >>> Shape(1, 1, 2, 2, 1).count()
    4
    >>> Shape((2, 3, 4, 5, 6)).linear_index(0, 0, 0, 1, 0)
    6
    """

    __slots__ = ("_dims", "_strides")

    def __init__(self, *dims: Union[int, Iterable[int]]) -> None:
        if len(dims) == 1 and not isinstance(dims[0], int):
            dims = tuple(dims[0])  # type: ignore[arg-type]

        if len(dims) != RANK:
            raise ShapeError(
                f"expected {RANK} dimensions, got {len(dims)}", shapes=(dims,)
            )

        checked = []
        for d in dims:
            if isinstance(d, bool) or not hasattr(d, "__index__"):
                raise ShapeError(f"dimension {d!r} is not an integer", shapes=(dims,))
            d = d.__index__()
            if d < 1:
                raise ShapeError(f"dimension {d} must be >= 1", shapes=(dims,))
            checked.append(d)

        self._dims: Tuple[int, ...] = tuple(checked)

        strides = [1] * RANK
        for axis in range(RANK - 2, -1, -1):
            strides[axis] = strides[axis + 1] * self._dims[axis + 1]
        self._strides: Tuple[int, ...] = tuple(strides)

    @classmethod
    def of(cls, shape: ShapeLike) -> "Shape":
        """Return `shape` unchanged if it is a `Shape`, else build one from it."""
        if isinstance(shape, Shape):
            return shape
        return cls(tuple(shape))

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def dim(self, axis: int) -> int:
        """
        Return the size of one axis.

        Raises
        ------
        UnsupportedAxisError
            If `axis` is outside ``0..4``.
        """
        return self._dims[check_axis(axis, "Shape.dim")]

    def count(self) -> int:
        """Return the total number of elements (product of all dims)."""
        total = 1
        for d in self._dims:
            total *= d
        return total

    def strides(self) -> Tuple[int, ...]:
        """Return row-major strides; the stride of axis 4 is 1."""
        return self._strides

    def linear_index(self, *index: int) -> int:
        """
        Convert a five-axis index to a flat buffer offset.

        Parameters
        ----------
        *index : int
            Exactly five non-negative indices.

        Returns
        -------
        int
            ``sum(index[k] * strides[k])``.

        Raises
        ------
        IndexError
            If the index has the wrong length or is out of range.
        """
        if len(index) != RANK:
            raise IndexError(f"Index {index} must have {RANK} entries.")
        offset = 0
        for i, d, s in zip(index, self._dims, self._strides):
            if i < 0 or i >= d:
                raise IndexError(f"Index {index} out of range for shape {self._dims}.")
            offset += i * s
        return offset

    def as_tuple(self) -> Tuple[int, ...]:
        """Return the dims as a plain tuple."""
        return self._dims

    # ------------------------------------------------------------------
    # derived shapes
    # ------------------------------------------------------------------
    def with_dim(self, axis: int, size: int) -> Self:
        """Return a copy with the size of `axis` replaced by `size`."""
        axis = check_axis(axis, "Shape.with_dim")
        dims = list(self._dims)
        dims[axis] = size
        return type(self)(dims)

    def flatten_from(self, axis: int) -> Self:
        """
        Collapse axes ``axis..4`` into the last axis.

        The collapsed axes other than the last become 1, so the rank stays 5
        and the channel axis carries the merged features:

            (N, F, W, H, C).flatten_from(2) == (N, F, 1, 1, W*H*C)
        """
        axis = check_axis(axis, "Shape.flatten_from")
        merged = 1
        for d in self._dims[axis:]:
            merged *= d
        dims = list(self._dims[:axis]) + [1] * (RANK - 1 - axis) + [merged]
        return type(self)(dims)

    # ------------------------------------------------------------------
    # text form
    # ------------------------------------------------------------------
    def serialize(self) -> str:
        """Return the shape as five space-separated integers."""
        return " ".join(str(d) for d in self._dims)

    @classmethod
    def deserialize(cls, text: str) -> "Shape":
        """
        Parse the output of `serialize`.

        Raises
        ------
        ShapeError
            If `text` does not hold five positive integers.
        """
        tokens = text.split()
        try:
            dims = [int(t) for t in tokens]
        except ValueError as e:
            raise ShapeError(f"cannot parse shape from {text!r}") from e
        return cls(dims)

    # ------------------------------------------------------------------
    # python protocol
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __len__(self) -> int:
        return RANK

    def __getitem__(self, axis: int) -> int:
        return self._dims[axis]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self._dims == other._dims
        if isinstance(other, tuple):
            return self._dims == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dims)

    def __repr__(self) -> str:
        return f"Shape{self._dims}"
