"""
Error taxonomy for statgraph.

This module defines the exceptions raised by the tensor engine and the graph
runtime. Every error derives from `StatGraphError` and also from the closest
built-in exception type, so callers may catch either the framework-specific
class or the generic Python category.

Errors are raised as soon as an invalid request is detected. Shape and axis
errors are deterministic given the inputs and are raised before any output
buffer is allocated.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence


class StatGraphError(Exception):
    """Base class for all statgraph exceptions."""


class ShapeError(StatGraphError, ValueError):
    """
    Raised when tensor shapes are incompatible with the requested operation.

    Covers invalid dimension sizes, broadcasts that differ on more than one
    axis, element-count mismatches in reshape, non-bijective permutations,
    matrix-multiply / convolution / pooling geometry errors, and fed
    placeholder values whose shape does not match the declaration.

    Attributes
    ----------
    op : Optional[str]
        Name of the operation that rejected its operands, if known.
    shapes : tuple
        The offending shapes (as tuples), in operand order.
    """

    def __init__(
        self,
        message: str,
        *,
        op: Optional[str] = None,
        shapes: Sequence[Any] = (),
    ) -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        message : str
            Human-readable description of the mismatch.
        op : Optional[str], optional
            Operation name, prefixed to the message when provided.
        shapes : Sequence, optional
            Shapes involved in the failure.
        """
        prefix = f"{op}: " if op else ""
        super().__init__(f"{prefix}{message}")
        self.op = op
        self.shapes = tuple(tuple(s) for s in shapes)


class AllocationError(StatGraphError, MemoryError):
    """
    Raised when a tensor buffer cannot be allocated.

    This error is fatal for the current run: no partially filled tensor is
    ever returned to the caller.
    """

    def __init__(self, shape: Iterable[int], dtype: Any) -> None:
        """
        Initialize the AllocationError.

        Parameters
        ----------
        shape : Iterable[int]
            Shape of the buffer that failed to allocate.
        dtype : Any
            Requested element type.
        """
        self.shape = tuple(shape)
        self.dtype = dtype
        super().__init__(
            f"Failed to allocate tensor buffer of shape {self.shape} ({dtype})."
        )


class UnboundPlaceholderError(StatGraphError, LookupError):
    """
    Raised when a run is requested without a value for a reachable placeholder.

    Attributes
    ----------
    names : tuple[str, ...]
        Names of every placeholder missing from the feed.
    """

    def __init__(self, names: Sequence[str]) -> None:
        self.names = tuple(names)
        super().__init__(
            "No value fed for placeholder(s): " + ", ".join(self.names) + "."
        )

    def __str__(self) -> str:
        # LookupError would otherwise render the message through repr().
        return str(self.args[0])


class NotEvaluatedError(StatGraphError, RuntimeError):
    """
    Raised when a result is requested before the pass that produces it ran.

    `Session.backward` requires a prior `Session.run` because gradients reuse
    cached forward outputs; `Session.gradient` requires a prior backward pass.
    """

    def __init__(self, what: str, required: str) -> None:
        """
        Initialize the NotEvaluatedError.

        Parameters
        ----------
        what : str
            The requested result (e.g. "backward", "gradient").
        required : str
            The pass that must run first (e.g. "run", "backward").
        """
        super().__init__(f"Cannot compute {what}: call {required}() first.")
        self.what = what
        self.required = required


class UnknownOperationError(StatGraphError, KeyError):
    """
    Raised when an operation kind has no rule in the operation catalog.

    Attributes
    ----------
    kind : Any
        The kind that was looked up.
    """

    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"No operation rule registered for {kind!r}.")

    def __str__(self) -> str:
        return str(self.args[0])


class UnsupportedAxisError(StatGraphError, IndexError):
    """
    Raised when an axis index is outside the fixed rank-5 layout.

    Attributes
    ----------
    axis : Any
        The rejected axis value.
    """

    def __init__(self, axis: Any, op: Optional[str] = None) -> None:
        prefix = f"{op}: " if op else ""
        super().__init__(f"{prefix}axis {axis!r} is not in 0..4.")
        self.axis = axis
        self.op = op
