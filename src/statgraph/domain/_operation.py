"""
Operation catalog interface definitions.

Operations are not modelled as a class hierarchy. Instead, every operation
node carries an `OpKind` tag (a closed enumeration) and an attribute mapping,
and the runtime dispatches on the tag to a stateless rule that supplies:

- ``infer_shape(input_shapes, attrs) -> Shape``
- ``compute(inputs, attrs) -> Tensor``
- ``gradient(grad_out, inputs, output, attrs) -> tuple[Tensor | None, ...]``
- optionally ``build(input_shape, attrs) -> [(name, shape, trainable, init), ...]``

This mirrors function-level autograd systems (a forward / backward pair per
operation) while keeping the catalog exhaustively enumerable.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Tuple

from ._tensor import ITensor


class OpKind(Enum):
    """Closed set of operation kinds understood by the runtime."""

    ADD = "add"
    MATMUL = "matmul"
    CONV2D = "conv2d"
    CONV3D = "conv3d"
    MAX_POOLING = "max_pooling"
    MIN_POOLING = "min_pooling"
    AVG_POOLING = "avg_pooling"
    RESHAPE = "reshape"
    FLATTEN = "flatten"
    FULL_CONNECTED = "full_connected"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    SOFTMAX = "softmax"
    MSE = "mse"
    CROSS_ENTROPY = "cross_entropy"


Attrs = Mapping[str, Any]
"""Read-only per-node operation attributes (e.g. stride, width, axis)."""

WeightSpec = Tuple[str, Any, bool, str, str]
"""
A weight requested by a build step:
(name, shape, trainable, initializer, layout) with layout ``"dense"`` or
``"conv"``.
"""

ShapeFn = Callable[[Sequence[Any], Attrs], Any]
ComputeFn = Callable[[Sequence[ITensor], Attrs], ITensor]
GradientFn = Callable[
    [ITensor, Sequence[ITensor], ITensor, Attrs], Sequence[Optional[ITensor]]
]
BuildFn = Callable[[Any, Attrs], Sequence[WeightSpec]]


class IOperationRule(Protocol):
    """
    Domain-level contract for a catalog entry.

    Notes
    -----
    - Rules hold no per-node state. Everything that differs between two
      operations of the same kind lives in the node's attribute mapping.
    - `gradient` returns one entry per input slot, aligned with `inputs`.
      An entry may be None when the slot receives no gradient (e.g. loss
      targets).
    """

    kind: OpKind
    arity: int

    def infer_shape(self, input_shapes: Sequence[Any], attrs: Attrs) -> Any:
        """Return the output shape for the given input shapes."""
        ...

    def compute(self, inputs: Sequence[ITensor], attrs: Attrs) -> ITensor:
        """Compute the forward output from the input values."""
        ...

    def gradient(
        self,
        grad_out: ITensor,
        inputs: Sequence[ITensor],
        output: ITensor,
        attrs: Attrs,
    ) -> Sequence[Optional[ITensor]]:
        """Map the output gradient to one gradient per input slot."""
        ...
