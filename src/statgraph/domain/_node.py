"""
Graph node interface definitions.

The computation graph is made of three node variants:

- ``VARIABLE``: owns a value and a gradient accumulator (trainable state)
- ``PLACEHOLDER``: declares a shape; its value is fed per run
- ``OPERATION``: computes its output from the outputs of its input nodes

This module declares the variant tag and the structural contract shared by
all nodes. Concrete nodes live in the infrastructure layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from ._tensor import ITensor


class NodeKind(Enum):
    """Variant tag of a graph node."""

    VARIABLE = "variable"
    PLACEHOLDER = "placeholder"
    OPERATION = "operation"


@runtime_checkable
class INode(Protocol):
    """
    Domain-level interface for graph nodes.

    Notes
    -----
    - `uid` is unique per process and stable for the node's lifetime; the
      graph collector uses it as the identity key.
    - `consumers` are non-owning back-references to the operations that read
      this node's output. They exist only to drive the backward pass.
    """

    @property
    def uid(self) -> int:
        """Return the process-unique identifier of the node."""
        ...

    @property
    def kind(self) -> NodeKind:
        """Return the node variant."""
        ...

    @property
    def name(self) -> str:
        """Return a human-readable node name."""
        ...

    @property
    def inputs(self) -> Sequence["INode"]:
        """Return the ordered input nodes (empty for leaves)."""
        ...

    @property
    def consumers(self) -> Sequence["INode"]:
        """Return the operations that registered this node as an input."""
        ...

    @property
    def output(self) -> Optional[ITensor]:
        """Return the last computed output tensor, if any."""
        ...

    def set_output(self, value: Optional[ITensor]) -> None:
        """Overwrite the cached output tensor."""
        ...

    def describe(self) -> Any:
        """Return a short description used in logs and error messages."""
        ...
