"""
Concrete graph nodes.

Three variants share the `Node` base:

- `Variable`: holds a value and a gradient accumulator; the only node kind
  that carries trainable state.
- `Placeholder`: declares a shape; a value is fed for every run.
- `Operation`: an `OpKind` plus attributes, computing its output from the
  outputs of its ordered inputs. Construction registers the operation as a
  consumer of each input.

Nodes do not evaluate themselves. Evaluation and differentiation are driven
by `Session` over an index arena built by `collect`, so nodes only store
structure, attributes and the last cached output.
"""

from __future__ import annotations

import itertools
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ...domain._axes import RANK
from ...domain._errors import ShapeError
from ...domain._node import INode, NodeKind
from ...domain._operation import OpKind
from ...domain.utils._weight_initialization import WEIGHT_LAYOUTS
from .._config import get_config
from .._logging import get_logger
from ..tensor import Shape, Tensor
from ..tensor._shape import ShapeLike
from ..utils.weight_initializer import WeightInitializer
from ._catalog import OperationCatalog, OperationRule

logger = get_logger(__name__)

_uids = itertools.count(1)


class Node(INode):
    """
    Base class of all graph nodes.

    Parameters
    ----------
    kind : NodeKind
        Variant tag.
    name : Optional[str]
        Display name. Defaults to ``"<prefix>_<uid>"``.
    prefix : Optional[str]
        Prefix of the default name; the kind value when omitted.
    """

    def __init__(
        self, kind: NodeKind, name: Optional[str] = None, prefix: Optional[str] = None
    ) -> None:
        self._uid: int = next(_uids)
        self._kind = kind
        self._name = name if name else f"{prefix or kind.value}_{self._uid}"
        self._inputs: List[Node] = []
        self._consumers: List[Node] = []
        self._output: Optional[Tensor] = None

    @property
    def uid(self) -> int:
        return self._uid

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def inputs(self) -> Tuple["Node", ...]:
        return tuple(self._inputs)

    @property
    def consumers(self) -> Tuple["Node", ...]:
        """
        Operations that read this node, in registration order.

        An operation that uses this node in several input slots appears
        once per slot.
        """
        return tuple(self._consumers)

    @property
    def output(self) -> Optional[Tensor]:
        return self._output

    def set_output(self, value: Optional[Tensor]) -> None:
        self._output = value

    def _add_consumer(self, node: "Node") -> None:
        self._consumers.append(node)

    def describe(self) -> str:
        return f"{type(self).__name__}({self._name})"

    def __repr__(self) -> str:
        return f"<{self.describe()} uid={self._uid}>"


class Variable(Node):
    """
    Trainable (or frozen) graph leaf holding a value and a gradient accumulator.

    Parameters
    ----------
    name : str
        Display name.
    shape : Shape-like
        Five positive dimensions.
    trainable : bool, optional
        When False, `accumulate_grad` ignores incoming gradients.
    initializer : str, optional
        Name of a registered weight initializer applied to a zero tensor.
        Defaults to ``"uniform"`` (samples from ``U[0, 1)``).
    layout : Optional[str]
        ``"dense"`` or ``"conv"``, passed to the initializer for its fan
        computation. Set for every weight an operation builds.
    """

    def __init__(
        self,
        name: str,
        shape: ShapeLike,
        trainable: bool = True,
        initializer: str = "uniform",
        layout: Optional[str] = None,
    ) -> None:
        super().__init__(NodeKind.VARIABLE, name)
        self._shape = Shape.of(shape)
        if layout is not None and layout not in WEIGHT_LAYOUTS:
            raise ValueError(f"unknown weight layout {layout!r}")
        self.layout = layout
        self._value: Tensor = WeightInitializer(initializer)(
            Tensor.zeros(self._shape), layout
        )
        self._grad: Tensor = Tensor.zeros(self._shape)
        self.trainable = bool(trainable)

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def value(self) -> Tensor:
        """Current value tensor."""
        return self._value

    @property
    def grad(self) -> Tensor:
        """Accumulated gradient (zeros until a backward pass adds to it)."""
        return self._grad

    def zero_grad(self) -> None:
        """Reset the gradient accumulator to zeros."""
        self._grad = Tensor.zeros(self._shape)

    def accumulate_grad(self, grad: Tensor) -> None:
        """
        Add `grad` into the accumulator.

        Notes
        -----
        - Ignored when the variable is not trainable.
        - Gradients from successive backward passes add up until
          `zero_grad` is called.

        Raises
        ------
        ShapeError
            If `grad` does not have this variable's shape.
        """
        if not self.trainable:
            return
        if grad.shape != self._shape:
            raise ShapeError(
                "gradient shape does not match the variable",
                op=self._name,
                shapes=(self._shape, grad.shape),
            )
        self._grad = self._grad + grad

    def assign(self, value: Any) -> None:
        """
        Replace the value (e.g. after an external optimizer step).

        Parameters
        ----------
        value : Tensor or array-like
            New value with exactly this variable's shape.

        Raises
        ------
        ShapeError
            If the shapes differ.
        """
        if isinstance(value, Tensor):
            new = value.copy()
        else:
            new = Tensor.from_numpy(value, dtype=self._value.dtype)
        if new.shape != self._shape:
            raise ShapeError(
                "assigned value does not match the variable",
                op=self._name,
                shapes=(self._shape, new.shape),
            )
        self._value = new


class Placeholder(Node):
    """
    Graph input whose value is supplied with every run.

    Parameters
    ----------
    shape : Shape-like
        Declared shape. Fed values must match it on axes 1..4; the sample
        axis (0) may differ so one graph serves several batch sizes.
    name : Optional[str]
        Display name, used in `UnboundPlaceholderError` messages.
    """

    def __init__(self, shape: ShapeLike, name: Optional[str] = None) -> None:
        super().__init__(NodeKind.PLACEHOLDER, name)
        self._shape = Shape.of(shape)

    @property
    def shape(self) -> Shape:
        return self._shape

    def check_feed(self, value: Any) -> Tensor:
        """
        Validate a fed value and return it as a `Tensor`.

        NumPy arrays (and other array-likes) are converted to the configured
        dtype. An array of rank below five holding exactly as many elements
        as the declared shape is laid out in that shape (row-major), so
        ``[[1, 2], [3, 4]]`` feeds a (1, 1, 2, 2, 1) placeholder.

        Raises
        ------
        ShapeError
            If the value differs from the declared shape on any axis other
            than the sample axis.
        """
        if isinstance(value, Tensor):
            tensor = value
        else:
            array = np.asarray(value)
            if array.ndim < RANK and array.size == self._shape.count():
                array = array.reshape(self._shape.as_tuple())
            tensor = Tensor.from_numpy(array, dtype=get_config().np_dtype)
        if tensor.shape.as_tuple()[1:] != self._shape.as_tuple()[1:]:
            raise ShapeError(
                f"fed value does not match placeholder {self._name!r}",
                op="feed",
                shapes=(self._shape, tensor.shape),
            )
        return tensor


class Operation(Node):
    """
    Graph node applying one catalog operation to its inputs.

    Parameters
    ----------
    kind : OpKind
        Operation kind; its rule is looked up in `OperationCatalog`.
    inputs : Sequence[Node]
        Ordered data inputs; their number must equal the rule's arity.
    attrs : Optional[Mapping[str, Any]]
        Per-node attributes (window width, stride, axis, ...). Stored as a
        read-only mapping.
    name : Optional[str]
        Display name.

    Raises
    ------
    UnknownOperationError
        If `kind` has no registered rule.
    ValueError
        If the number of inputs does not match the rule's arity.
    """

    def __init__(
        self,
        kind: OpKind,
        inputs: Sequence[Node],
        attrs: Optional[Mapping[str, Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        rule = OperationCatalog.get(kind)
        if len(inputs) != rule.arity:
            raise ValueError(
                f"{kind.value} expects {rule.arity} input(s), got {len(inputs)}"
            )
        super().__init__(NodeKind.OPERATION, name, prefix=kind.value)
        self._op_kind = kind
        self._rule = rule
        self._attrs: Mapping[str, Any] = MappingProxyType(dict(attrs or {}))
        self._weights: Dict[str, Variable] = {}
        self._built = rule.build is None

        for node in inputs:
            self._inputs.append(node)
            node._add_consumer(self)

    @property
    def op_kind(self) -> OpKind:
        return self._op_kind

    @property
    def rule(self) -> OperationRule:
        return self._rule

    @property
    def attrs(self) -> Mapping[str, Any]:
        return self._attrs

    @property
    def built(self) -> bool:
        return self._built

    @property
    def weights(self) -> Dict[str, Variable]:
        """Weights created by `build`, by short name."""
        return dict(self._weights)

    def build(self, input_shape: ShapeLike) -> None:
        """
        Create this operation's weights for `input_shape`, once.

        Later calls are no-ops, so weights keep their values across
        recompilations.
        """
        if self._built:
            return
        input_shape = Shape.of(input_shape)
        for name, shape, trainable, initializer, layout in self._rule.build(
            input_shape, self._attrs
        ):
            self.add_weight(name, shape, trainable, initializer, layout)
        self._built = True
        logger.debug(
            "built %s for input %s with weights %s",
            self.describe(),
            input_shape.as_tuple(),
            {k: v.shape.as_tuple() for k, v in self._weights.items()},
        )

    def add_weight(
        self,
        name: str,
        shape: ShapeLike,
        trainable: bool = True,
        initializer: str = "uniform",
        layout: Optional[str] = None,
    ) -> Variable:
        """
        Create a weight `Variable` and append it to this operation's inputs.

        The variable is named ``"<operation>/<name>"``.
        """
        if name in self._weights:
            raise ValueError(f"{self.describe()} already has a weight {name!r}")
        weight = Variable(f"{self._name}/{name}", shape, trainable, initializer, layout)
        self._weights[name] = weight
        self._inputs.append(weight)
        weight._add_consumer(self)
        return weight

    def describe(self) -> str:
        return f"Operation[{self._op_kind.value}]({self._name})"
