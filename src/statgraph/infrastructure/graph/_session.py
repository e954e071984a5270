"""
Session: compiles a graph for one root and runs forward / backward passes.

Lifecycle
---------
1. ``Session(root)`` collects the graph and infers every output shape. Each
   operation that owns weights is built on its first input's shape, and the
   graph is collected again so the new weight variables are part of it.
   Geometry errors surface here as `ShapeError`, before any data is fed.
2. ``run(feed)`` evaluates every node once in dependency order and caches its
   output. Re-running overwrites all cached outputs and discards gradients.
3. ``backward()`` seeds the root with ones and walks the arena in exact
   reverse order. The gradient of a node is the sum, over its consumers in
   the graph, of the consumer's local vector-Jacobian product for each input
   slot the node occupies. Each node is finalised exactly once, and trainable
   variables add their gradient into their accumulator.

A session is not thread-safe; use one per worker.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ...domain._errors import NotEvaluatedError, UnboundPlaceholderError
from .._logging import get_logger
from ..tensor import Shape, Tensor
from ._graph import Graph, collect
from ._node import Node, Operation, Placeholder, Variable

logger = get_logger(__name__)


class Session:
    """
    Executes the graph that computes `root`.

    Parameters
    ----------
    root : Node
        Node whose value `run` returns and from which `backward` starts.

    Raises
    ------
    ShapeError
        If shape inference finds incompatible operand shapes.
    """

    def __init__(self, root: Node) -> None:
        self._root = root
        self._graph, self._shapes = self._compile(root)
        self._outputs: Optional[List[Tensor]] = None
        self._grads: Optional[List[Tensor]] = None

    # ------------------------------------------------------------------
    # compile
    # ------------------------------------------------------------------
    @staticmethod
    def _compile(root: Node) -> Tuple[Graph, Dict[int, Shape]]:
        graph = collect(root)
        shapes: Dict[int, Shape] = {}
        rebuilt = False

        for node in graph.nodes:
            if isinstance(node, (Placeholder, Variable)):
                shapes[node.uid] = node.shape
                continue

            if not node.built:
                node.build(shapes[node.inputs[0].uid])
                rebuilt = True
                for weight in node.weights.values():
                    shapes[weight.uid] = weight.shape
            shapes[node.uid] = node.rule.infer_shape(
                [shapes[p.uid] for p in node.inputs], node.attrs
            )
            logger.debug(
                "%s: %s -> %s",
                node.describe(),
                [shapes[p.uid].as_tuple() for p in node.inputs],
                shapes[node.uid].as_tuple(),
            )

        if rebuilt:
            graph = collect(root)
        return graph, shapes

    # ------------------------------------------------------------------
    # introspection
    # ------------------------------------------------------------------
    @property
    def root(self) -> Node:
        return self._root

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def variables(self) -> Tuple[Variable, ...]:
        """All variables of the graph, in dependency order."""
        return self._graph.variables

    @property
    def trainable_variables(self) -> Tuple[Variable, ...]:
        return tuple(v for v in self._graph.variables if v.trainable)

    @property
    def placeholders(self) -> Tuple[Placeholder, ...]:
        return self._graph.placeholders

    def shape_of(self, node: Node) -> Shape:
        """
        Return the output shape inferred at compile time.

        The sample axis reflects the declared placeholder shapes; a run fed
        with another batch size produces outputs with that batch size.
        """
        self._graph.index_of(node)
        return self._shapes[node.uid]

    # ------------------------------------------------------------------
    # forward
    # ------------------------------------------------------------------
    def run(self, feed: Optional[Mapping[Placeholder, Any]] = None) -> Tensor:
        """
        Evaluate the graph and return the root's output.

        Parameters
        ----------
        feed : Mapping[Placeholder, Tensor or array-like]
            One value per placeholder of the graph. Entries for placeholders
            outside the graph are ignored.

        Raises
        ------
        UnboundPlaceholderError
            If any placeholder of the graph has no value; every missing name
            is reported.
        ShapeError
            If a fed value does not match its placeholder, or operand shapes
            are incompatible for the fed batch size.
        """
        feed = dict(feed or {})
        missing = [p.name for p in self._graph.placeholders if p not in feed]
        if missing:
            raise UnboundPlaceholderError(missing)

        graph = self._graph
        outputs: List[Tensor] = []
        for i, node in enumerate(graph.nodes):
            if isinstance(node, Placeholder):
                value = node.check_feed(feed[node])
            elif isinstance(node, Variable):
                value = node.value
            else:
                args = [outputs[j] for j in graph.inputs[i]]
                value = node.rule.compute(args, node.attrs)
            node.set_output(value)
            outputs.append(value)

        self._outputs = outputs
        self._grads = None
        logger.debug(
            "forward pass over %d nodes -> %s", len(outputs), outputs[-1].shape.as_tuple()
        )
        return outputs[-1]

    def output(self, node: Node) -> Tensor:
        """
        Return the cached output of `node` from the last run.

        Raises
        ------
        NotEvaluatedError
            If `run` has not been called.
        KeyError
            If `node` is not part of this graph.
        """
        if self._outputs is None:
            raise NotEvaluatedError("output", "run")
        return self._outputs[self._graph.index_of(node)]

    # ------------------------------------------------------------------
    # backward
    # ------------------------------------------------------------------
    def backward(self) -> None:
        """
        Propagate gradients from the root to every node of the graph.

        Raises
        ------
        NotEvaluatedError
            If `run` has not been called, since gradients reuse the cached
            forward outputs.
        """
        if self._outputs is None:
            raise NotEvaluatedError("backward", "run")

        graph, outputs = self._graph, self._outputs
        n = len(graph.nodes)
        grads: List[Optional[Tensor]] = [None] * n
        slot_grads: List[Sequence[Optional[Tensor]]] = [()] * n

        for i in range(n - 1, -1, -1):
            node = graph.nodes[i]
            if i == graph.root_index:
                grad = Tensor.ones(outputs[i].shape, dtype=outputs[i].dtype)
            else:
                grad = self._gather(i, slot_grads)
            grads[i] = grad

            if isinstance(node, Operation):
                args = [outputs[j] for j in graph.inputs[i]]
                slot_grads[i] = node.rule.gradient(grad, args, outputs[i], node.attrs)
            elif isinstance(node, Variable):
                node.accumulate_grad(grad)

        self._grads = grads
        logger.debug("backward pass over %d nodes from %s", n, self._root.describe())

    def _gather(self, i: int, slot_grads: List[Sequence[Optional[Tensor]]]) -> Tensor:
        """Sum the contributions of every in-graph consumer of node `i`."""
        graph = self._graph
        total: Optional[Tensor] = None
        for c in graph.consumers[i]:
            for slot, j in enumerate(graph.inputs[c]):
                if j != i:
                    continue
                contribution = slot_grads[c][slot]
                if contribution is None:
                    continue
                total = contribution if total is None else total + contribution
        if total is None:
            # only reached through slots without a gradient (e.g. loss targets)
            out = self._outputs[i]
            total = Tensor.zeros(out.shape, dtype=out.dtype)
        return total

    def gradient(self, node: Node) -> Tensor:
        """
        Return the finalised gradient of the root with respect to `node`.

        Raises
        ------
        NotEvaluatedError
            If `backward` has not run since the last `run`.
        KeyError
            If `node` is not part of this graph.
        """
        if self._grads is None:
            raise NotEvaluatedError("gradient", "backward")
        return self._grads[self._graph.index_of(node)]

    def zero_grad(self) -> None:
        """Reset the accumulators of every variable in the graph."""
        for variable in self._graph.variables:
            variable.zero_grad()
