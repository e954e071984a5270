"""
Graph collection into an index arena.

`collect(root)` walks the inputs of `root` depth-first in post-order with a
visited-set memo, using an explicit stack rather than recursion.
The resulting `Graph` stores:

- ``nodes``: every reachable node exactly once, each operation after all of
  its inputs (a valid evaluation order);
- ``inputs[i]``: arena indices of node ``i``'s inputs, in slot order;
- ``consumers[i]``: arena indices of the operations that read node ``i``,
  restricted to operations inside this graph;
- ``placeholders`` / ``variables`` / ``operations``: the three disjoint
  node groups, each in evaluation order.

Consumers registered by operations that are not reachable from the root never
appear in the arena, so they cannot leak gradient contributions into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from ...domain._node import NodeKind
from .._logging import get_logger
from ._node import Node, Operation, Placeholder, Variable

logger = get_logger(__name__)


@dataclass(frozen=True)
class Graph:
    """Immutable index arena produced by `collect`."""

    root: Node
    nodes: Tuple[Node, ...]
    inputs: Tuple[Tuple[int, ...], ...]
    consumers: Tuple[Tuple[int, ...], ...]
    placeholders: Tuple[Placeholder, ...]
    variables: Tuple[Variable, ...]
    operations: Tuple[Operation, ...]
    _index: Dict[int, int] = field(repr=False, compare=False)

    def index_of(self, node: Node) -> int:
        """
        Return the arena index of `node`.

        Raises
        ------
        KeyError
            If `node` is not part of this graph.
        """
        try:
            return self._index[node.uid]
        except KeyError:
            raise KeyError(f"{node.describe()} is not part of this graph") from None

    @property
    def root_index(self) -> int:
        return len(self.nodes) - 1

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and node.uid in self._index

    def __len__(self) -> int:
        return len(self.nodes)


def collect(root: Node) -> Graph:
    """
    Collect every node reachable from `root` into a `Graph`.

    Parameters
    ----------
    root : Node
        The node whose value the graph computes; it is always the last node.

    Returns
    -------
    Graph
        Arena with dependency-ordered nodes and index-based adjacency.
    """
    order: List[Node] = []
    visited = {root.uid}
    stack: List[Tuple[Node, Iterator[Node]]] = [(root, iter(root.inputs))]

    # iterative post-order; inputs are visited in slot order
    while stack:
        node, parents = stack[-1]
        for parent in parents:
            if parent.uid not in visited:
                visited.add(parent.uid)
                stack.append((parent, iter(parent.inputs)))
                break
        else:
            stack.pop()
            order.append(node)

    index = {node.uid: i for i, node in enumerate(order)}
    inputs = tuple(tuple(index[p.uid] for p in node.inputs) for node in order)

    consumers: List[List[int]] = []
    for node in order:
        reached: List[int] = []
        for consumer in node.consumers:
            # one entry per consumer, even when it reads the node twice
            idx = index.get(consumer.uid)
            if idx is not None and idx not in reached:
                reached.append(idx)
        consumers.append(reached)

    graph = Graph(
        root=root,
        nodes=tuple(order),
        inputs=inputs,
        consumers=tuple(tuple(c) for c in consumers),
        placeholders=tuple(n for n in order if n.kind is NodeKind.PLACEHOLDER),
        variables=tuple(n for n in order if n.kind is NodeKind.VARIABLE),
        operations=tuple(n for n in order if n.kind is NodeKind.OPERATION),
        _index=index,
    )
    logger.debug(
        "collected %d nodes from %s (%d placeholders, %d variables, %d operations)",
        len(order),
        root.describe(),
        len(graph.placeholders),
        len(graph.variables),
        len(graph.operations),
    )
    return graph
