"""
statgraph: a static-graph neural-network engine on rank-5 NumPy tensors.

Typical use::

    from statgraph import Placeholder, Session, layers

    x = Placeholder((1, 1, 28, 28, 1), name="x")
    y = Placeholder((1, 1, 1, 1, 10), name="y")
    h = layers.max_pooling(layers.relu(layers.conv2d(x, 3, 8)), 2)
    p = layers.softmax(layers.full_connected(layers.flatten(h), 10), axis=4)
    loss = layers.cross_entropy(p, y)

    session = Session(loss)
    session.run({x: images, y: labels})
    session.backward()
"""

from .domain import (
    Axis,
    RANK,
    StatGraphError,
    ShapeError,
    AllocationError,
    UnboundPlaceholderError,
    NotEvaluatedError,
    UnknownOperationError,
    UnsupportedAxisError,
    NodeKind,
    OpKind,
)
from .infrastructure._config import EngineConfig, get_config, set_config
from .infrastructure._logging import get_logger
from .infrastructure.tensor import Shape, Tensor
from .infrastructure.graph import (
    Graph,
    Node,
    Operation,
    OperationCatalog,
    Placeholder,
    Session,
    Variable,
    collect,
)
from .infrastructure.utils.weight_initializer import WeightInitializer
from .infrastructure import layers

__version__ = "0.1.0"

__all__ = [
    "Axis",
    "RANK",
    "StatGraphError",
    "ShapeError",
    "AllocationError",
    "UnboundPlaceholderError",
    "NotEvaluatedError",
    "UnknownOperationError",
    "UnsupportedAxisError",
    "NodeKind",
    "OpKind",
    "EngineConfig",
    "get_config",
    "set_config",
    "get_logger",
    "Shape",
    "Tensor",
    "Graph",
    "Node",
    "Operation",
    "OperationCatalog",
    "Placeholder",
    "Session",
    "Variable",
    "collect",
    "WeightInitializer",
    "layers",
]
