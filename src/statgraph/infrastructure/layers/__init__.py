"""
Graph-building API: one function per operation kind.
"""

from ._builders import (
    add,
    matmul,
    conv2d,
    conv3d,
    max_pooling,
    min_pooling,
    avg_pooling,
    reshape,
    flatten,
    full_connected,
    sigmoid,
    tanh,
    relu,
    leaky_relu,
    softmax,
    mse,
    cross_entropy,
)

__all__ = [
    "add",
    "matmul",
    "conv2d",
    "conv3d",
    "max_pooling",
    "min_pooling",
    "avg_pooling",
    "reshape",
    "flatten",
    "full_connected",
    "sigmoid",
    "tanh",
    "relu",
    "leaky_relu",
    "softmax",
    "mse",
    "cross_entropy",
]
