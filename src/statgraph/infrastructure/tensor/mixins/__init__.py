"""
Tensor mixins.

Each mixin contributes one family of operations to the concrete `Tensor`:

- ``TensorMixinArithmetic``: ``+ - * /`` with the single-axis broadcast rule
- ``TensorMixinReduction``: sums, means, extrema
- ``TensorMixinMemory``: reshape / permute / slice and spatial border edits
- ``TensorMixinUnary``: exp, log and activation functions
- ``TensorMixinLinalg``: batched matmul and Kronecker product
- ``TensorMixinSpatial``: convolution, pooling and upsampling
"""

from ._arithmetic import TensorMixinArithmetic
from ._reduction import TensorMixinReduction
from ._memory import TensorMixinMemory
from ._unary import TensorMixinUnary
from ._linalg import TensorMixinLinalg
from ._spatial import TensorMixinSpatial

__all__ = [
    TensorMixinArithmetic.__name__,
    TensorMixinReduction.__name__,
    TensorMixinMemory.__name__,
    TensorMixinUnary.__name__,
    TensorMixinLinalg.__name__,
    TensorMixinSpatial.__name__,
]
