"""
Xavier/Glorot and Kaiming/He weight initializers.

Implemented variants
--------------------
- ``xavier``:
    Normal with ``std = sqrt(2 / (fan_in + fan_out))``.
- ``xavier_uniform``:
    ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``.
- ``kaiming``:
    Normal with ``std = sqrt(2 / fan_in)``, suited to ReLU layers.

Fan-in and fan-out are computed from the rank-5 weight shape and its layout
(``"dense"`` or ``"conv"``) via ``_calculate_fan_in_and_fan_out``.
"""

import math
from typing import Optional

from ._base import WeightInitializer
from ...tensor._tensor import Tensor
from ..._config import rng
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


def _fans(tensor: Tensor, layout: Optional[str]):
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tensor.shape.as_tuple(), layout)
    return max(1, int(fan_in)), max(1, int(fan_out))


@WeightInitializer.register_initializer("xavier")
def xavier(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """
    Apply Xavier (Glorot) normal initialization.

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.
    layout:
        ``"dense"`` or ``"conv"``; inferred from the shape when omitted.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    fan_in, fan_out = _fans(tensor, layout)
    std = math.sqrt(2.0 / float(fan_in + fan_out))
    tensor.copy_from_numpy(rng().standard_normal(tensor.shape.as_tuple()) * std)
    return tensor


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """
    Apply Xavier (Glorot) uniform initialization.

        U(-bound, +bound), where bound = sqrt(6 / (fan_in + fan_out))
    """
    fan_in, fan_out = _fans(tensor, layout)
    bound = math.sqrt(6.0 / float(fan_in + fan_out))
    tensor.copy_from_numpy(rng().uniform(-bound, bound, size=tensor.shape.as_tuple()))
    return tensor


@WeightInitializer.register_initializer("kaiming")
def kaiming(tensor: Tensor, layout: Optional[str] = None) -> Tensor:
    """Apply Kaiming (He) normal initialization, ``std = sqrt(2 / fan_in)``."""
    fan_in, _ = _fans(tensor, layout)
    scale = math.sqrt(2.0 / float(fan_in))
    tensor.copy_from_numpy(rng().standard_normal(tensor.shape.as_tuple()) * scale)
    return tensor
