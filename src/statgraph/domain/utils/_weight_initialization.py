"""
Abstract interfaces and utilities for weight initialization.

This module defines the abstract base class for weight initializers used by
graph Variables, along with a helper computing fan-in and fan-out values from
rank-5 weight shapes.

The concrete registry lives in the infrastructure layer. This module only
defines the contract and the shared arithmetic.
"""

from typing import Callable, Dict, Optional, Sequence, Tuple, TypeVar
from abc import ABC

from .._tensor import ITensor


T = TypeVar("T", bound=Callable[..., ITensor])


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable that fills a tensor in-place and
      returns it.
    - Initializers take the weight layout as an optional ``layout``
      keyword; those that do not depend on fans ignore it.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None:
        """
        Construct a weight initializer dispatcher.

        Parameters
        ----------
        initializer_name:
            The string key identifying a registered initializer.
        """
        ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """Return a decorator registering a callable under `name`."""
        ...

    def __call__(self, tensor: ITensor, layout: Optional[str] = None) -> ITensor:
        """Apply the selected initializer to `tensor` laid out as `layout`."""
        ...


WEIGHT_LAYOUTS = ("dense", "conv")
"""Weight layouts understood by `_calculate_fan_in_and_fan_out`."""


def _calculate_fan_in_and_fan_out(
    shape: Sequence[int], layout: Optional[str] = None
) -> Tuple[int, int]:
    """
    Compute fan-in and fan-out for a rank-5 weight shape.

    Two layouts are used by the operation catalog:

    - ``"dense"``: ``(1, 1, 1, in_features, out_features)``
    - ``"conv"``: ``(n_filters, depth, width, height, in_channels)``

    Parameters
    ----------
    shape : Sequence[int]
        The five dimensions of the weight.
    layout : Optional[str]
        One of `WEIGHT_LAYOUTS`. Weights built by an operation always pass
        it. When omitted, a shape with unit leading axes is read as dense;
        a single 1x1 filter is indistinguishable from a dense matrix, so
        pass the layout whenever it is known.

    Returns
    -------
    tuple[int, int]
        (fan_in, fan_out)
    """
    if len(shape) != 5:
        raise ValueError(f"Expected a rank-5 shape, got {tuple(shape)}")
    if layout is not None and layout not in WEIGHT_LAYOUTS:
        raise ValueError(
            f"Unknown weight layout {layout!r}; expected one of {WEIGHT_LAYOUTS}"
        )

    n, d, w, h, c = (int(v) for v in shape)
    if layout == "dense" or (layout is None and n == 1 and d == 1 and w == 1):
        return h, c

    receptive = d * w * h
    return c * receptive, n * receptive
