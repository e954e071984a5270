"""
Axis naming for the fixed rank-5 tensor layout.

Every tensor in statgraph has exactly five axes, always in this order:

    (sample, frame, width, height, channel)

Spatial operations (convolution, pooling, padding) act on WIDTH and HEIGHT,
`conv3d` additionally slides over FRAME, and matrix multiplication treats
HEIGHT x CHANNEL as the (rows x cols) matrix.
"""

from enum import IntEnum

from ._errors import UnsupportedAxisError

RANK = 5


class Axis(IntEnum):
    """Named positions of the five tensor axes."""

    SAMPLE = 0
    FRAME = 1
    WIDTH = 2
    HEIGHT = 3
    CHANNEL = 4


def check_axis(axis: int, op: str = None) -> int:
    """
    Validate an axis index and return it as a plain int.

    Parameters
    ----------
    axis : int
        Candidate axis. Negative values are not accepted.
    op : str, optional
        Operation name used in the error message.

    Returns
    -------
    int
        The validated axis.

    Raises
    ------
    UnsupportedAxisError
        If `axis` is not an integer in ``0..4``.
    """
    if isinstance(axis, bool) or not isinstance(axis, int):
        raise UnsupportedAxisError(axis, op)
    if axis < 0 or axis >= RANK:
        raise UnsupportedAxisError(axis, op)
    return int(axis)
