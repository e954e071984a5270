"""
CPU reference kernels for non-overlapping 2D pooling (NumPy backend).

Pooling windows are ``width x width`` squares on the (width, height) axes of
the statgraph layout (N, F, W, H, C), with stride equal to the window size.
Trailing rows/columns that do not fill a whole window are ignored by the
forward pass and receive zero gradient in the backward pass.

Implemented kernels
-------------------
- `pool2d_forward_cpu`: max / min / avg reduction per window
- `pool2d_route_backward_cpu`: routes pooled gradients to the window winner
  (max or min), first occurrence on ties
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

_MODES = ("max", "min", "avg")


def _windows(x: np.ndarray, width: int) -> Tuple[np.ndarray, int, int]:
    """
    Regroup `x` into pooling windows.

    Returns
    -------
    tuple
        (windows, W_out, H_out) where `windows` has shape
        (N, F, W_out, H_out, width * width, C) and is a copy.
    """
    n, f, w, h, c = x.shape
    w_out, h_out = w // width, h // width
    cropped = x[:, :, : w_out * width, : h_out * width, :]
    grouped = cropped.reshape(n, f, w_out, width, h_out, width, c)
    windows = grouped.transpose(0, 1, 2, 4, 3, 5, 6).reshape(
        n, f, w_out, h_out, width * width, c
    )
    return windows, w_out, h_out


def pool2d_forward_cpu(x: np.ndarray, width: int, mode: str) -> np.ndarray:
    """
    Pool `x` over non-overlapping windows.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (N, F, W, H, C).
    width : int
        Window side length (also the stride).
    mode : str
        One of ``"max"``, ``"min"``, ``"avg"``.

    Returns
    -------
    np.ndarray
        Output of shape (N, F, W // width, H // width, C). ``"avg"`` divides
        each window sum by ``width ** 2``.
    """
    if mode not in _MODES:
        raise ValueError(f"Unsupported pooling mode: {mode!r}")

    windows, _, _ = _windows(x, width)
    if mode == "max":
        return windows.max(axis=4)
    if mode == "min":
        return windows.min(axis=4)
    return windows.sum(axis=4) / float(width * width)


def pool2d_route_backward_cpu(
    grad_out: np.ndarray, x: np.ndarray, width: int, mode: str
) -> np.ndarray:
    """
    Route pooled values back to the input position that won each window.

    Parameters
    ----------
    grad_out : np.ndarray
        Values to route, shape (N, F, W // width, H // width, C).
    x : np.ndarray
        Forward input, shape (N, F, W, H, C). Used to locate the winners.
    width : int
        Window side length used in the forward pass.
    mode : str
        ``"max"`` or ``"min"``.

    Returns
    -------
    np.ndarray
        Array shaped like `x`; zero everywhere except at window winners.
    """
    if mode not in ("max", "min"):
        raise ValueError(f"Unsupported routing mode: {mode!r}")

    n, f, _, _, c = x.shape
    windows, w_out, h_out = _windows(x, width)
    winner = windows.argmax(axis=4) if mode == "max" else windows.argmin(axis=4)

    routed = np.zeros(windows.shape, dtype=np.result_type(grad_out, x))
    np.put_along_axis(
        routed, winner[:, :, :, :, None, :], grad_out[:, :, :, :, None, :], axis=4
    )

    routed = routed.reshape(n, f, w_out, h_out, width, width, c)
    routed = routed.transpose(0, 1, 2, 4, 3, 5, 6).reshape(
        n, f, w_out * width, h_out * width, c
    )

    grad_x = np.zeros(x.shape, dtype=routed.dtype)
    grad_x[:, :, : w_out * width, : h_out * width, :] = routed
    return grad_x
