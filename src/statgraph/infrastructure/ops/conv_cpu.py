"""
CPU reference kernels for rank-5 convolution (NumPy backend).

This module provides readable NumPy implementations of the valid
(no implicit padding) cross-correlation used by `Tensor.conv2d` and
`Tensor.conv3d`, together with the kernels needed by their gradients.

Tensor layout
-------------
All arrays follow the statgraph layout:

- input  ``x``: (N, F, W, H, C)  samples, frames, width, height, channels
- filter ``w``: (K, D, KW, KH, C) filters, depth, width, height, channels
- output ``y``: (N, F_out, W_out, H_out, K)

A 2D convolution is the special case ``D == 1`` with a unit frame stride:
every frame is convolved independently.

Design notes
------------
- The loops run over filter offsets only; each offset contributes one
  strided input window contracted against a (K, C) filter slice with
  `np.tensordot`. This keeps the code close to the textbook definition while
  avoiding per-pixel Python loops.
- No kernel validates shapes beyond what it needs to index; callers raise
  `ShapeError` before invoking them.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np


Strides3 = Tuple[int, int, int]


def output_extent(size: int, kernel: int, stride: int) -> int:
    """Return ``(size - kernel) // stride + 1``, the valid output length."""
    return (size - kernel) // stride + 1


def _window(
    x: np.ndarray, d: int, a: int, c: int, out_fwh: Sequence[int], strides: Strides3
) -> np.ndarray:
    """
    Return the strided input window that meets filter offset (d, a, c).

    The result has shape (N, F_out, W_out, H_out, C) and is a view into `x`.
    """
    f_out, w_out, h_out = out_fwh
    s_f, s_w, s_h = strides
    return x[
        :,
        d : d + s_f * (f_out - 1) + 1 : s_f,
        a : a + s_w * (w_out - 1) + 1 : s_w,
        c : c + s_h * (h_out - 1) + 1 : s_h,
        :,
    ]


def correlate_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    b: Optional[np.ndarray],
    strides: Strides3,
) -> np.ndarray:
    """
    Valid cross-correlation of `x` with `w`, plus an optional per-filter bias.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (N, F, W, H, C).
    w : np.ndarray
        Filters of shape (K, D, KW, KH, C).
    b : Optional[np.ndarray]
        Bias holding K values (any shape with K elements), or None.
    strides : tuple[int, int, int]
        Strides along (frame, width, height).

    Returns
    -------
    np.ndarray
        Output of shape (N, F_out, W_out, H_out, K), where each extent is
        ``(in - kernel) // stride + 1``.
    """
    n = x.shape[0]
    k, kd, kw, kh, _ = w.shape
    out_fwh = (
        output_extent(x.shape[1], kd, strides[0]),
        output_extent(x.shape[2], kw, strides[1]),
        output_extent(x.shape[3], kh, strides[2]),
    )

    y = np.zeros((n, *out_fwh, k), dtype=np.result_type(x, w))
    for d in range(kd):
        for a in range(kw):
            for c in range(kh):
                patch = _window(x, d, a, c, out_fwh, strides)
                y += np.tensordot(patch, w[:, d, a, c, :], axes=([4], [1]))

    if b is not None:
        y += np.asarray(b).reshape(k)
    return y


def conv2d_forward_cpu(
    x: np.ndarray, w: np.ndarray, b: Optional[np.ndarray], stride: int
) -> np.ndarray:
    """Per-frame 2D correlation; `w` must have a unit depth axis."""
    return correlate_forward_cpu(x, w, b, (1, stride, stride))


def conv3d_forward_cpu(
    x: np.ndarray, w: np.ndarray, b: Optional[np.ndarray], stride: int
) -> np.ndarray:
    """3D correlation sliding over frames, width and height with one stride."""
    return correlate_forward_cpu(x, w, b, (stride, stride, stride))


def correlate_backward_filter_cpu(
    x: np.ndarray,
    grad_out: np.ndarray,
    filter_shape: Sequence[int],
    strides: Strides3,
) -> np.ndarray:
    """
    Gradient of a correlation with respect to its filters.

    Parameters
    ----------
    x : np.ndarray
        Forward input, shape (N, F, W, H, C).
    grad_out : np.ndarray
        Gradient w.r.t. the output, shape (N, F_out, W_out, H_out, K).
    filter_shape : Sequence[int]
        (K, D, KW, KH, C).
    strides : tuple[int, int, int]
        Forward strides along (frame, width, height).

    Returns
    -------
    np.ndarray
        ``grad_w[k, d, a, c, ch] = sum(x[n, d + i*sf, a + j*sw, c + l*sh, ch]
        * grad_out[n, i, j, l, k])``.
    """
    _, kd, kw, kh, _ = filter_shape
    out_fwh = grad_out.shape[1:4]

    grad_w = np.zeros(tuple(filter_shape), dtype=np.result_type(x, grad_out))
    for d in range(kd):
        for a in range(kw):
            for c in range(kh):
                patch = _window(x, d, a, c, out_fwh, strides)
                grad_w[:, d, a, c, :] = np.tensordot(
                    grad_out, patch, axes=([0, 1, 2, 3], [0, 1, 2, 3])
                )
    return grad_w


def correlate_backward_input_cpu(
    grad_out: np.ndarray,
    w: np.ndarray,
    x_shape: Sequence[int],
    strides: Strides3,
) -> np.ndarray:
    """
    Gradient of a correlation with respect to its input, by direct scatter.

    Each output position sends ``grad_out * w`` back to every input element
    of its receptive field. Input positions never covered by a window (when
    the stride does not divide the extent) receive zero.

    Returns
    -------
    np.ndarray
        Gradient of shape `x_shape`.
    """
    _, kd, kw, kh, _ = w.shape
    out_fwh = grad_out.shape[1:4]

    grad_x = np.zeros(tuple(x_shape), dtype=np.result_type(grad_out, w))
    for d in range(kd):
        for a in range(kw):
            for c in range(kh):
                window = _window(grad_x, d, a, c, out_fwh, strides)
                window += np.tensordot(grad_out, w[:, d, a, c, :], axes=([4], [0]))
    return grad_x


def dilate_cpu(x: np.ndarray, stride: int, axes: Sequence[int]) -> np.ndarray:
    """
    Insert ``stride - 1`` zeros between consecutive elements along `axes`.

    An axis of length L becomes ``(L - 1) * stride + 1``.
    """
    if stride == 1:
        return x.copy()
    shape = list(x.shape)
    index = [slice(None)] * x.ndim
    for axis in axes:
        shape[axis] = (x.shape[axis] - 1) * stride + 1
        index[axis] = slice(None, None, stride)
    out = np.zeros(shape, dtype=x.dtype)
    out[tuple(index)] = x
    return out


def extend_to_cpu(x: np.ndarray, shape: Sequence[int]) -> np.ndarray:
    """Zero-pad `x` at the trailing end of every axis up to `shape`."""
    out = np.zeros(tuple(shape), dtype=x.dtype)
    out[tuple(slice(0, s) for s in x.shape)] = x
    return out
