"""
Process-wide engine configuration.

`EngineConfig` collects the few switches shared by the tensor engine and the
graph runtime:

* ``dtype`` is the element type of newly allocated buffers (``"float32"`` by
  default, ``"float64"`` for higher-precision gradient checks).
* ``tolerance`` is the absolute per-element tolerance used by tensor
  equality.
* ``seed`` seeds the random generator behind `Tensor.random`, `Tensor.mask`
  and the weight initializers. ``None`` draws fresh entropy.
* ``log_epsilon`` clamps probabilities away from 0 and 1 before taking
  logarithms in the cross-entropy loss.

The active configuration is replaced (never mutated) by `set_config`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

import numpy as np

_SUPPORTED_DTYPES = ("float32", "float64")


@dataclass(frozen=True)
class EngineConfig:
    """Immutable engine settings; see the module docstring for each field."""

    dtype: str = "float32"
    tolerance: float = 1e-6
    seed: Optional[int] = None
    log_epsilon: float = 1e-12

    def normalized(self) -> "EngineConfig":
        """
        Validate the settings and return a canonical copy.

        Raises
        ------
        ValueError
            If any field is outside its accepted range.
        """
        dtype = np.dtype(self.dtype).name
        if dtype not in _SUPPORTED_DTYPES:
            raise ValueError(
                f"Unsupported dtype {self.dtype!r}; expected one of {_SUPPORTED_DTYPES}"
            )
        tolerance = float(self.tolerance)
        if tolerance < 0.0:
            raise ValueError("tolerance must be non-negative")
        seed = self.seed
        if seed is not None:
            seed = int(seed)
            if seed < 0:
                raise ValueError("seed must be a non-negative integer")
        log_epsilon = float(self.log_epsilon)
        if not 0.0 <= log_epsilon < 0.5:
            raise ValueError("log_epsilon must be in [0, 0.5)")
        return EngineConfig(
            dtype=dtype, tolerance=tolerance, seed=seed, log_epsilon=log_epsilon
        )

    @property
    def np_dtype(self) -> np.dtype:
        """Return `dtype` as a NumPy dtype object."""
        return np.dtype(self.dtype)


_config: EngineConfig = EngineConfig().normalized()
_rng: np.random.Generator = np.random.default_rng(_config.seed)


def get_config() -> EngineConfig:
    """Return the active engine configuration."""
    return _config


def set_config(config: Optional[EngineConfig] = None, **changes: Any) -> EngineConfig:
    """
    Replace the active configuration.

    Parameters
    ----------
    config : Optional[EngineConfig]
        A complete configuration to install. When omitted, the active one is
        used as the starting point.
    **changes
        Field overrides applied on top of `config`.

    Returns
    -------
    EngineConfig
        The previously active configuration, so callers can restore it.

    Notes
    -----
    The random generator is reseeded from the new configuration every time
    this function is called.
    """
    global _config, _rng

    previous = _config
    base = config if config is not None else _config
    _config = replace(base, **changes).normalized()
    _rng = np.random.default_rng(_config.seed)
    return previous


def rng() -> np.random.Generator:
    """Return the process-wide random generator."""
    return _rng
