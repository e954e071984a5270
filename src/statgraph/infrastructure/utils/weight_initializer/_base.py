"""
Weight initializer registry and dispatch utilities.

Graph `Variable`s name their initializer by string; this module resolves the
name to a registered callable and applies it.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer fills a tensor *in-place* and returns it.
- Random initializers draw from the engine's configured generator, so a
  configured seed makes weight values reproducible.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("uniform")
    def uniform(tensor: Tensor) -> Tensor:
        ...

Applying an initializer:

    init = WeightInitializer("uniform")
    init(weight_tensor)
"""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, Optional, Tuple, TypeVar

from ....domain.utils._weight_initialization import _WeightInitializer
from ...tensor._tensor import Tensor

T = TypeVar("T", bound=Callable[..., Tensor])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Parameters
    ----------
    initializer_name : str
        Name of a registered initializer.

    Raises
    ------
    ValueError
        If `initializer_name` is not registered. The message lists the
        available names.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Tensor]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer: Callable[..., Tensor] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ValueError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> Tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(self, tensor: Tensor, layout: Optional[str] = None) -> Tensor:
        """
        Fill `tensor` with the selected initializer and return it.

        `layout` (``"dense"`` or ``"conv"``) is forwarded only when given, so
        initializers registered without a ``layout`` keyword keep working for
        plain tensors.
        """
        if layout is None:
            return self._initializer(tensor)
        return self._initializer(tensor, layout=layout)
