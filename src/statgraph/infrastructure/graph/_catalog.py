"""
Operation catalog: the registry mapping each `OpKind` to its rule.

A rule is declared as a plain class of static methods and registered with a
decorator, in the same spirit as a forward/backward `Function` pair:

    @OperationCatalog.register(OpKind.SIGMOID)
    class SigmoidRule:
        arity = 1

        @staticmethod
        def infer_shape(input_shapes, attrs): ...

        @staticmethod
        def compute(inputs, attrs): ...

        @staticmethod
        def gradient(grad_out, inputs, output, attrs): ...

Registration snapshots the static methods into an immutable `OperationRule`
record. The class is only a namespace; the runtime never instantiates it and
dispatches on the kind tag alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Optional, Tuple, TypeVar

from ...domain._errors import UnknownOperationError
from ...domain._operation import BuildFn, ComputeFn, GradientFn, OpKind, ShapeFn

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class OperationRule:
    """
    Stateless description of one operation kind.

    Attributes
    ----------
    kind : OpKind
        The kind this rule implements.
    arity : int
        Number of data inputs supplied by the caller. Weights created by
        `build` are appended after them.
    infer_shape : ShapeFn
        ``(input_shapes, attrs) -> Shape``; raises `ShapeError` on invalid
        geometry.
    compute : ComputeFn
        ``(inputs, attrs) -> Tensor``.
    gradient : GradientFn
        ``(grad_out, inputs, output, attrs) -> [grad_or_None per input]``.
    build : Optional[BuildFn]
        ``(input_shape, attrs) -> [(name, shape, trainable, initializer, layout)]``
        for kinds that own weights.
    """

    kind: OpKind
    arity: int
    infer_shape: ShapeFn
    compute: ComputeFn
    gradient: GradientFn
    build: Optional[BuildFn] = None


class OperationCatalog:
    """Class-level registry of `OperationRule`s keyed by `OpKind`."""

    RULES: ClassVar[Dict[OpKind, OperationRule]] = {}

    @classmethod
    def register(cls, kind: OpKind) -> Callable[[T], T]:
        """
        Decorator registering a rule namespace class for `kind`.

        Raises
        ------
        ValueError
            If `kind` is already registered, or the class lacks one of
            `arity`, `infer_shape`, `compute`, `gradient`.
        """
        if not isinstance(kind, OpKind):
            raise TypeError(f"kind must be an OpKind, got {kind!r}")

        def decorator(rule_cls: T) -> T:
            if kind in cls.RULES:
                raise ValueError(f"Operation already registered: {kind!r}")
            missing = [
                attr
                for attr in ("arity", "infer_shape", "compute", "gradient")
                if not hasattr(rule_cls, attr)
            ]
            if missing:
                raise ValueError(
                    f"{rule_cls.__name__} is missing {', '.join(missing)}"
                )
            cls.RULES[kind] = OperationRule(
                kind=kind,
                arity=int(rule_cls.arity),
                infer_shape=rule_cls.infer_shape,
                compute=rule_cls.compute,
                gradient=rule_cls.gradient,
                build=getattr(rule_cls, "build", None),
            )
            return rule_cls

        return decorator

    @classmethod
    def get(cls, kind: OpKind) -> OperationRule:
        """
        Return the rule registered for `kind`.

        Raises
        ------
        UnknownOperationError
            If no rule is registered (a `KeyError` subclass).
        """
        try:
            return cls.RULES[kind]
        except KeyError as e:
            raise UnknownOperationError(kind) from e

    @classmethod
    def kinds(cls) -> Tuple[OpKind, ...]:
        """Return the registered kinds in `OpKind` declaration order."""
        return tuple(k for k in OpKind if k in cls.RULES)
