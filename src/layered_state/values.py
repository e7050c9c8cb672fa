"""Tagged values stored in a container: plain data or composable operations."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from layered_state.snapshot import Snapshot

Key: TypeAlias = Hashable


@dataclass(frozen=True, slots=True)
class Data:
    """Plain data entry; never eligible for wrapping."""

    value: Any


@dataclass(frozen=True, slots=True)
class Operation:
    """Callable entry invoked as ``fn(context, *args, **kwargs)``.

    ``context`` is the snapshot the operation evaluates against. ``parameters``
    holds the positional parameters declared after ``context``. ``arity`` is their
    count, defaulted ones included, and ``None`` for functions accepting ``*args``
    or whose signature cannot be inspected.
    """

    fn: Callable[..., Any]
    parameters: tuple[inspect.Parameter, ...] = field(init=False, repr=False, compare=False)
    arity: int | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not callable(self.fn):
            raise TypeError(f"operation requires a callable, got {type(self.fn).__name__}")
        parameters = _positional_parameters(self.fn)
        object.__setattr__(self, "parameters", parameters or ())
        object.__setattr__(self, "arity", None if parameters is None else len(parameters))

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", None) or type(self.fn).__name__

    @property
    def depth(self) -> int:
        """Number of layers in the composition chain ending at this operation."""
        return sum(1 for _ in self.layers())

    def invoke(self, context: Snapshot, *args: Any, **kwargs: Any) -> Any:
        return self.fn(context, *args, **kwargs)

    def layers(self) -> Iterator[Callable[..., Any]]:
        """Yield the functions of the chain, newest first."""
        yield self.fn


Value: TypeAlias = Data | Operation


def as_value(raw: object) -> Value:
    """Tag ``raw`` at insertion time.

    Tagged values pass through, other callables become operations and anything
    else becomes data. Wrap a callable in :class:`Data` to store it as data.
    """

    if isinstance(raw, (Data, Operation)):
        return raw
    if callable(raw):
        return Operation(raw)
    return Data(raw)


def _positional_parameters(fn: Callable[..., Any]) -> tuple[inspect.Parameter, ...] | None:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return None
    positional: list[inspect.Parameter] = []
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional.append(param)
    # The first positional parameter receives the evaluation context.
    return tuple(positional[1:])


__all__ = ["Data", "Key", "Operation", "Value", "as_value"]
