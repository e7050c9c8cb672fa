"""Composition of snapshot updates: replace or wrap, per key."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from layered_state.handle import PreviousHandle
from layered_state.snapshot import Snapshot
from layered_state.values import Key, Operation, Value, as_value

logger = logging.getLogger(__name__)


class InjectionPolicy(StrEnum):
    """How the previous handle reaches the overriding function.

    ``ALWAYS_APPEND`` passes the handle as the last positional argument.
    ``ARITY`` fills the last declared positional parameter with the handle only
    when the call leaves that parameter unfilled, by position or by keyword.
    Parameters with defaults count as declared, so ``def f(ctx, x, previous=None)``
    receives the handle when called with ``x`` alone; skipped parameters keep their
    defaults and required ones receive ``None``.
    """

    ALWAYS_APPEND = "always_append"
    ARITY = "arity"


@dataclass(frozen=True, slots=True)
class ComposedOperation(Operation):
    """Operation layered over the operation it replaced.

    ``previous`` is created once, when the layer is composed, and reused by every
    invocation of this layer.
    """

    previous: PreviousHandle
    policy: InjectionPolicy = InjectionPolicy.ALWAYS_APPEND

    def invoke(self, context: Snapshot, *args: Any, **kwargs: Any) -> Any:
        call_args, call_kwargs = self._inject(args, kwargs)
        return self.fn(context, *call_args, **call_kwargs)

    def layers(self) -> Iterator[Callable[..., Any]]:
        yield self.fn
        yield from self.previous.operation.layers()

    def _inject(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
        if self.policy is InjectionPolicy.ALWAYS_APPEND or self.arity is None:
            return (*args, self.previous), kwargs
        if self.arity <= len(args) or self.parameters[-1].name in kwargs:
            return args, kwargs
        unfilled = self.parameters[len(args) :]
        if any(param.kind is inspect.Parameter.POSITIONAL_ONLY for param in unfilled):
            padding = (None,) * (len(unfilled) - 1)
            return (*args, *padding, self.previous), kwargs
        filled = dict(kwargs)
        for param in unfilled[:-1]:
            if param.name not in filled and param.default is inspect.Parameter.empty:
                filled[param.name] = None
        filled[unfilled[-1].name] = self.previous
        return args, filled


class Composer:
    """Produces the next snapshot from a base snapshot and a set of updates."""

    def __init__(self, policy: InjectionPolicy = InjectionPolicy.ALWAYS_APPEND) -> None:
        self._policy = InjectionPolicy(policy)

    @property
    def policy(self) -> InjectionPolicy:
        return self._policy

    def compose(self, base: Snapshot, props: Mapping[Key, object]) -> Snapshot:
        """Return a new snapshot holding ``base`` with ``props`` applied.

        Two operations under the same key compose; any other pairing replaces.
        Keys missing from ``props`` carry over unchanged.
        """

        entries: dict[Key, Value] = base.to_dict()
        for key, raw in props.items():
            incoming = as_value(raw)
            current = entries.get(key)
            if isinstance(current, Operation) and isinstance(incoming, Operation):
                entries[key] = self._wrap(key, current, incoming, base)
            else:
                entries[key] = incoming
        return Snapshot(entries, version=base.version + 1)

    def _wrap(self, key: Key, previous: Operation, incoming: Operation, base: Snapshot) -> ComposedOperation:
        composed = ComposedOperation(
            incoming.fn,
            previous=PreviousHandle(previous, base),
            policy=self._policy,
        )
        logger.debug(
            "composition.wrap",
            extra={
                "data": {
                    "key": str(key),
                    "base_version": base.version,
                    "depth": composed.depth,
                    "policy": self._policy.value,
                }
            },
        )
        return composed


__all__ = ["ComposedOperation", "Composer", "InjectionPolicy"]
