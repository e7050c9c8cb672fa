"""Decorator helpers for registering override layers on a container."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from layered_state.container import Container
from layered_state.values import Data, Operation

P = ParamSpec("P")
R = TypeVar("R")


def override(container: Container, name: str | None = None) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that layers a function over the container entry of the same name."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        entry_name = name or func.__name__
        container.update({entry_name: Operation(func)})
        return func

    return decorator


def operation(func: Callable[..., Any]) -> Operation:
    """Tag ``func`` explicitly as an operation value."""
    return Operation(func)


def data(value: Any) -> Data:
    """Tag ``value`` as plain data, even when it is callable."""
    return Data(value)


__all__ = ["data", "operation", "override"]
