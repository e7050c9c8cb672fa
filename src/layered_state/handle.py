"""Handle exposing a replaced operation to the operation that replaced it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from layered_state.snapshot import Snapshot
    from layered_state.values import Operation


class PreviousHandle:
    """Previous implementation fixed to the snapshot it was defined against.

    Calling the handle runs the wrapped operation with that snapshot as its
    context, so later updates never change what it observes. Any other attribute
    set on the handle is side-channel storage owned by the override layer that
    received it; one handle exists per wrap and lives as long as that layer.
    """

    __slots__ = ("_operation", "_snapshot", "__dict__")

    def __init__(self, operation: Operation, snapshot: Snapshot) -> None:
        object.__setattr__(self, "_operation", operation)
        object.__setattr__(self, "_snapshot", snapshot)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._operation.invoke(self._snapshot, *args, **kwargs)

    def __setattr__(self, name: str, value: Any) -> None:
        _check_reserved(name)
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        _check_reserved(name)
        object.__delattr__(self, name)

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def fields(self) -> dict[str, Any]:
        """Return a copy of the side-channel attributes."""
        return dict(self.__dict__)

    def __repr__(self) -> str:
        return f"PreviousHandle({self._operation.name}, version={self._snapshot.version})"


def _check_reserved(name: str) -> None:
    if name in ("operation", "snapshot", "fields") or name in PreviousHandle.__slots__:
        raise AttributeError(f"{name!r} is reserved on previous handles")


__all__ = ["PreviousHandle"]
