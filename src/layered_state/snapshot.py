"""Read-only point-in-time view of a container's entries."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from functools import partial
from typing import Any

from layered_state.errors import NotAnOperationError, NotDataError
from layered_state.reporting import EntryReport, SnapshotReport
from layered_state.values import Data, Key, Operation, Value, as_value


class Snapshot(Mapping[Key, Value]):
    """Immutable mapping of keys to tagged values.

    Operations are looked up late: an operation evaluates against the snapshot it
    is invoked through.
    """

    __slots__ = ("_entries", "_version")

    def __init__(self, entries: Mapping[Key, object] | None = None, *, version: int = 0) -> None:
        self._entries: dict[Key, Value] = {key: as_value(raw) for key, raw in (entries or {}).items()}
        self._version = version

    @property
    def version(self) -> int:
        return self._version

    def __getitem__(self, key: Key) -> Value:
        return self._entries[key]

    def __iter__(self) -> Iterator[Key]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def call(self, key: Key, *args: Any, **kwargs: Any) -> Any:
        """Invoke the operation stored under ``key`` with this snapshot as context."""
        return self.operation(key).invoke(self, *args, **kwargs)

    def operation(self, key: Key) -> Operation:
        value = self._entries[key]
        if not isinstance(value, Operation):
            raise NotAnOperationError(f"entry {key!r} holds data, not an operation")
        return value

    def data(self, key: Key) -> Any:
        """Return the raw value of the data entry stored under ``key``."""
        value = self._entries[key]
        if not isinstance(value, Data):
            raise NotDataError(f"entry {key!r} holds an operation, not data")
        return value.value

    def resolve(self, key: Key) -> Any:
        """Return raw data, or the operation bound to this snapshot as a plain callable."""
        value = self._entries[key]
        if isinstance(value, Data):
            return value.value
        bound: Callable[..., Any] = partial(value.invoke, self)
        return bound

    def to_dict(self) -> dict[Key, Value]:
        """Return a shallow copy of the entries."""
        return dict(self._entries)

    def describe(self) -> SnapshotReport:
        entries: dict[str, EntryReport] = {}
        for key, value in self._entries.items():
            if isinstance(value, Operation):
                layers = [getattr(fn, "__qualname__", type(fn).__name__) for fn in value.layers()]
                entries[str(key)] = EntryReport(kind="operation", depth=len(layers), layers=layers)
            else:
                entries[str(key)] = EntryReport(kind="data")
        return SnapshotReport(version=self._version, entries=entries)

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        return f"Snapshot(version={self._version}, entries={self._entries!r})"


__all__ = ["Snapshot"]
