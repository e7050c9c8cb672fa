"""Public container holding the current snapshot."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Final

from layered_state.composer import Composer, InjectionPolicy
from layered_state.config import LayeredStateSettings, load_settings
from layered_state.errors import InvalidArgumentError
from layered_state.snapshot import Snapshot
from layered_state.values import Key

logger = logging.getLogger(__name__)

# Distinguishes an omitted argument from an explicit None, which is rejected.
_MISSING: Final = object()


def _require_mapping(value: Any, what: str) -> Mapping[Key, object]:
    if value is _MISSING:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


class Container:
    """Owns a single reference to the current snapshot.

    Every :meth:`update` composes a fresh snapshot and swaps the reference;
    snapshots handed out earlier never change. Not safe for concurrent updates
    while calls into the same container are in flight.
    """

    def __init__(self, snapshot: Snapshot, composer: Composer) -> None:
        self._current = snapshot
        self._composer = composer

    @classmethod
    def create(
        cls,
        initial: Mapping[Key, object] | Any = _MISSING,
        *,
        policy: InjectionPolicy | str | None = None,
        settings: LayeredStateSettings | None = None,
    ) -> Container:
        """Build a container whose first snapshot holds ``initial`` as given.

        Omitting ``initial`` yields an empty container; anything passed must be a
        mapping, ``None`` included.
        """

        entries = _require_mapping(initial, "initial entries")
        if policy is None:
            policy = (settings or load_settings()).injection_policy
        composer = Composer(InjectionPolicy(policy))
        snapshot = Snapshot(entries)
        logger.debug(
            "container.create",
            extra={"data": {"keys": len(snapshot), "policy": composer.policy.value}},
        )
        return cls(snapshot, composer)

    @property
    def policy(self) -> InjectionPolicy:
        return self._composer.policy

    def current(self) -> Snapshot:
        """Return the live snapshot at the time of the call."""
        return self._current

    def update(self, props: Mapping[Key, object] | Any = _MISSING, /, **entries: object) -> None:
        """Apply ``props`` (then keyword ``entries``) on top of the current snapshot.

        ``props`` is positional-only, so every keyword is an entry name:
        ``update(props={...})`` stores a data entry called ``"props"``.
        """

        merged: dict[Key, object] = dict(_require_mapping(props, "updates"))
        merged.update(entries)
        self._current = self._composer.compose(self._current, merged)
        logger.debug(
            "container.update",
            extra={"data": {"version": self._current.version, "keys": [str(key) for key in merged]}},
        )


def create_container(
    initial: Mapping[Key, object] | Any = _MISSING,
    *,
    policy: InjectionPolicy | str | None = None,
    settings: LayeredStateSettings | None = None,
) -> Container:
    return Container.create(initial, policy=policy, settings=settings)


__all__ = ["Container", "create_container"]
