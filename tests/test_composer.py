from __future__ import annotations

import logging

import pytest

from layered_state.composer import ComposedOperation, Composer, InjectionPolicy
from layered_state.handle import PreviousHandle
from layered_state.snapshot import Snapshot
from layered_state.values import Data, Operation


def base_get(context):
    return context.data("n")


def test_operation_over_operation_wraps() -> None:
    base = Snapshot({"n": 1, "get": base_get})

    def get(context, previous):
        return previous() + 1

    result = Composer().compose(base, {"get": get})

    composed = result["get"]
    assert isinstance(composed, ComposedOperation)
    assert isinstance(composed.previous, PreviousHandle)
    assert composed.previous.snapshot is base
    assert list(composed.layers()) == [get, base_get]
    assert result.call("get") == 2


def test_data_on_either_side_replaces() -> None:
    base = Snapshot({"a": 1, "b": base_get, "c": 3})

    def new_fn(context, *args):
        return args

    result = Composer().compose(base, {"a": new_fn, "b": 5, "c": Data(new_fn)})

    assert type(result["a"]) is Operation
    assert result.call("a") == ()
    assert result["b"] == Data(5)
    assert result.data("c") is new_fn


def test_new_key_is_inserted_without_wrapping() -> None:
    result = Composer().compose(Snapshot(), {"get": base_get})
    assert type(result["get"]) is Operation


def test_untouched_keys_carry_over() -> None:
    base = Snapshot({"n": 1, "get": base_get})
    result = Composer().compose(base, {"n": 2})

    assert result["get"] is base["get"]
    assert result.call("get") == 2
    assert result.version == base.version + 1
    assert base.data("n") == 1


def test_result_keeps_key_order_and_appends_new_keys() -> None:
    base = Snapshot({"a": 1, "b": 2})
    result = Composer().compose(base, {"c": 3, "a": 10})
    assert list(result) == ["a", "b", "c"]


def test_replaced_operation_history_is_lost() -> None:
    def get(context, previous):
        return previous()

    composer = Composer()
    snapshot = composer.compose(Snapshot({"n": 1, "get": base_get}), {"get": 7})
    snapshot = composer.compose(snapshot, {"get": get})

    assert type(snapshot["get"]) is Operation
    assert snapshot["get"].depth == 1


def test_each_compose_creates_a_fresh_handle() -> None:
    def get(context, previous):
        return previous()

    base = Snapshot({"n": 1, "get": base_get})
    first = Composer().compose(base, {"get": get})
    second = Composer().compose(base, {"get": get})
    assert first["get"].previous is not second["get"].previous


def test_always_append_passes_handle_last() -> None:
    seen = []

    def rand(context, seed, previous):
        seen.append((seed, previous))
        return previous(seed)

    base = Snapshot({"rand": lambda context, seed: seed * 2})
    result = Composer(InjectionPolicy.ALWAYS_APPEND).compose(base, {"rand": rand})

    assert result.call("rand", 9) == 18
    assert seen[0][0] == 9
    assert isinstance(seen[0][1], PreviousHandle)


def test_always_append_passes_keyword_arguments_through() -> None:
    def scale(context, value, previous, *, factor=1):
        return previous(value) * factor

    base = Snapshot({"scale": lambda context, value: value + 1})
    result = Composer().compose(base, {"scale": scale})
    assert result.call("scale", 1, factor=3) == 6


def test_arity_policy_appends_handle_when_slots_are_missing() -> None:
    def rand(context, seed, previous):
        return ("wrapped", previous(seed))

    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})

    assert result.call("rand", 9) == ("wrapped", 9)


def test_arity_policy_pads_missing_arguments_with_none() -> None:
    captured = {}

    def rand(context, seed, previous):
        captured["seed"] = seed
        captured["previous"] = previous
        return previous(3)

    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})

    assert result.call("rand") == 3
    assert captured["seed"] is None
    assert isinstance(captured["previous"], PreviousHandle)


def test_arity_policy_leaves_full_argument_lists_unchanged() -> None:
    def rand(context, seed, previous):
        return (seed, previous)

    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})

    assert result.call("rand", 9, "explicit") == (9, "explicit")
    assert result["rand"].previous(4) == 4


def test_arity_policy_always_injects_into_variadic_functions() -> None:
    def rand(context, *args):
        return args[-1]

    base = Snapshot({"rand": lambda context: 1})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})
    assert isinstance(result.call("rand", 1, 2, 3), PreviousHandle)


def test_composer_accepts_policy_strings() -> None:
    assert Composer("arity").policy is InjectionPolicy.ARITY  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Composer("sometimes")  # type: ignore[arg-type]


def test_wrap_is_logged_with_structured_data(caplog: pytest.LogCaptureFixture) -> None:
    def get(context, previous):
        return previous()

    with caplog.at_level(logging.DEBUG, logger="layered_state.composer"):
        Composer().compose(Snapshot({"get": base_get}), {"get": get})

    records = [record for record in caplog.records if record.getMessage() == "composition.wrap"]
    assert len(records) == 1
    assert records[0].data == {"key": "get", "base_version": 0, "depth": 2, "policy": "always_append"}


def test_composition_never_invokes_operations() -> None:
    def explode(context, *args):
        raise AssertionError("must not run during compose")

    base = Snapshot({"op": explode})
    result = Composer().compose(base, {"op": explode})
    assert isinstance(result["op"], ComposedOperation)


def test_arity_policy_handles_keyword_call_arguments() -> None:
    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(
        base, {"rand": lambda context, seed, previous: previous(seed) + 1}
    )

    assert result.call("rand", seed=9) == 10
    assert result.call("rand", 9) == 10


def test_arity_policy_respects_keyword_supplied_handle_slot() -> None:
    def rand(context, seed, previous):
        return (seed, previous)

    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})

    assert result.call("rand", 9, previous="explicit") == (9, "explicit")


def test_arity_policy_counts_defaulted_parameters_and_keeps_defaults() -> None:
    captured = {}

    def scale(context, value, factor=3, previous=None):
        captured["factor"] = factor
        return previous(value) * factor

    base = Snapshot({"scale": lambda context, value: value + 1})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"scale": scale})

    assert result["scale"].arity == 3
    assert result.call("scale", 1) == 6
    assert captured["factor"] == 3
    assert result.call("scale", 1, 2) == 4


def test_arity_policy_pads_positional_only_parameters() -> None:
    def rand(context, seed, previous, /):
        return (seed, previous)

    base = Snapshot({"rand": lambda context, seed: seed})
    result = Composer(InjectionPolicy.ARITY).compose(base, {"rand": rand})

    seed, previous = result.call("rand")
    assert seed is None
    assert isinstance(previous, PreviousHandle)
