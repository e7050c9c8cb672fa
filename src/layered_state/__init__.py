"""Layered keyed state whose operations can delegate to the implementations they replace."""

from layered_state.composer import ComposedOperation, Composer, InjectionPolicy
from layered_state.config import LayeredStateSettings, load_settings
from layered_state.container import Container, create_container
from layered_state.decorators import data, operation, override
from layered_state.errors import (
    InvalidArgumentError,
    LayeredStateError,
    NotAnOperationError,
    NotDataError,
)
from layered_state.handle import PreviousHandle
from layered_state.snapshot import Snapshot
from layered_state.values import Data, Operation, Value, as_value

__all__ = [
    "ComposedOperation",
    "Composer",
    "Container",
    "Data",
    "InjectionPolicy",
    "InvalidArgumentError",
    "LayeredStateError",
    "LayeredStateSettings",
    "NotAnOperationError",
    "NotDataError",
    "Operation",
    "PreviousHandle",
    "Snapshot",
    "Value",
    "as_value",
    "create_container",
    "data",
    "load_settings",
    "operation",
    "override",
]
