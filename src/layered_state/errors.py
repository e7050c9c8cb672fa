"""Library exceptions raised by the composition core.

Exceptions raised by host-supplied operations are never caught or wrapped here;
they reach the direct caller of the operation unchanged.
"""

from __future__ import annotations


class LayeredStateError(Exception):
    """Base class for failures originating in the composition core."""


class InvalidArgumentError(LayeredStateError, TypeError):
    """Raised when a container is created or updated with a non-mapping."""


class NotAnOperationError(LayeredStateError, TypeError):
    """Raised when a data entry is invoked as an operation."""


class NotDataError(LayeredStateError, TypeError):
    """Raised when an operation entry is read as plain data."""


__all__ = [
    "LayeredStateError",
    "InvalidArgumentError",
    "NotAnOperationError",
    "NotDataError",
]
