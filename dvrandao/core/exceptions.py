"""dvrandao.core.exceptions

Errors are part of the interface.

Arithmetic never raises: overflow wraps and division by zero yields the NaN
sentinel. Exceptions are reserved for malformed input at the edges.
"""

from __future__ import annotations


class DvrandaoError(Exception):
    """Base exception for dvrandao."""


class ConfigError(DvrandaoError):
    """Configuration is missing, invalid, or inconsistent."""


class MalformedSnapshotError(DvrandaoError):
    """A problem snapshot does not have the expected shape or arity."""


class RecordError(DvrandaoError):
    """Record parameters cannot be encoded or signed."""
