"""Exceptions raised for malformed networks and queries."""

from __future__ import annotations


class NetworkDefinitionError(ValueError):
    """A network description is structurally invalid."""


class CPTSizeError(NetworkDefinitionError):
    """A flat probability table does not have the expected number of values."""

    def __init__(self, variable: str, expected: int, actual: int):
        self.variable = variable
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Number of probabilities ({actual}) does not match expected number "
            f"based on parent/child outcomes ({expected}) for variable '{variable}'"
        )


class QueryError(ValueError):
    """A query references unknown variables/outcomes or cannot be parsed."""


__all__ = ["NetworkDefinitionError", "CPTSizeError", "QueryError"]
