"""
structval.errors — What the engine raises.

Every error is raised synchronously and never recovered inside the
package.  The classes subclass the matching builtin so callers that
already catch ``TypeError`` / ``RecursionError`` keep working.
"""

from typing import Sequence


class StructvalError(Exception):
    """Base class for everything raised by structval."""


def _signature(operation: str, params: Sequence[str]) -> str:
    return f"structval/{operation}({', '.join(params)})"


class ShapeError(StructvalError, TypeError):
    """An argument is not of the kind the operation requires."""

    def __init__(self, operation: str, params: Sequence[str],
                 parameter: str, expected: str, received: str):
        self.operation = operation
        self.parameter = parameter
        self.expected = expected
        self.received = received
        super().__init__(
            f'{_signature(operation, params)}: parameter "{parameter}" '
            f"expected {expected}, received {received}"
        )


class MissingArgumentError(StructvalError, TypeError):
    """A required argument was omitted entirely (not passed as None)."""

    def __init__(self, operation: str, params: Sequence[str], parameter: str):
        self.operation = operation
        self.parameter = parameter
        super().__init__(
            f'{_signature(operation, params)}: parameter "{parameter}" is required'
        )


class DepthLimitError(StructvalError, RecursionError):
    """A value nests deeper than ``core.MAX_DEPTH``."""

    def __init__(self, operation: str, limit: int):
        self.operation = operation
        self.limit = limit
        super().__init__(
            f"structval/{operation}: value nests deeper than {limit} levels"
        )
