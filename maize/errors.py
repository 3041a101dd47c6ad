"""Define the error kinds raised by the maize analysis pipeline.

Each error carries the context needed to diagnose it without re-running
with extra logging: the file path, the offending pair id, or the parameter
name and value.
"""

from __future__ import annotations


class MaizeError(Exception):
    """Base class for every error raised by the analysis pipeline."""


class LoadError(MaizeError):
    """The input table could not be read or does not have the expected shape.

    Attributes:
        path: Path of the file that failed to load.
        cause: Underlying exception or a short description of the problem.
    """

    def __init__(self, path, cause):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Could not load observations from '{self.path}': {cause}")


class PairingError(MaizeError, ValueError):
    """A pair id does not have exactly one Cross and one Self observation."""

    def __init__(self, pair_id, reason: str = "missing Cross or Self counterpart"):
        self.pair_id = pair_id
        self.reason = reason
        super().__init__(f"Pair {pair_id} cannot be matched: {reason}.")


class DegenerateModelError(MaizeError, ValueError):
    """There are not enough observations or factor levels to fit a model."""


class InvalidInputError(MaizeError, ValueError):
    """A numeric argument is malformed (NaN, negative, or out of range).

    Attributes:
        name: Parameter name.
        value: Offending value.
    """

    def __init__(self, name: str, value, expected: str = ""):
        self.name = name
        self.value = value
        message = f"Invalid value for '{name}': {value!r}"
        if expected:
            message += f" (expected {expected})"
        super().__init__(message)
