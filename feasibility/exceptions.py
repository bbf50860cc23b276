"""Exception types for the feasibility core.

The calculation and report engines do not raise for bad numbers or bad
configuration; these are only raised by explicit lookups.
"""


class FeasibilityError(Exception):
    """Base class for feasibility core errors."""


class UnknownFieldError(FeasibilityError, KeyError):
    """A report field key was looked up explicitly and is not registered."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown report field: {self.key!r}"
