"""Exception hierarchy for resultchain.

Domain failures travel as ``Err`` values and never become exceptions here.
These exceptions signal misuse of the library itself: bad configuration, a
pipeline built incorrectly, or a step that broke the result contract.
"""

from __future__ import annotations


class ResultchainError(Exception):
    """Base exception for all resultchain errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class ConfigurationError(ResultchainError):
    """Configuration validation or resolution failed."""


class PipelineDefinitionError(ResultchainError):
    """A pipeline was built or driven incorrectly."""


class InvariantViolationError(ResultchainError):
    """A step broke the result contract.

    Raised when a fallible step returns something other than ``Ok``/``Err``,
    or, with validation enabled, when a plain computation returns a result or
    an awaitable where a bare value was expected.
    """

    def __init__(
        self,
        message: str,
        *,
        step_name: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.step_name = step_name
