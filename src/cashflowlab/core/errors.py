"""
Error classes for CashflowLab.

This module defines the exception classes used throughout CashflowLab for
configuration problems and document validation failures. The projection engine
itself never raises for malformed entries; these are raised by the programmatic
configuration surface and by strict loading.
"""

from __future__ import annotations


class ConfigError(Exception):
    """
    Configuration error during engine setup.

    Raised when the caller configures the engine itself incorrectly, as opposed
    to feeding it a malformed document (which degrades gracefully).

    **Common Causes:**
    - Looking up a frequency that has no registered recurrence strategy
    - Registering a strategy that does not satisfy the strategy protocol
    - Constructing an entry with an unknown direction

    **Example Usage:**
        ```python
        from cashflowlab.core.errors import ConfigError
        from cashflowlab.core.recurrence import get_strategy

        try:
            get_strategy("fortnightly")
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class DocumentValidationError(Exception):
    """
    Raised when a document fails strict validation.

    Attributes:
        document_id: Label of the document that failed (file name or '<mapping>')
        report: The validation report object (if available)
        problem_ids: List of entry/stream IDs that caused issues
    """

    def __init__(
        self,
        document_id: str,
        message: str,
        report=None,
        problem_ids: list[str] | None = None,
    ):
        self.document_id = document_id
        self.report = report
        self.problem_ids = problem_ids or []
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        """Format the error message with additional context."""
        suffix = ""
        if self.problem_ids:
            preview = ", ".join(self.problem_ids[:10])
            more = (
                f" (+{len(self.problem_ids)-10} more)"
                if len(self.problem_ids) > 10
                else ""
            )
            suffix = f" | problem_ids: [{preview}]{more}"
        return f"[Document {self.document_id}] {msg}{suffix}"


class LoaderError(ValueError):
    """Raised when a document file cannot be read or parsed."""
