"""
Error types and source location tracking for greyout.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class GreyoutError(Exception):
    """Base exception for all greyout engine errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"[{self.location}] {self.message}"
        return self.message


class InvalidSpan(GreyoutError):
    """Raised when a span would be reversed, negative, or out of source bounds."""

    pass


class FactUnavailable(GreyoutError):
    """
    Raised by a semantic oracle that cannot decide a query.

    This is not a failure: the facts handle turns it into an absent answer
    and rules treat that as "do not fire".
    """

    def __init__(self, message: str = "fact unavailable", location: Optional[SourceLocation] = None) -> None:
        super().__init__(message, location)


class RuleFault(GreyoutError):
    """Raised when a rule fails unexpectedly while evaluating a node."""

    def __init__(
        self,
        rule_code: str,
        node: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """
        Initialize the fault.

        Args:
            rule_code: Code of the rule that failed
            node: The node being evaluated when the rule failed
            cause: The original exception
        """
        self.rule_code = rule_code
        self.node = node
        self.cause = cause
        detail = f": {type(cause).__name__}: {cause}" if cause is not None else ""
        location = getattr(node, "location", None)
        super().__init__(f"rule {rule_code} failed{detail}", location)


class PassAbandoned(GreyoutError):
    """Raised when a tree's pass is abandoned before it completes."""

    pass


class EngineStateError(GreyoutError):
    """Raised when a single-use engine or a closed facts handle is reused."""

    pass
