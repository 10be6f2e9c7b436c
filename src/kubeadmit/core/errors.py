"""Errors raised by the KubeAdmit core.

Schema violations are never raised; they travel as Violation values inside
a Rejected result. Everything here is either a document the user must fix
before any schema check runs, or a programming/sequencing mistake.
"""

from typing import Optional


class KubeAdmitError(Exception):
    """Base error for this package."""


class RegistryError(KubeAdmitError):
    """Raised on schema registry misuse."""


class DuplicateKind(RegistryError):
    """Raised when a kind id is registered twice."""

    def __init__(self, kind_id: str):
        self.kind_id = kind_id
        super().__init__(f"Kind '{kind_id}' is already registered.")


class UnknownKind(RegistryError):
    """Raised when looking up a kind id that was never registered."""

    def __init__(self, kind_id: str):
        self.kind_id = kind_id
        super().__init__(f"Kind '{kind_id}' is not registered.")


class DocumentSyntaxError(KubeAdmitError):
    """Raised when text cannot be parsed into a single mapping.

    Line and column are 1-based; either may be None when the YAML library
    did not report a position.
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self.location_prefix() + message)

    def location_prefix(self) -> str:
        if self.line is None:
            return ""
        if self.column is None:
            return f"L{self.line}: "
        return f"L{self.line}:C{self.column}: "


class SessionError(KubeAdmitError):
    """Raised when an edit session is driven out of order."""


class SessionClosed(SessionError):
    """Raised when an accepted (terminal) session is edited again."""


class InvalidTransition(SessionError):
    """Raised when an operation is not allowed in the current session state."""
