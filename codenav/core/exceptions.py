"""Codenav custom exceptions."""


class CodeNavError(Exception):
    """Base exception for codenav errors."""


class SymbolNotFoundError(CodeNavError):
    """Requested target could not be resolved in the code model."""


class UnsupportedOperationError(CodeNavError):
    """A backend operation was invoked with arguments it does not support."""


class IndexNotReadyError(CodeNavError):
    """The code model is still indexing and cannot answer queries."""


class SnapshotError(CodeNavError):
    """A code model snapshot could not be read or written."""


class ParseError(CodeNavError):
    """Error parsing a source file."""
