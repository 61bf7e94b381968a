"""Base secureenv exception classes."""

from __future__ import annotations


class SecureEnvBaseError(Exception):
    """secureenv base exception class."""

    def __init__(self, message: str) -> None:
        """Initialize base secureenv exception."""
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """Return message."""
        return self.message


class ParseError(SecureEnvBaseError, ValueError):
    """The text of a consumed environment variable could not be converted.

    The raw text is intentionally not part of the message since environment
    variables read through secureenv are usually secrets.

    Attributes:
        key: Name of the environment variable.
        kind: Name of the requested type (e.g., `"int32"`).
        reason: Why the conversion failed.
    """

    def __init__(self, key: str, kind: str, reason: str) -> None:
        """Initialize the parse error."""
        self.key = key
        self.kind = kind
        self.reason = reason
        super().__init__(
            f"Failed to parse environment variable '{key}' as {kind}: {reason}"
        )
