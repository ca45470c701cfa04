#!/usr/bin/env python3
"""
Exception types for the Thunderbird updater.

Every failure surfaced to the user derives from :class:`UpdaterError`, which
carries an optional error code, the underlying exception and free-form
context for structured logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class UpdaterError(Exception):
    """Base exception for all updater errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.original_error = original_error
        self.context = context

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.original_error is not None:
            parts.append(f"Cause: {self.original_error}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": str(self.args[0]) if self.args else "",
            "error_code": self.error_code,
            "original_error": (
                str(self.original_error) if self.original_error else None
            ),
            "context": self.context,
            "exception_type": self.__class__.__name__,
        }


class ConfigIOError(UpdaterError):
    """Raised when the state file cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            error_code="CONFIG_IO",
            original_error=original_error,
            path=str(path) if path else None,
        )
        self.path = path


class NetworkError(UpdaterError):
    """Raised for transport failures and non-success HTTP responses."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            error_code="NETWORK",
            original_error=original_error,
            url=url,
            status=status,
        )
        self.url = url
        self.status = status


class ParseError(UpdaterError):
    """Raised when the release index yields no usable version."""

    def __init__(
        self, message: str, *, original_error: Optional[BaseException] = None
    ) -> None:
        super().__init__(
            message, error_code="PARSE", original_error=original_error
        )


class ExtractionError(UpdaterError):
    """Raised when the archive cannot be decompressed or expanded."""

    def __init__(
        self,
        message: str,
        *,
        member: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            error_code="EXTRACTION",
            original_error=original_error,
            member=member,
        )
        self.member = member

    def __str__(self) -> str:
        text = super().__str__()
        if self.member:
            return f"{text} | Entry: {self.member}"
        return text


class LauncherIOError(UpdaterError):
    """Raised when the desktop launcher cannot be written."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            error_code="LAUNCHER_IO",
            original_error=original_error,
            path=str(path) if path else None,
        )
        self.path = path
