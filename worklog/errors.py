from __future__ import annotations

from typing import Optional


class WorklogError(Exception):
    """Base class for errors reported to the user instead of crashing."""


class FormatError(WorklogError, ValueError):
    """Malformed or out-of-range text handed to one of the parsers."""

    def __init__(self, message: str, text: Optional[str] = None):
        self.text = text
        if text is not None:
            message = f"{message}: {text!r}"
        super().__init__(message)


class LogicError(WorklogError):
    """Data that parses fine but cannot be accepted, e.g. an end before its begin."""


class NotFoundError(WorklogError):
    pass


class PromptCancelled(WorklogError):
    pass
