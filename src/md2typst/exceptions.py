"""Exceptions raised at the md2typst system boundary.

The transpiler itself never raises on malformed Markdown.  Failures come
from the surroundings: reading the source file, compiling the Typst
source, or writing the result.

Exception Hierarchy
-------------------
- Md2TypstError (base exception)

  - ExportError (read / compile / write failures of one export attempt)

"""

from __future__ import annotations

from typing import Optional


class Md2TypstError(Exception):
    """Base exception class for all md2typst-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ExportError(Md2TypstError):
    """An export attempt failed.

    Raised when the Markdown source cannot be read or decoded, when Typst
    rejects the generated markup, or when the output cannot be written.
    The message is meant to be shown to the user as is.
    """
