# mmscript/errors.py
"""
Exception types raised by the mmscript package.

The detectors themselves never raise on malformed script text; a line that
does not match simply contributes nothing.  These exceptions cover misuse at
the edges of the library: invalid configuration and unreadable input.

Hierarchy:
──────────
    MMScriptError (base)
    ├── ConfigError   - bad configuration key or value      (MMS-1xxx)
    └── InputError    - unreadable or malformed input file  (MMS-2xxx)
"""

from __future__ import annotations

from typing import Optional


class MMScriptError(Exception):
    """Base class for all mmscript errors.

    Attributes
    ----------
    code    : short error code, e.g. ``"MMS-1001"``
    message : human-readable description
    """

    default_code: str = "MMS-0000"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigError(MMScriptError):
    """An analyzer configuration key is unknown or its value is invalid."""

    default_code = "MMS-1001"


class InputError(MMScriptError):
    """Input could not be read or decoded into a script."""

    default_code = "MMS-2001"


__all__ = ["MMScriptError", "ConfigError", "InputError"]
