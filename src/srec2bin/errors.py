"""
srec2bin Error Hierarchy
========================

This module defines the exception hierarchy for the srec2bin package.
All exceptions inherit from Srec2BinError, allowing callers to catch all
conversion-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
Srec2BinError (base)
├── SRecordError (S-Record decoding)
│   ├── MalformedLineError - unexpected character in a record
│   └── UnsupportedRecordTypeError - record type with no address width
├── ImageError (binary image handling)
│   └── ImageSizeError - ROM size or blank value invalid
└── ConfigError - invalid conversion settings

Decoding errors are file-scoped: the orchestrator catches them, abandons
the current S-Record file and carries on with the next one. Checksum
mismatches are advisory and are not exceptions at all (see
srec2bin.srec.checksum.ChecksumMismatch).

Error messages follow this format:
    filename:line:column: error: description
        S1060004AABBXC..
                    ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Srec2BinError(Exception):
    """
    Base exception for all srec2bin errors.

    Example:
        try:
            convert(config)
        except Srec2BinError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A character position inside an S-Record file.

    Attributes:
        filename: Name of the S-Record file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# S-Record Exceptions
# =============================================================================

class SRecordError(Srec2BinError):
    """
    Base exception for S-Record decoding errors.

    Attributes:
        message: The error description
        location: Where in the file the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The text of the record read so far (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, record context, and hint.

        Example output:
            rom.s19:3:9: error: expected hex digit, got 'X'
                S1060004X
                        ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MalformedLineError(SRecordError):
    """
    Unexpected character where a structural token was required.

    Raised when the decoder finds something other than:
    - 'S' or 's' at the start of a record
    - a type digit after the 'S'
    - a hex digit inside the byte count, address, data or checksum fields

    Also raised when a byte count is too small to hold the address field
    and checksum of its record type.
    """
    pass


class UnsupportedRecordTypeError(SRecordError):
    """
    Record type digit with no defined address width.

    Only S0, S1, S2, S3, S5, S7, S8 and S9 are understood. S4 is reserved
    and S6 (24-bit count) is not supported.
    """

    def __init__(
        self,
        record_type: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.record_type = record_type
        super().__init__(
            f"unsupported record type 'S{record_type}'",
            location=location,
            hint="supported types are S0, S1, S2, S3, S5, S7, S8, S9",
            source_line=source_line,
        )


# =============================================================================
# Image Exceptions
# =============================================================================

class ImageError(Srec2BinError):
    """Base exception for binary image errors."""
    pass


class ImageSizeError(ImageError):
    """
    Invalid image parameters.

    The ROM size must be a positive number of bytes and the blank value
    must fit in one byte (0-255).
    """
    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigError(Srec2BinError):
    """
    Invalid conversion settings.

    Raised when:
    - No ROM size unit was selected, or more than one
    - A size or blank value cannot be parsed
    - The verbosity level is negative
    """
    pass
