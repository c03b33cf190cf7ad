"""
S-Record Type Definitions
=========================

This module defines the building blocks of Motorola S-Record files: the
record type table, the hex nibble decoder and the DecodedRecord value
produced by the decoder for every complete line.

Record Format
-------------
Each record is one ASCII line:

    S <type> <count> <address> <data...> <checksum>

    type:      one digit, see RecordType
    count:     2 hex digits, number of bytes that follow (address + data + 1)
    address:   2, 4, 6 or 8 hex digits depending on the type (S0/S5: none)
    data:      2 hex digits per byte
    checksum:  2 hex digits, one's complement of the low byte of the sum
               of the count, address and data bytes

Record Types
------------
- S0: Header (no address, data is free-form text)
- S1: Data, 16-bit address
- S2: Data, 24-bit address
- S3: Data, 32-bit address
- S5: Record count (data holds the count)
- S7: Termination, 32-bit start address
- S8: Termination, 24-bit start address
- S9: Termination, 16-bit start address

S4 is reserved and S6 is not supported.

Reference
---------
- SREC format: https://en.wikipedia.org/wiki/SREC_(file_format)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from srec2bin.errors import SourceLocation, UnsupportedRecordTypeError
from srec2bin.srec.checksum import calculate_checksum


# =============================================================================
# Hex Nibble Decoder
# =============================================================================

def hex_value(char: str) -> int:
    """
    Decode a single hex digit.

    Args:
        char: One character

    Returns:
        The digit value 0-15, or -1 if the character is not a hex digit

    Example:
        >>> hex_value("7"), hex_value("b"), hex_value("G")
        (7, 11, -1)
    """
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "A" <= char <= "F":
        return ord(char) - ord("A") + 10
    if "a" <= char <= "f":
        return ord(char) - ord("a") + 10
    return -1


# =============================================================================
# Record Type Table
# =============================================================================

class RecordType(IntEnum):
    """
    S-Record type digits.

    The value is the digit that follows the 'S' on the line.
    """
    HEADER = 0      # S0: header
    DATA_16 = 1     # S1: data, 16-bit address
    DATA_24 = 2     # S2: data, 24-bit address
    DATA_32 = 3     # S3: data, 32-bit address
    COUNT = 5       # S5: record count
    START_32 = 7    # S7: termination, 32-bit start address
    START_24 = 8    # S8: termination, 24-bit start address
    START_16 = 9    # S9: termination, 16-bit start address

    @classmethod
    def from_char(
        cls,
        char: str,
        location: Optional[SourceLocation] = None,
    ) -> "RecordType":
        """
        Convert the type digit of a record to a RecordType.

        Raises:
            UnsupportedRecordTypeError: If the digit has no defined type
            ValueError: If the character is not a digit at all
        """
        if len(char) != 1 or not "0" <= char <= "9":
            raise ValueError(f"Record type must be a digit, got {char!r}")
        digit = int(char)
        if digit not in _ADDRESS_WIDTHS:
            raise UnsupportedRecordTypeError(digit, location=location)
        return cls(digit)

    @property
    def address_width(self) -> int:
        """Number of bytes in the address field of this record type."""
        return _ADDRESS_WIDTHS[self]

    @property
    def is_data(self) -> bool:
        """True for S1/S2/S3, the only records that write to the image."""
        return self in (RecordType.DATA_16, RecordType.DATA_24, RecordType.DATA_32)

    def get_description(self) -> str:
        """Get a human-readable description of the record type."""
        descriptions = {
            RecordType.HEADER: "Header",
            RecordType.DATA_16: "Data (16-bit address)",
            RecordType.DATA_24: "Data (24-bit address)",
            RecordType.DATA_32: "Data (32-bit address)",
            RecordType.COUNT: "Record count",
            RecordType.START_32: "Termination (32-bit start address)",
            RecordType.START_24: "Termination (24-bit start address)",
            RecordType.START_16: "Termination (16-bit start address)",
        }
        return descriptions[self]


# Address field width in bytes, keyed by type digit
_ADDRESS_WIDTHS = {
    0: 0,
    1: 2,
    2: 3,
    3: 4,
    5: 0,
    7: 4,
    8: 3,
    9: 2,
}


def address_width(record_type: int, location: Optional[SourceLocation] = None) -> int:
    """
    Look up the address field width for a record type digit.

    Args:
        record_type: The type digit (0-9)
        location: Where the type digit was read, for error reporting

    Returns:
        Address width in bytes (0, 2, 3 or 4)

    Raises:
        UnsupportedRecordTypeError: For S4, S6 and anything outside 0-9
    """
    try:
        return _ADDRESS_WIDTHS[record_type]
    except KeyError:
        raise UnsupportedRecordTypeError(record_type, location=location) from None


# =============================================================================
# Decoded Record
# =============================================================================

@dataclass(frozen=True)
class DecodedRecord:
    """
    One complete S-Record as read from a file.

    The byte count always equals address width + data length + 1; records
    built by the decoder satisfy this by construction and the constructor
    rejects anything else.

    Attributes:
        record_type: The record type
        byte_count: Count field (0-255)
        address: Address field value (0 for S0/S5)
        data: Data bytes
        checksum: Checksum byte as transmitted
        location: Where the record starts, when decoded from a file
    """
    record_type: RecordType
    byte_count: int
    address: int
    data: bytes
    checksum: int
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        width = self.record_type.address_width
        if self.byte_count != width + len(self.data) + 1:
            raise ValueError(
                f"Byte count {self.byte_count} does not match "
                f"{width} address bytes + {len(self.data)} data bytes + checksum"
            )
        if not 0 <= self.byte_count <= 0xFF:
            raise ValueError(f"Byte count out of range: {self.byte_count}")
        if not 0 <= self.address < (1 << (8 * width)):
            raise ValueError(
                f"Address 0x{self.address:X} does not fit in {width} bytes"
            )

    @classmethod
    def build(
        cls,
        record_type: RecordType,
        address: int = 0,
        data: bytes = b"",
    ) -> "DecodedRecord":
        """
        Build a record with the correct byte count and checksum.

        Example:
            >>> rec = DecodedRecord.build(RecordType.DATA_16, 0x0004, b"\\xAA\\xBB\\xCC")
            >>> rec.to_line()
            'S1060004AABBCCC4'
        """
        record_type = RecordType(record_type)
        width = record_type.address_width
        byte_count = width + len(data) + 1
        checksum = calculate_checksum(byte_count, address, width, data)
        return cls(
            record_type=record_type,
            byte_count=byte_count,
            address=address,
            data=bytes(data),
            checksum=checksum,
        )

    @property
    def address_width(self) -> int:
        return self.record_type.address_width

    def calculate_checksum(self) -> int:
        """Checksum this record should carry."""
        return calculate_checksum(
            self.byte_count, self.address, self.address_width, self.data
        )

    def is_checksum_valid(self) -> bool:
        return self.calculate_checksum() == self.checksum

    def to_line(self) -> str:
        """Encode the record as a text line (without line terminator)."""
        width = self.address_width
        address_text = f"{self.address:0{2 * width}X}" if width else ""
        return (
            f"S{int(self.record_type)}"
            f"{self.byte_count:02X}"
            f"{address_text}"
            f"{self.data.hex().upper()}"
            f"{self.checksum:02X}"
        )

    def __str__(self) -> str:
        return self.to_line()
