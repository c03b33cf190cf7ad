"""
S-Record Checksum Calculations
==============================

Every S-Record ends with a one-byte checksum:

    checksum = (~(count + address bytes + data bytes)) & 0xFF

that is, the one's complement of the low byte of the sum of every byte on
the line after the type digit, excluding the checksum itself.

Checksum validation is advisory. A mismatch is reported as a
ChecksumMismatch value, and the data bytes of the record are still applied
to the image.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from srec2bin.errors import SourceLocation

if TYPE_CHECKING:
    from srec2bin.srec.records import RecordType


class ChecksumAccumulator:
    """
    Running checksum for the record currently being decoded.

    The decoder adds every byte of the count, address and data fields as
    it is assembled, then reads `expected` at the checksum field.

    Example:
        >>> acc = ChecksumAccumulator()
        >>> for b in (0x03, 0x00, 0x00):
        ...     acc.add(b)
        >>> hex(acc.expected)
        '0xfc'
    """

    def __init__(self) -> None:
        self.total = 0

    def add(self, byte: int) -> None:
        self.total += byte

    def reset(self) -> None:
        self.total = 0

    @property
    def expected(self) -> int:
        """One's complement of the low byte of the running sum."""
        return (~self.total) & 0xFF


def address_bytes(address: int, width: int) -> bytes:
    """
    Split an address into its big-endian field bytes.

    Raises:
        ValueError: If the address does not fit in `width` bytes
    """
    if width == 0:
        if address:
            raise ValueError(f"Address 0x{address:X} given for a record without address field")
        return b""
    if not 0 <= address < (1 << (8 * width)):
        raise ValueError(f"Address 0x{address:X} does not fit in {width} bytes")
    return address.to_bytes(width, "big")


def calculate_checksum(
    byte_count: int,
    address: int,
    addr_bytes: int,
    data: Iterable[int],
) -> int:
    """
    Calculate the checksum byte of a record.

    Args:
        byte_count: The count field
        address: The address field value
        addr_bytes: Width of the address field in bytes
        data: The data bytes

    Returns:
        Checksum byte (0x00 - 0xFF)

    Example:
        >>> hex(calculate_checksum(0x06, 0x0004, 2, b"\\xAA\\xBB\\xCC"))
        '0xc4'
    """
    acc = ChecksumAccumulator()
    acc.add(byte_count)
    for byte in address_bytes(address, addr_bytes):
        acc.add(byte)
    for byte in data:
        acc.add(byte)
    return acc.expected


def verify_checksum(
    byte_count: int,
    address: int,
    addr_bytes: int,
    data: Iterable[int],
    checksum: int,
) -> bool:
    """Return True if `checksum` matches the record fields."""
    return calculate_checksum(byte_count, address, addr_bytes, data) == checksum


@dataclass(frozen=True)
class ChecksumMismatch:
    """
    A record whose transmitted checksum differs from the calculated one.

    Attributes:
        record_type: Type of the offending record
        expected: Checksum calculated from the record fields
        actual: Checksum read from the file
        location: Position of the checksum field
        address: Address field of the record
    """
    record_type: "RecordType"
    expected: int
    actual: int
    location: Optional[SourceLocation] = None
    address: int = 0

    def __str__(self) -> str:
        where = f"{self.location}: " if self.location else ""
        return (
            f"{where}checksum mismatch in S{int(self.record_type)} record "
            f"at 0x{self.address:X}: expected 0x{self.expected:02X}, "
            f"got 0x{self.actual:02X}"
        )
