"""
S-Record Checksum Tests
=======================

Tests for checksum accumulation, calculation and verification.
"""

import pytest

from srec2bin.srec import (
    ChecksumAccumulator,
    ChecksumMismatch,
    RecordType,
    calculate_checksum,
    verify_checksum,
)
from srec2bin.srec.checksum import address_bytes
from srec2bin.errors import SourceLocation


class TestChecksumAccumulator:
    """Tests for the running checksum."""

    def test_empty(self):
        """Test that an empty sum complements to 0xFF."""
        assert ChecksumAccumulator().expected == 0xFF

    def test_low_byte_only(self):
        """Test that only the low byte of the sum matters."""
        acc = ChecksumAccumulator()
        for byte in (0xFF, 0xFF, 0x03):
            acc.add(byte)
        assert acc.total == 0x201
        assert acc.expected == 0xFE

    def test_reset(self):
        """Test that reset() clears the sum."""
        acc = ChecksumAccumulator()
        acc.add(0x42)
        acc.reset()
        assert acc.total == 0
        assert acc.expected == 0xFF


class TestCalculateChecksum:
    """Tests for calculate_checksum() and verify_checksum()."""

    def test_s1_record(self):
        """Test the checksum of S1 06 0004 AABBCC."""
        # 0x06 + 0x00 + 0x04 + 0xAA + 0xBB + 0xCC = 0x23B -> ~0x3B = 0xC4
        assert calculate_checksum(0x06, 0x0004, 2, b"\xAA\xBB\xCC") == 0xC4

    def test_s9_record(self):
        """Test the checksum of S9 03 0000."""
        assert calculate_checksum(0x03, 0x0000, 2, b"") == 0xFC

    def test_address_bytes_are_summed(self):
        """Test that every address byte contributes to the sum."""
        # 0x06 + 0x12 + 0x34 + 0x56 + 0x78 = 0x11A -> ~0x1A = 0xE5
        assert calculate_checksum(0x06, 0x12345678, 4, b"\x00") == 0xE5

    def test_no_address_field(self):
        """Test records without an address field (S0/S5)."""
        # 0x03 + 0x00 + 0x01 = 0x04 -> 0xFB
        assert calculate_checksum(0x03, 0, 0, b"\x00\x01") == 0xFB

    def test_verify(self):
        """Test verify_checksum() for matching and corrupted checksums."""
        assert verify_checksum(0x06, 0x0004, 2, b"\xAA\xBB\xCC", 0xC4)
        assert not verify_checksum(0x06, 0x0004, 2, b"\xAA\xBB\xCC", 0x00)

    @pytest.mark.parametrize("bit", range(8))
    def test_any_flipped_bit_is_detected(self, bit: int):
        """Test that a checksum differing in any one bit fails."""
        good = calculate_checksum(0x05, 0x000100, 3, b"\xAB")
        assert not verify_checksum(0x05, 0x000100, 3, b"\xAB", good ^ (1 << bit))


class TestAddressBytes:
    """Tests for address field splitting."""

    def test_big_endian(self):
        assert address_bytes(0x123456, 3) == b"\x12\x34\x56"

    def test_zero_width(self):
        assert address_bytes(0, 0) == b""

    def test_too_wide(self):
        """Test that an address that does not fit raises ValueError."""
        with pytest.raises(ValueError):
            address_bytes(0x10000, 2)
        with pytest.raises(ValueError):
            address_bytes(1, 0)


class TestChecksumMismatch:
    """Tests for the advisory mismatch report."""

    def test_str(self):
        """Test that the message names location, expected and actual."""
        mismatch = ChecksumMismatch(
            record_type=RecordType.DATA_16,
            expected=0xC4,
            actual=0x00,
            location=SourceLocation("rom.s19", 3, 16),
            address=0x0004,
        )
        text = str(mismatch)
        assert "rom.s19:3:16" in text
        assert "S1" in text
        assert "0xC4" in text
        assert "0x00" in text
