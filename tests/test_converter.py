"""
Conversion Tests
================

Tests for the file-level conversion driver: overlaying S-Record files onto
an image, per-file error handling and the run summary.

Test Categories
---------------
1. Scenarios: single records, bad checksums, overlays, boundary writes
2. File errors: missing files, malformed lines, unsupported types
3. Full runs: convert() with a ConversionConfig
"""

import logging
from pathlib import Path

import pytest

from srec2bin import (
    BinaryImage,
    ConversionConfig,
    DecoderPhase,
    MalformedLineError,
    UnsupportedRecordTypeError,
    convert,
    convert_file,
    convert_files,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def write_srec(tmp_path: Path):
    """Return a helper that writes S-Record lines to a file in tmp_path."""
    def _write(name: str, *lines: str) -> Path:
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines))
        return path
    return _write


@pytest.fixture
def image() -> BinaryImage:
    """A 16-byte image filled with 0xFF."""
    return BinaryImage(rom_size=16, blank=0xFF)


# =============================================================================
# Scenario Tests
# =============================================================================

class TestScenarios:
    """Tests for the reference conversion scenarios."""

    def test_single_record(self, image, write_srec):
        """Test that S1 06 0004 AABBCC lands at offsets 4-6."""
        path = write_srec("a.s19", "S1060004AABBCCC4")
        result = convert_file(image, path)

        expected = bytearray(b"\xFF" * 16)
        expected[4:7] = b"\xAA\xBB\xCC"
        assert image.to_bytes() == bytes(expected)
        assert result.records == 1
        assert result.checksum_errors == []
        assert result.ok

    def test_bad_checksum_still_writes(self, image, write_srec, caplog):
        """Test that a checksum mismatch is reported but data is applied."""
        path = write_srec("a.s19", "S1060004AABBCC00")
        with caplog.at_level(logging.WARNING, logger="srec2bin"):
            result = convert_file(image, path)

        assert [image[4], image[5], image[6]] == [0xAA, 0xBB, 0xCC]
        assert len(result.checksum_errors) == 1
        assert result.checksum_errors[0].expected == 0xC4
        assert result.records == 1
        assert "checksum mismatch" in caplog.text

    def test_later_file_overrides(self, image, write_srec):
        """Test that the second file's byte wins at a shared address."""
        first = write_srec("f1.s19", "S104000211E8")
        second = write_srec("f2.s19", "S104000222D7")
        convert_files(image, [first, second])
        assert image[2] == 0x22

    def test_order_matters(self, image, write_srec):
        """Test that reversing the file order reverses the winner."""
        first = write_srec("f1.s19", "S104000211E8")
        second = write_srec("f2.s19", "S104000222D7")
        convert_files(image, [second, first])
        assert image[2] == 0x11

    def test_write_at_rom_size(self, image, write_srec):
        """Test that a write at address == rom_size is dropped."""
        path = write_srec("a.s19", "S10400105596")
        result = convert_files(image, [path])
        assert image.to_bytes() == b"\xFF" * 16
        assert result.high_water_mark == 17
        assert result.writes_dropped == 1
        assert result.overflow

    def test_watermark_spans_files(self, image, write_srec):
        """Test that the high-water mark covers every file in the run."""
        first = write_srec("f1.s19", "S1060004AABBCCC4")
        second = write_srec("f2.s19", "S104000211E8")
        result = convert_files(image, [first, second])
        assert result.high_water_mark == 7
        assert not result.overflow

    def test_header_and_termination_records(self, image, write_srec):
        """Test a complete file with S0, S1, S5 and S9 records."""
        path = write_srec(
            "full.s19",
            "S00600004844521B",
            "S1060004AABBCCC4",
            "S5030001FB",
            "S9030000FC",
        )
        result = convert_file(image, path)
        assert result.records == 4
        assert result.data_bytes == 3
        assert image[0] == 0xFF

    def test_crlf_line_endings(self, image, tmp_path):
        """Test files written with DOS line endings."""
        path = tmp_path / "dos.s19"
        path.write_bytes(b"S1060004AABBCCC4\r\nS9030000FC\r\n")
        result = convert_file(image, path)
        assert result.records == 2
        assert image[6] == 0xCC


# =============================================================================
# File Error Tests
# =============================================================================

class TestFileErrors:
    """Tests for per-file error handling."""

    def test_missing_file_is_skipped(self, image, write_srec, tmp_path):
        """Test that an unreadable file does not stop the run."""
        good = write_srec("good.s19", "S104000222D7")
        result = convert_files(image, [tmp_path / "missing.s19", good])

        assert not result.files[0].opened
        assert isinstance(result.files[0].error, OSError)
        assert result.files[1].ok
        assert image[2] == 0x22
        assert len(result.failed_files) == 1

    def test_malformed_line_stops_file_only(self, image, write_srec):
        """Test that a bad line aborts its file and the next file still runs."""
        bad = write_srec("bad.s19", "S104000211E8", "this is not a record", "S104000333C5")
        good = write_srec("good.s19", "S1040005AA4C")
        result = convert_files(image, [bad, good])

        bad_result, good_result = result.files
        assert isinstance(bad_result.error, MalformedLineError)
        assert bad_result.records == 1
        assert bad_result.final_phase is DecoderPhase.ABORTED
        assert image[2] == 0x11      # written before the bad line
        assert image[3] == 0xFF      # after the bad line, never read
        assert good_result.ok
        assert image[5] == 0xAA

    def test_unsupported_type_stops_file_only(self, image, write_srec):
        """Test that an S4 record is a per-file error, not a run error."""
        bad = write_srec("bad.s19", "S4030000FC")
        good = write_srec("good.s19", "S104000222D7")
        result = convert_files(image, [bad, good])

        assert isinstance(result.files[0].error, UnsupportedRecordTypeError)
        assert result.files[1].ok
        assert image[2] == 0x22

    def test_unterminated_last_record(self, image, tmp_path):
        """Test a file whose last line has no newline."""
        path = tmp_path / "a.s19"
        path.write_text("S9030000FC\nS1060004AABBCCC4")
        result = convert_file(image, path)
        assert result.records == 1
        assert result.unterminated
        assert result.ok
        assert image[4] == 0xAA

    def test_empty_file(self, image, tmp_path):
        path = tmp_path / "empty.s19"
        path.write_text("")
        result = convert_file(image, path)
        assert result.ok
        assert result.records == 0


# =============================================================================
# Full Run Tests
# =============================================================================

class TestConvert:
    """Tests for convert()."""

    def test_convert_writes_image(self, tmp_path, write_srec):
        """Test a complete run from config to output file."""
        first = write_srec("f1.s19", "S104000211E8")
        second = write_srec("f2.s19", "S104000222D7", "S9030000FC")
        output = tmp_path / "rom.bin"

        config = ConversionConfig(
            output=output, rom_size=8, blank=0x00, inputs=[first, second]
        )
        result = convert(config)

        assert output.read_bytes() == b"\x00\x00\x22\x00\x00\x00\x00\x00"
        assert result.records == 3
        assert result.ok
        assert result.rom_size == 8

    def test_convert_without_inputs(self, tmp_path):
        """Test that a run with no inputs produces a blank image."""
        output = tmp_path / "blank.bin"
        result = convert(ConversionConfig(output=output, rom_size=32, blank=0xA5))
        assert output.read_bytes() == b"\xA5" * 32
        assert result.files == []
        assert result.high_water_mark == 0

    def test_convert_leaves_summary_to_caller(self, tmp_path, write_srec, caplog):
        """Test that a clean run logs no summary lines and one final write."""
        srec = write_srec("a.s19", "S1060004AABBCCC4")
        output = tmp_path / "rom.bin"
        config = ConversionConfig(output=output, rom_size=16, inputs=[srec])

        with caplog.at_level(logging.DEBUG, logger="srec2bin"):
            convert(config)

        messages = [record.getMessage() for record in caplog.records]
        assert not any("BIN file" in m or "records)" in m for m in messages)
        assert not any(record.levelno >= logging.INFO for record in caplog.records)
        assert sum(m.startswith("Wrote ") for m in messages) == 1

    def test_convert_with_failures_still_writes(self, tmp_path):
        """Test that failing inputs still leave a complete image."""
        output = tmp_path / "rom.bin"
        config = ConversionConfig(
            output=output, rom_size=4, inputs=[tmp_path / "nope.s19"]
        )
        result = convert(config)
        assert output.read_bytes() == b"\xFF" * 4
        assert not result.ok
