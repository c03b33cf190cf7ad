"""
S-Record to Binary Conversion
=============================

This module drives the conversion: it runs each S-Record file through a
fresh RecordDecoder and commits the decoded data bytes to a shared
BinaryImage.

Files are processed strictly in the order given. The image is never reset
between files, so a later file overwrites an earlier one wherever their
addresses overlap.

Errors are handled per file:
- A file that cannot be opened is skipped.
- A malformed line or unsupported record type stops that file; bytes it
  wrote before the bad line stay in the image.
- Checksum mismatches are collected and decoding continues.
None of these stop the run.

Usage
-----
    >>> from srec2bin import ConversionConfig, SizeUnit, convert
    >>> config = ConversionConfig.from_units(
    ...     "rom.bin", 256, SizeUnit.K, ["boot.s19", "app.s37"])
    >>> result = convert(config)
    >>> print(f"Minimum ROM size: {result.high_water_mark}")
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from srec2bin.config import ConversionConfig
from srec2bin.errors import SRecordError
from srec2bin.image import BinaryImage
from srec2bin.srec.checksum import ChecksumMismatch
from srec2bin.srec.decoder import DataByte, DecoderPhase, RecordDecoded, RecordDecoder

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

@dataclass
class FileResult:
    """
    Outcome of processing one S-Record file.

    Attributes:
        path: The S-Record file
        opened: False if the file could not be opened
        records: Number of complete records
        data_bytes: Data bytes sent to the image (in range or not)
        checksum_errors: Records whose checksum did not match
        error: The error that stopped the file, if any
        final_phase: Decoder phase when the file ended
    """
    path: Path
    opened: bool = True
    records: int = 0
    data_bytes: int = 0
    checksum_errors: list[ChecksumMismatch] = field(default_factory=list)
    error: Optional[Exception] = None
    final_phase: DecoderPhase = DecoderPhase.LINE_START

    @property
    def ok(self) -> bool:
        """True if the file was opened and decoded to the end."""
        return self.opened and self.error is None

    @property
    def unterminated(self) -> bool:
        """True if the file ended in the middle of a record line."""
        return self.final_phase not in (DecoderPhase.LINE_START, DecoderPhase.ABORTED)


@dataclass
class ConversionResult:
    """
    Outcome of a whole conversion run.

    Attributes:
        files: Per-file results, in processing order
        rom_size: Image size in bytes
        high_water_mark: Smallest image size that holds every written address
        writes_dropped: Data bytes that fell outside the image
    """
    files: list[FileResult] = field(default_factory=list)
    rom_size: int = 0
    high_water_mark: int = 0
    writes_dropped: int = 0

    @property
    def records(self) -> int:
        return sum(f.records for f in self.files)

    @property
    def checksum_error_count(self) -> int:
        return sum(len(f.checksum_errors) for f in self.files)

    @property
    def failed_files(self) -> list[FileResult]:
        return [f for f in self.files if not f.ok]

    @property
    def overflow(self) -> bool:
        """True if some data record addressed bytes beyond the image."""
        return self.high_water_mark > self.rom_size

    @property
    def ok(self) -> bool:
        """True if every file decoded cleanly with no checksum errors."""
        return not self.failed_files and self.checksum_error_count == 0


# =============================================================================
# Orchestration
# =============================================================================

def convert_file(image: BinaryImage, path: Union[str, Path]) -> FileResult:
    """
    Lay one S-Record file over the image.

    Args:
        image: The shared output image
        path: S-Record file to read

    Returns:
        A FileResult; this function does not raise for bad input files
    """
    path = Path(path)
    result = FileResult(path=path)

    try:
        stream = open(path, "r", encoding="ascii", errors="replace")
    except OSError as e:
        result.opened = False
        result.error = e
        logger.warning(f"Failed to open {path}: {e}")
        return result

    decoder = RecordDecoder(str(path))
    with stream:
        try:
            for event in decoder.decode(stream):
                if isinstance(event, DataByte):
                    image.write(event.address, event.value)
                    result.data_bytes += 1
                elif isinstance(event, ChecksumMismatch):
                    result.checksum_errors.append(event)
                    logger.warning(str(event))
                elif isinstance(event, RecordDecoded):
                    result.records += 1
        except SRecordError as e:
            result.error = e
            logger.error(f"Stopped reading {path}:\n{e}")
        except OSError as e:
            result.error = e
            logger.error(f"Error reading {path}: {e}")

    result.final_phase = decoder.phase
    if result.unterminated:
        logger.warning(f"{path}: last record is not terminated by a newline")
    return result


def convert_files(
    image: BinaryImage,
    paths: Iterable[Union[str, Path]],
) -> ConversionResult:
    """
    Lay several S-Record files over the image, in order.

    Args:
        image: The shared output image
        paths: S-Record files; later files take precedence

    Returns:
        Per-file results and the final high-water mark
    """
    result = ConversionResult(rom_size=image.rom_size)
    for path in paths:
        result.files.append(convert_file(image, path))

    result.high_water_mark = image.high_water_mark
    result.writes_dropped = image.writes_dropped
    if image.overflow:
        logger.warning(
            f"{image.writes_dropped} bytes addressed beyond the ROM size "
            f"were ignored (minimum ROM size: {image.high_water_mark})"
        )
    return result


def convert(config: ConversionConfig) -> ConversionResult:
    """
    Run a complete conversion.

    Creates the blank image file first, then applies every input file and
    writes the final image.

    Raises:
        ConfigError: If the configuration is invalid
        ImageSizeError: If the image cannot be created
        OSError: If the output file cannot be written
    """
    config.validate()

    image = BinaryImage.create(config.output, config.rom_size, config.blank)
    result = convert_files(image, config.inputs)
    image.save(config.output)
    return result
