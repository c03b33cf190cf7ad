"""
srec2bin - Motorola S-Record to Binary Image Converter
======================================================

This package converts Motorola S-Record files (.s19, .s28, .s37, .mot)
into a flat binary ROM image. Several S-Record files can be laid over one
image; later files take precedence where addresses overlap.

Main Components
---------------
- **srec**: S-Record decoding
    Record type table, checksum validation and the decoding state machine

- **image**: Binary image
    Blank-filled output buffer with bounds-checked overlay writes

- **converter**: Conversion driver
    Runs each input file through the decoder onto the shared image

- **cli**: Command-line tool (srec2bin)

Quick Start
-----------
Build a 256KB image from two files:
    >>> from srec2bin import ConversionConfig, SizeUnit, convert
    >>> config = ConversionConfig.from_units(
    ...     "rom.bin", 256, SizeUnit.K, ["boot.s19", "app.s37"], blank=0xFF)
    >>> result = convert(config)
    >>> print(result.records, result.high_water_mark)

Decode records without building an image:
    >>> from srec2bin.srec import decode_records
    >>> for record in decode_records(open("boot.s19").read()):
    ...     print(record.record_type.get_description(), hex(record.address))

Or use the command-line tool:
    $ srec2bin rom.bin -K 256 -s boot.s19 app.s37
"""

__version__ = "1.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from srec2bin.errors import (
    Srec2BinError,
    SourceLocation,
    SRecordError,
    MalformedLineError,
    UnsupportedRecordTypeError,
    ImageError,
    ImageSizeError,
    ConfigError,
)

from srec2bin.srec import (
    RecordType,
    DecodedRecord,
    RecordDecoder,
    DecoderPhase,
    DataByte,
    RecordDecoded,
    ChecksumMismatch,
    calculate_checksum,
    decode_records,
)

from srec2bin.image import BinaryImage

from srec2bin.config import (
    SizeUnit,
    ConversionConfig,
    parse_blank,
)

from srec2bin.converter import (
    FileResult,
    ConversionResult,
    convert_file,
    convert_files,
    convert,
)

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "Srec2BinError",
    "SourceLocation",
    "SRecordError",
    "MalformedLineError",
    "UnsupportedRecordTypeError",
    "ImageError",
    "ImageSizeError",
    "ConfigError",
    # S-Record decoding
    "RecordType",
    "DecodedRecord",
    "RecordDecoder",
    "DecoderPhase",
    "DataByte",
    "RecordDecoded",
    "ChecksumMismatch",
    "calculate_checksum",
    "decode_records",
    # Image
    "BinaryImage",
    # Configuration
    "SizeUnit",
    "ConversionConfig",
    "parse_blank",
    # Conversion
    "FileResult",
    "ConversionResult",
    "convert_file",
    "convert_files",
    "convert",
]
