"""
Motorola S-Record Decoding
==========================

This package reads Motorola S-Record (S19/S28/S37) text and turns it into
addressed data bytes.

This package provides:
- **RecordType** / **address_width**: the record type table
- **hex_value**: the hex nibble decoder
- **DecodedRecord**: one complete record, with re-encoding to text
- **RecordDecoder**: the per-file decoding state machine
- **Checksum utilities**: accumulation and verification of record checksums

Quick Start
-----------
    >>> from srec2bin.srec import RecordDecoder, DataByte
    >>> decoder = RecordDecoder("rom.s19")
    >>> for event in decoder.decode(open("rom.s19")):
    ...     if isinstance(event, DataByte):
    ...         image[event.address] = event.value
"""

# =============================================================================
# Public API Exports
# =============================================================================

from srec2bin.srec.records import (
    RecordType,
    DecodedRecord,
    address_width,
    hex_value,
)

from srec2bin.srec.checksum import (
    ChecksumAccumulator,
    ChecksumMismatch,
    calculate_checksum,
    verify_checksum,
)

from srec2bin.srec.decoder import (
    DecoderPhase,
    DecoderState,
    RecordDecoder,
    DataByte,
    RecordDecoded,
    DecoderEvent,
    decode_records,
)

__all__ = [
    # Records
    "RecordType",
    "DecodedRecord",
    "address_width",
    "hex_value",
    # Checksum
    "ChecksumAccumulator",
    "ChecksumMismatch",
    "calculate_checksum",
    "verify_checksum",
    # Decoder
    "DecoderPhase",
    "DecoderState",
    "RecordDecoder",
    "DataByte",
    "RecordDecoded",
    "DecoderEvent",
    "decode_records",
]
