"""
S-Record Decoder
================

This module implements the character-by-character state machine that turns
the text of one S-Record file into a stream of decoding events.

Phases
------
Each character is handled according to the current DecoderPhase:

    LINE_START   whitespace is skipped, 'S'/'s' starts a record
    RECORD_TYPE  one type digit (0,1,2,3,5,7,8,9)
    BYTE_COUNT   two hex digits
    ADDRESS      2 hex digits per address byte, big-endian
    DATA         2 hex digits per data byte
    CHECKSUM     two hex digits
    END_OF_LINE  everything up to the newline is ignored

Events
------
RecordDecoder.feed() returns a (usually empty) list of events:

- DataByte: one byte of an S1/S2/S3 record, with its target address.
  Emitted as soon as the byte is assembled, before the checksum is known.
- ChecksumMismatch: advisory; decoding carries on.
- RecordDecoded: a complete record, emitted at the newline that ends it.

Errors
------
Any unexpected character raises MalformedLineError, an S4/S6 type digit
raises UnsupportedRecordTypeError. Both carry the file position. After an
error the decoder is in the ABORTED phase and rejects further input; the
caller moves on to the next file.

Example
-------
    >>> decoder = RecordDecoder("rom.s19")
    >>> for event in decoder.decode("S1060004AABBCCC4\\n"):
    ...     print(event)
    DataByte(address=4, value=170)
    DataByte(address=5, value=187)
    DataByte(address=6, value=204)
    RecordDecoded(S1060004AABBCCC4)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Iterator, Optional, Union
import logging

from srec2bin.errors import MalformedLineError, SourceLocation, SRecordError
from srec2bin.srec.checksum import ChecksumAccumulator, ChecksumMismatch
from srec2bin.srec.records import DecodedRecord, RecordType, address_width, hex_value

# Logger for this module
logger = logging.getLogger(__name__)


# Characters skipped between records
_WHITESPACE = " \t\r\n"


# =============================================================================
# Decoder Phases
# =============================================================================

class DecoderPhase(Enum):
    """Position of the decoder within the current record."""
    LINE_START = auto()
    RECORD_TYPE = auto()
    BYTE_COUNT = auto()
    ADDRESS = auto()
    DATA = auto()
    CHECKSUM = auto()
    END_OF_LINE = auto()
    ABORTED = auto()


# =============================================================================
# Decoder Events
# =============================================================================

@dataclass(frozen=True)
class DataByte:
    """One data byte of an S1/S2/S3 record, ready for the image."""
    address: int
    value: int


@dataclass(frozen=True)
class RecordDecoded:
    """A complete record, reported when its line ends."""
    record: DecodedRecord

    def __repr__(self) -> str:
        return f"RecordDecoded({self.record.to_line()})"


DecoderEvent = Union[DataByte, ChecksumMismatch, RecordDecoded]


# =============================================================================
# Decoder State
# =============================================================================

@dataclass
class DecoderState:
    """
    Working state of the decoder for one S-Record file.

    A fresh DecoderState is created for every file. Fields below `phase`
    describe the record in progress and are reset by start_record().

    Attributes:
        phase: Current phase of the state machine
        high_nibble: True when the next hex digit is the high nibble
        byte_value: High nibble of the byte being assembled
        value: Multi-byte accumulator for the address field
        remaining: Bytes still to read in the current field
        checksum: Running sum of count, address and data bytes
        expected_checksum: Checksum computed when the checksum field starts
        record_type: Type of the record in progress
        byte_count: Count field of the record in progress
        addr_bytes: Address width of the record in progress
        data_bytes: Number of data bytes in the record in progress
        address: Address field of the record in progress
        next_address: Target address of the next data byte
        data: Data bytes read so far
        pending: Record waiting for its newline
        records: Records completed in this file
        line: Current line number (1-indexed)
        column: Column of the last character read (1-indexed)
        record_line: Line where the record in progress started
        line_text: Characters read so far on the current line
    """
    phase: DecoderPhase = DecoderPhase.LINE_START
    high_nibble: bool = True
    byte_value: int = 0
    value: int = 0
    remaining: int = 0
    checksum: ChecksumAccumulator = field(default_factory=ChecksumAccumulator)
    expected_checksum: int = 0
    record_type: Optional[RecordType] = None
    byte_count: int = 0
    addr_bytes: int = 0
    data_bytes: int = 0
    address: int = 0
    next_address: int = 0
    data: bytearray = field(default_factory=bytearray)
    pending: Optional[DecodedRecord] = None
    records: int = 0
    line: int = 1
    column: int = 0
    record_line: int = 1
    line_text: list[str] = field(default_factory=list)

    def start_record(self) -> None:
        """Clear the per-record fields when an 'S' is seen."""
        self.high_nibble = True
        self.byte_value = 0
        self.value = 0
        self.remaining = 0
        self.checksum.reset()
        self.expected_checksum = 0
        self.record_type = None
        self.byte_count = 0
        self.addr_bytes = 0
        self.data_bytes = 0
        self.address = 0
        self.next_address = 0
        self.data = bytearray()
        self.pending = None
        self.record_line = self.line


# =============================================================================
# Record Decoder
# =============================================================================

class RecordDecoder:
    """
    State machine decoding the S-Records of one file.

    Attributes:
        filename: Name used in error locations
        state: The decoder's working state

    Example:
        >>> decoder = RecordDecoder("boot.s19")
        >>> events = list(decoder.decode(open("boot.s19")))
        >>> decoder.records
        12
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self.state = DecoderState()
        self._handlers = {
            DecoderPhase.LINE_START: self._line_start,
            DecoderPhase.RECORD_TYPE: self._record_type,
            DecoderPhase.BYTE_COUNT: self._byte_count,
            DecoderPhase.ADDRESS: self._address,
            DecoderPhase.DATA: self._data,
            DecoderPhase.CHECKSUM: self._checksum,
            DecoderPhase.END_OF_LINE: self._end_of_line,
        }

    @property
    def phase(self) -> DecoderPhase:
        return self.state.phase

    @property
    def records(self) -> int:
        """Number of records completed so far."""
        return self.state.records

    @property
    def aborted(self) -> bool:
        return self.state.phase is DecoderPhase.ABORTED

    # -------------------------------------------------------------------------
    # Driving the state machine
    # -------------------------------------------------------------------------

    def feed(self, char: str) -> list[DecoderEvent]:
        """
        Process one character.

        Args:
            char: A single character of the file

        Returns:
            Events produced by this character (often none)

        Raises:
            MalformedLineError: On an unexpected character
            UnsupportedRecordTypeError: On an S4/S6 record
            SRecordError: If the decoder has already aborted
            ValueError: If `char` is not exactly one character
        """
        if len(char) != 1:
            raise ValueError(f"feed() takes a single character, got {char!r}")

        state = self.state
        if state.phase is DecoderPhase.ABORTED:
            raise SRecordError(
                "decoder has aborted; no further input accepted",
                location=self._location(),
            )

        state.column += 1
        if char != "\n":
            state.line_text.append(char)

        try:
            events = self._handlers[state.phase](char)
        except SRecordError:
            state.phase = DecoderPhase.ABORTED
            raise

        if char == "\n":
            state.line += 1
            state.column = 0
            state.line_text.clear()
        return events

    def decode(self, source: Iterable[str]) -> Iterator[DecoderEvent]:
        """
        Decode a whole character source.

        Args:
            source: A string, or any iterable of strings such as an open
                text file (iterated line by line)

        Yields:
            Decoder events in input order

        Raises:
            MalformedLineError, UnsupportedRecordTypeError: As for feed();
                events before the error have already been yielded
        """
        for chunk in source:
            for char in chunk:
                yield from self.feed(char)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.state.line, self.state.column)

    def _malformed(self, message: str, hint: Optional[str] = None) -> MalformedLineError:
        return MalformedLineError(
            message,
            location=self._location(),
            hint=hint,
            source_line="".join(self.state.line_text),
        )

    def _take_nibble(self, char: str) -> Optional[int]:
        """
        Feed one hex digit into the byte being assembled.

        Returns the completed byte after the low nibble, None after the
        high nibble.
        """
        nibble = hex_value(char)
        if nibble < 0:
            field_name = self.state.phase.name.lower().replace("_", " ")
            raise self._malformed(f"expected hex digit in {field_name}, got {char!r}")

        state = self.state
        if state.high_nibble:
            state.byte_value = nibble
            state.high_nibble = False
            return None

        state.high_nibble = True
        return (state.byte_value << 4) | nibble

    def _enter_data(self) -> None:
        state = self.state
        if state.data_bytes > 0:
            state.phase = DecoderPhase.DATA
            state.remaining = state.data_bytes
        else:
            self._enter_checksum()

    def _enter_checksum(self) -> None:
        state = self.state
        state.expected_checksum = state.checksum.expected
        state.remaining = 1
        state.phase = DecoderPhase.CHECKSUM

    # -------------------------------------------------------------------------
    # Phase handlers
    # -------------------------------------------------------------------------

    def _line_start(self, char: str) -> list[DecoderEvent]:
        if char in _WHITESPACE:
            return []
        if char in "Ss":
            self.state.start_record()
            self.state.phase = DecoderPhase.RECORD_TYPE
            return []
        raise self._malformed(f"expected 'S' at start of record, got {char!r}")

    def _record_type(self, char: str) -> list[DecoderEvent]:
        if not "0" <= char <= "9":
            raise self._malformed(f"expected record type digit, got {char!r}")

        state = self.state
        state.record_type = RecordType.from_char(char, location=self._location())
        state.high_nibble = True
        state.remaining = 1
        state.value = 0
        state.checksum.reset()
        state.phase = DecoderPhase.BYTE_COUNT
        return []

    def _byte_count(self, char: str) -> list[DecoderEvent]:
        byte = self._take_nibble(char)
        if byte is None:
            return []

        state = self.state
        state.checksum.add(byte)
        state.byte_count = byte
        state.addr_bytes = address_width(state.record_type, location=self._location())
        state.data_bytes = byte - state.addr_bytes - 1
        if state.data_bytes < 0:
            raise self._malformed(
                f"byte count {byte} too small for S{int(state.record_type)} record",
                hint=f"S{int(state.record_type)} needs at least "
                     f"{state.addr_bytes + 1} bytes (address + checksum)",
            )

        state.value = 0
        if state.addr_bytes > 0:
            state.phase = DecoderPhase.ADDRESS
            state.remaining = state.addr_bytes
        else:
            self._enter_data()
        return []

    def _address(self, char: str) -> list[DecoderEvent]:
        byte = self._take_nibble(char)
        if byte is None:
            return []

        state = self.state
        state.checksum.add(byte)
        state.value = (state.value << 8) | byte
        state.remaining -= 1
        if state.remaining == 0:
            state.address = state.value
            state.next_address = state.value
            state.value = 0
            self._enter_data()
        return []

    def _data(self, char: str) -> list[DecoderEvent]:
        byte = self._take_nibble(char)
        if byte is None:
            return []

        state = self.state
        state.checksum.add(byte)
        state.data.append(byte)

        events: list[DecoderEvent] = []
        if state.record_type.is_data:
            events.append(DataByte(state.next_address, byte))
            state.next_address += 1

        state.remaining -= 1
        if state.remaining == 0:
            self._enter_checksum()
        return events

    def _checksum(self, char: str) -> list[DecoderEvent]:
        byte = self._take_nibble(char)
        if byte is None:
            return []

        state = self.state
        state.pending = DecodedRecord(
            record_type=state.record_type,
            byte_count=state.byte_count,
            address=state.address,
            data=bytes(state.data),
            checksum=byte,
            location=SourceLocation(self.filename, state.record_line, 1),
        )
        state.phase = DecoderPhase.END_OF_LINE

        if byte != state.expected_checksum:
            return [
                ChecksumMismatch(
                    record_type=state.record_type,
                    expected=state.expected_checksum,
                    actual=byte,
                    location=self._location(),
                    address=state.address,
                )
            ]
        return []

    def _end_of_line(self, char: str) -> list[DecoderEvent]:
        if char != "\n":
            return []

        state = self.state
        record = state.pending
        state.pending = None
        state.records += 1
        state.phase = DecoderPhase.LINE_START

        if logger.isEnabledFor(logging.DEBUG):
            fields = record.to_line()[4:-2]
            logger.debug(
                f"S{int(record.record_type)}: ({record.byte_count:3d}) "
                f"{fields} [{state.expected_checksum:02X}]"
            )
        return [RecordDecoded(record)]


# =============================================================================
# Convenience Functions
# =============================================================================

def decode_records(text: str, filename: str = "<input>") -> list[DecodedRecord]:
    """
    Decode every complete record in a string.

    Args:
        text: S-Record file contents
        filename: Name used in error locations

    Returns:
        The records in file order

    Raises:
        MalformedLineError, UnsupportedRecordTypeError: On the first bad line
    """
    decoder = RecordDecoder(filename)
    return [
        event.record
        for event in decoder.decode(text)
        if isinstance(event, RecordDecoded)
    ]
