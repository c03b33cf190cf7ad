"""
Binary Image
============

The flat memory image that S-Record data is written into.

The image is a fixed-size byte buffer pre-filled with a blank value. Data
bytes from S1/S2/S3 records are committed through write(), the overlay
writer: a later write to an address simply replaces whatever was there,
whether blank fill or a byte from an earlier file.

Writes beyond the end of the image are dropped without error. They still
raise the high-water mark, so after a run `high_water_mark` tells how big
the ROM would have to be to hold every byte that was addressed.

Example
-------
    >>> image = BinaryImage(rom_size=16, blank=0xFF)
    >>> image.write(4, 0xAA)
    >>> image.write(20, 0xBB)        # dropped, past the end
    >>> image[4], image.high_water_mark
    (170, 21)
"""

from pathlib import Path
from typing import Iterable, Union
import logging

from srec2bin.errors import ImageSizeError

# Logger for this module
logger = logging.getLogger(__name__)


class BinaryImage:
    """
    Fixed-size output image with overlay writes.

    Attributes:
        rom_size: Image size in bytes
        blank: Fill value for bytes no record writes
        high_water_mark: Smallest size that would hold every address written
        writes_dropped: Number of writes at or beyond rom_size
    """

    def __init__(self, rom_size: int, blank: int = 0xFF):
        """
        Create a blank image.

        Args:
            rom_size: Image size in bytes (must be positive)
            blank: Fill value (0-255)

        Raises:
            ImageSizeError: If either argument is out of range
        """
        if rom_size <= 0:
            raise ImageSizeError(f"ROM size must be positive, got {rom_size}")
        if not 0 <= blank <= 0xFF:
            raise ImageSizeError(f"Blank value must be 0-255, got {blank}")

        self.rom_size = rom_size
        self.blank = blank
        self.high_water_mark = 0
        self.writes_dropped = 0
        self._data = bytearray([blank]) * rom_size

    @classmethod
    def create(
        cls,
        filepath: Union[str, Path],
        rom_size: int,
        blank: int = 0xFF,
    ) -> "BinaryImage":
        """
        Create a blank image and write it to disk straight away.

        The output file exists (blank-filled) even if every input file
        later turns out to be unreadable.

        Raises:
            ImageSizeError: If the size or blank value is invalid
            OSError: If the file cannot be written
        """
        image = cls(rom_size, blank)
        Path(filepath).write_bytes(image._data)
        logger.debug(f"Created {filepath} ({rom_size} bytes of 0x{blank:02X})")
        return image

    # -------------------------------------------------------------------------
    # Overlay writer
    # -------------------------------------------------------------------------

    def write(self, address: int, value: int) -> None:
        """
        Commit one data byte.

        Args:
            address: Target offset in the image
            value: Byte value to write
        """
        if address + 1 > self.high_water_mark:
            self.high_water_mark = address + 1

        if 0 <= address < self.rom_size:
            self._data[address] = value & 0xFF
        else:
            self.writes_dropped += 1
            logger.debug(f"Dropped write of 0x{value:02X} at 0x{address:X} (ROM size {self.rom_size})")

    def write_bytes(self, address: int, data: Iterable[int]) -> None:
        """Write consecutive bytes starting at `address`."""
        for offset, value in enumerate(data):
            self.write(address + offset, value)

    # -------------------------------------------------------------------------
    # Access and output
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return self.rom_size

    def __getitem__(self, address: int) -> int:
        return self._data[address]

    @property
    def overflow(self) -> bool:
        """True when some write fell outside the image."""
        return self.high_water_mark > self.rom_size

    def to_bytes(self) -> bytes:
        return bytes(self._data)

    def save(self, filepath: Union[str, Path]) -> int:
        """
        Write the image to disk, replacing any existing file.

        Returns:
            Number of bytes written (always rom_size)
        """
        filepath = Path(filepath)
        filepath.write_bytes(self._data)
        logger.debug(f"Wrote {self.rom_size} bytes to {filepath}")
        return self.rom_size
