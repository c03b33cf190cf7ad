"""
srec2bin - Conversion Configuration
===================================

Settings for one conversion run: where the image goes, how big it is,
what it is filled with and which S-Record files are laid over it.

ROM sizes are given as a count of units, where the units are powers of
1024:

    B   bytes
    K   kilobytes (1024 bytes)
    M   megabytes (1024 KB)
    G   gigabytes (1024 MB)

Defaults follow the classic srec2bin tool: blank value 0xFF and
verbosity 1 (summary output).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Union

from srec2bin.errors import ConfigError


DEFAULT_BLANK = 0xFF
DEFAULT_VERBOSITY = 1


class SizeUnit(IntEnum):
    """ROM size units (value is the multiplier in bytes)."""
    B = 1
    K = 1024
    M = 1024 * 1024
    G = 1024 * 1024 * 1024

    @classmethod
    def from_flag(cls, flag: str) -> "SizeUnit":
        """Convert a unit letter ('B', 'K', 'M', 'G') to a SizeUnit."""
        try:
            return cls[flag.upper()]
        except KeyError:
            raise ConfigError(
                f"Invalid size unit '{flag}'. Choose from: B, K, M, G"
            ) from None


def rom_size_from(count: int, unit: SizeUnit) -> int:
    """
    Compute a ROM size in bytes.

    Raises:
        ConfigError: If count is not positive
    """
    if count <= 0:
        raise ConfigError(f"ROM size must be a positive integer, got {count}")
    return count * int(unit)


def parse_int(text: str) -> int:
    """
    Parse a number given as decimal, 0x-hex or $-hex.

    Raises:
        ConfigError: If the text is not a number
    """
    value = text.strip()
    try:
        if value.lower().startswith("0x"):
            return int(value, 16)
        if value.startswith("$"):
            return int(value[1:], 16)
        return int(value)
    except ValueError:
        raise ConfigError(f"Invalid number '{text}'") from None


def parse_blank(text: str) -> int:
    """
    Parse a blank fill value.

    Example:
        >>> parse_blank("0xFF"), parse_blank("0"), parse_blank("$A5")
        (255, 0, 165)
    """
    value = parse_int(text)
    if not 0 <= value <= 0xFF:
        raise ConfigError(f"Blank value must be 0-255 (0x00-0xFF), got {text}")
    return value


@dataclass
class ConversionConfig:
    """
    Settings for a conversion run.

    Attributes:
        output: Binary image file to write
        rom_size: Image size in bytes
        blank: Fill value for bytes no record writes (default: 0xFF)
        inputs: S-Record files, applied in order (later files win)
        verbosity: 0 = silent, 1 = summary, >1 = per-record trace
    """
    output: Path
    rom_size: int
    blank: int = DEFAULT_BLANK
    inputs: List[Path] = field(default_factory=list)
    verbosity: int = DEFAULT_VERBOSITY

    def __post_init__(self) -> None:
        self.output = Path(self.output)
        self.inputs = [Path(p) for p in self.inputs]

    @classmethod
    def from_units(
        cls,
        output: Union[str, Path],
        size: int,
        unit: SizeUnit,
        inputs: List[Union[str, Path]],
        blank: int = DEFAULT_BLANK,
        verbosity: int = DEFAULT_VERBOSITY,
    ) -> "ConversionConfig":
        """Build a config from a size count and unit, then validate it."""
        config = cls(
            output=Path(output),
            rom_size=rom_size_from(size, unit),
            blank=blank,
            inputs=list(inputs),
            verbosity=verbosity,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check the settings.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.rom_size <= 0:
            raise ConfigError(f"ROM size must be positive, got {self.rom_size}")
        if not 0 <= self.blank <= 0xFF:
            raise ConfigError(f"Blank value must be 0-255, got {self.blank}")
        if self.verbosity < 0:
            raise ConfigError(f"Verbosity must not be negative, got {self.verbosity}")
