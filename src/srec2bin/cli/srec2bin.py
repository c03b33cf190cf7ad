"""
srec2bin - S-Record to Binary Command-Line Interface
====================================================

This module implements the `srec2bin` command. It builds a binary ROM image
of a given size, fills it with a blank value and lays one or more Motorola
S-Record files over it. Later files take precedence.

Usage Examples
--------------
A 256KB image filled with zeros and no input files:
    $ srec2bin image.bin -K 256 -d 0

A 2MB image from three files, blanks = 0xFF:
    $ srec2bin fred.bin -M 2 -s f1.s19 f2.mot f3.s37

A 128KB image with no screen output:
    $ srec2bin fred.bin -K 128 -v 0 -s f1.s19

Notes
-----
- Existing binary files are overwritten.
- Switches are case sensitive; one of -B/-K/-M/-G is required.
- -s marks the start of the S-Record file list and must come last; every
  argument after it is taken as an input file name.
- Writes beyond the ROM size are ignored; the closing report shows the
  minimum ROM size that would have held them.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from srec2bin import __version__
from srec2bin.cli.errors import ExitCode, handle_cli_exception
from srec2bin.config import (
    DEFAULT_BLANK,
    DEFAULT_VERBOSITY,
    ConversionConfig,
    SizeUnit,
    parse_blank,
    rom_size_from,
)
from srec2bin.converter import ConversionResult, FileResult, convert
from srec2bin.errors import ConfigError


# =============================================================================
# Parameter Types
# =============================================================================

class ByteValue(click.ParamType):
    """
    Click parameter type for a single byte.

    Accepts decimal (255), 0x-hex (0xFF) or $-hex ($FF).
    """
    name = "byte"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_blank(value)
        except ConfigError as e:
            self.fail(str(e), param, ctx)


BYTE_VALUE = ByteValue()


# =============================================================================
# Helpers
# =============================================================================

def setup_logging(verbosity: int) -> None:
    """
    Configure logging for the given verbosity level.

    0 shows nothing, 1 shows warnings (checksum mismatches, unreadable
    files), 2 and above add the per-record trace.
    """
    if verbosity <= 0:
        level = logging.CRITICAL
    elif verbosity == 1:
        level = logging.WARNING
    else:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbosity > 1 else "%(message)s",
    )
    logging.getLogger("srec2bin").setLevel(level)


def select_rom_size(sizes: dict[str, Optional[int]]) -> int:
    """
    Pick the ROM size from the -B/-K/-M/-G options.

    Raises:
        click.UsageError: Unless exactly one option was given
        ConfigError: If the size is not positive
    """
    given = {flag: count for flag, count in sizes.items() if count is not None}
    if len(given) != 1:
        raise click.UsageError("exactly one of -B, -K, -M or -G is required")
    flag, count = given.popitem()
    return rom_size_from(count, SizeUnit.from_flag(flag))


def describe_file(result: FileResult) -> str:
    """One summary line for a processed file."""
    status = "" if result.opened else "Failed to open "
    return f"  <{result.path}>... {status}({result.records} records)"


def print_report(result: ConversionResult) -> None:
    click.echo()
    click.echo("=" * 38)
    click.echo(f"Records:          {result.records}")
    click.echo(f"Failed files:     {len(result.failed_files)}")
    click.echo(f"Checksum errors:  {result.checksum_error_count}")
    click.echo(f"Minimum ROM size: {result.high_water_mark}")
    click.echo("=" * 38)


# =============================================================================
# CLI Definition
# =============================================================================

SREC_MARKERS = ("-s", "--srec")


class SrecListCommand(click.Command):
    """
    Command whose -s switch ends option parsing.

    Everything after the first -s/--srec is passed through as an S-Record
    file name, including names that start with '-'.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        for index, arg in enumerate(args):
            if arg == "--":
                break
            if arg in SREC_MARKERS:
                args = args[:index + 1] + ["--"] + args[index + 1:]
                break
        return super().parse_args(ctx, args)


@click.command(cls=SrecListCommand)
@click.argument(
    "binfile",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.argument(
    "srec_files",
    nargs=-1,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option("-B", "size_b", type=int, default=None, help="ROM size in bytes")
@click.option("-K", "size_k", type=int, default=None, help="ROM size in KB (1KB = 1024B)")
@click.option("-M", "size_m", type=int, default=None, help="ROM size in MB (1MB = 1024KB)")
@click.option("-G", "size_g", type=int, default=None, help="ROM size in GB (1GB = 1024MB)")
@click.option(
    "-d", "--blank",
    type=BYTE_VALUE,
    default=DEFAULT_BLANK,
    show_default="0xFF",
    help="Blank value for addresses not in any S-Record file",
)
@click.option(
    "-v", "--verbosity",
    type=click.IntRange(min=0),
    default=DEFAULT_VERBOSITY,
    show_default=True,
    help="0 = silent, 1 = summary, 2+ = per-record trace",
)
@click.option(
    "-s", "--srec",
    "srec_marker",
    is_flag=True,
    help="Start of the S-Record file list (must be last)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any file fails or any checksum mismatches",
)
@click.option(
    "--pause",
    is_flag=True,
    help="Wait for a key press before exiting",
)
@click.version_option(__version__, "--version", "-V", prog_name="srec2bin")
@click.pass_context
def main(
    ctx: click.Context,
    binfile: Optional[Path],
    srec_files: tuple[Path, ...],
    size_b: Optional[int],
    size_k: Optional[int],
    size_m: Optional[int],
    size_g: Optional[int],
    blank: int,
    verbosity: int,
    srec_marker: bool,
    strict: bool,
    pause: bool,
) -> None:
    """
    Convert Motorola S-Record files to a binary image file.

    BINFILE is the binary image to create. SREC_FILES follow the -s switch
    and are laid over the image in order; later files take precedence.

    \b
    Examples:
      srec2bin image.bin -K 256 -d 0
      srec2bin fred.bin -M 2 -s f1.s19 f2.mot f3.s37
      srec2bin fred.bin -K 128 -v 0 -s f1.s19
    """
    if binfile is None:
        click.echo(ctx.get_help())
        ctx.exit(ExitCode.SUCCESS)

    if srec_files and not srec_marker:
        raise click.UsageError(
            f"unexpected argument {srec_files[0]}; S-Record files must follow -s"
        )

    setup_logging(verbosity)

    try:
        rom_size = select_rom_size({"B": size_b, "K": size_k, "M": size_m, "G": size_g})
        config = ConversionConfig(
            output=binfile,
            rom_size=rom_size,
            blank=blank,
            inputs=list(srec_files),
            verbosity=verbosity,
        )
        config.validate()

        if verbosity:
            click.echo(f"BIN file:..... {config.output}")
            click.echo(f"ROM size:..... {config.rom_size}")
            click.echo(f"Blank Value:.. 0x{config.blank:02X}")
            click.echo(f"Verbosity:.... {config.verbosity}")
            click.echo(f"SREC Files:... {len(config.inputs)}")

        result = convert(config)
    except click.UsageError:
        raise
    except Exception as e:
        handle_cli_exception(e, verbose=verbosity > 1)

    if verbosity:
        for file_result in result.files:
            click.echo(describe_file(file_result))
        print_report(result)

    if pause:
        click.pause("Hit RETURN to EXIT: ")

    if strict and not result.ok:
        ctx.exit(ExitCode.CONVERSION_ERROR)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
