"""Command line interface for unpacking Android boot images."""

from __future__ import annotations

import os
import shlex
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Callable

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from abootimg import __version__
from abootimg.errors import HeaderFormatError, ShortRead, ShortWrite
from abootimg.header import Header, HeaderV0, HeaderV3, TrailerV1, TrailerV2, VendorHeader
from abootimg.header.stream import until_nul
from abootimg.sections import boot_sections, extract_sections

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_FS = 3
EXIT_CORRUPT = 4

console = Console(emoji=False, highlight=False)
err_console = Console(stderr=True, emoji=False, highlight=False)


def _package_version() -> str:
    try:
        return version("abootimg")
    except PackageNotFoundError:
        return __version__


def _text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _handle_action(action: Callable[[], None]) -> int:
    try:
        action()
    except (HeaderFormatError, ShortRead) as exc:
        err_console.print(f"[red]Error: invalid or unsupported boot image:[/red] {escape(str(exc))}")
        return EXIT_CORRUPT
    except FileNotFoundError as exc:
        err_console.print(f"[red]File not found:[/red] {escape(str(exc))}")
        return EXIT_FS
    except PermissionError as exc:
        err_console.print(f"[red]Permission denied:[/red] {escape(str(exc))}")
        return EXIT_FS
    except (OSError, ShortWrite) as exc:
        err_console.print(f"[red]Filesystem error:[/red] {escape(str(exc))}")
        return EXIT_FS
    except Exception as exc:  # noqa: BLE001
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(exc))}")
        return EXIT_USAGE
    return EXIT_SUCCESS


def _info_rows(header: Header) -> list[tuple[str, str]]:
    hdr = header.inner
    if isinstance(hdr, VendorHeader):
        rows = [
            ("vendor boot magic", _text(header.magic)),
            ("vendor boot image header version", str(hdr.header_version)),
            ("page size", str(hdr.page_size)),
            ("kernel load address", f"0x{hdr.kernel_addr:08x}"),
            ("ramdisk load address", f"0x{hdr.ramdisk_addr:08x}"),
            ("vendor ramdisk total size", str(hdr.vendor_ramdisk_size)),
            ("vendor command line args", _text(hdr.cmdline_text)),
            ("kernel tags load address", f"0x{hdr.tags_addr:08x}"),
            ("product name", _text(hdr.board_name_text)),
            ("vendor boot image header size", str(hdr.header_size)),
            ("dtb size", str(hdr.dtb_size)),
            ("dtb address", f"0x{hdr.dtb_addr:016x}"),
        ]
        if hdr.v4 is not None:
            rows += [
                ("vendor ramdisk table size", str(hdr.v4.vendor_ramdisk_table_size)),
                ("vendor ramdisk table entry num", str(hdr.v4.vendor_ramdisk_table_entry_num)),
                ("vendor ramdisk table entry size", str(hdr.v4.vendor_ramdisk_table_entry_size)),
                ("vendor bootconfig size", str(hdr.v4.bootconfig_size)),
            ]
        return rows

    rows = [("boot magic", _text(header.magic))]
    if isinstance(hdr, HeaderV0):
        rows += [
            ("kernel_size", str(hdr.kernel_size)),
            ("kernel load address", f"0x{hdr.kernel_addr:08x}"),
            ("ramdisk size", str(hdr.ramdisk_size)),
            ("ramdisk load address", f"0x{hdr.ramdisk_addr:08x}"),
            ("second bootloader size", str(hdr.second_bootloader_size)),
            ("second bootloader load address", f"0x{hdr.second_bootloader_addr:08x}"),
            ("kernel tags load address", f"0x{hdr.tags_addr:08x}"),
            ("page size", str(hdr.page_size)),
        ]
    else:
        rows += [
            ("kernel_size", str(hdr.kernel_size)),
            ("ramdisk size", str(hdr.ramdisk_size)),
        ]
    rows += [
        ("os version", str(header.osversionpatch.version)),
        ("os patch level", str(header.osversionpatch.patch)),
        ("boot image header version", str(header.header_version)),
    ]
    if isinstance(hdr, HeaderV0):
        rows += [
            ("product name", _text(hdr.board_name_text)),
            ("command line args", _text(until_nul(hdr.cmdline_part_1))),
            ("additional command line args", _text(until_nul(hdr.cmdline_part_2))),
        ]
        trailer = hdr.versioned
        if isinstance(trailer, (TrailerV1, TrailerV2)):
            rows += [
                ("recovery dtbo size", str(trailer.recovery_dtbo_size)),
                ("recovery dtbo offset", f"0x{trailer.recovery_dtbo_addr:016x}"),
                ("boot header size", str(hdr.header_size)),
            ]
        if isinstance(trailer, TrailerV2):
            rows += [
                ("dtb size", str(trailer.dtb_size)),
                ("dtb address", f"0x{trailer.dtb_addr:016x}"),
            ]
    elif isinstance(hdr, HeaderV3):
        rows.append(("command line args", _text(hdr.cmdline_text)))
        if hdr.v4_signature_size is not None:
            rows.append(("boot.img signature size", str(hdr.v4_signature_size)))
    return rows


def _print_info(header: Header) -> None:
    table = Table(show_header=False, box=None)
    for label, value in _info_rows(header):
        table.add_row(label, Text(value))
    console.print(table)


def _mkbootimg_args(header: Header, paths: dict[str, Path], null: bool) -> list[bytes]:
    def text(value: bytes) -> bytes:
        if null:
            return value
        return os.fsencode(shlex.quote(os.fsdecode(value)))

    def option(name: str, value: bytes) -> list[bytes]:
        return [f"--{name}".encode(), value]

    def file_option(name: str, section: str) -> list[bytes]:
        if section not in paths:
            return []
        return option(name, text(os.fsencode(paths[section])))

    hdr = header.inner
    args = option("header_version", str(header.header_version).encode())

    if isinstance(hdr, VendorHeader):
        args += option("pagesize", f"0x{hdr.page_size:08x}".encode())
        args += option("base", b"0x00000000")
        args += option("kernel_offset", f"0x{hdr.kernel_addr:08x}".encode())
        args += option("ramdisk_offset", f"0x{hdr.ramdisk_addr:08x}".encode())
        args += option("tags_offset", f"0x{hdr.tags_addr:08x}".encode())
        args += option("dtb_offset", f"0x{hdr.dtb_addr:016x}".encode())
        args += option("vendor_cmdline", text(hdr.cmdline_text))
        args += option("board", text(hdr.board_name_text))
        args += file_option("vendor_ramdisk", "vendor_ramdisk")
        args += file_option("dtb", "dtb")
        return args

    args += option("os_version", str(header.osversionpatch.version).encode())
    args += option("os_patch_level", str(header.osversionpatch.patch).encode())
    args += file_option("kernel", "kernel")
    args += file_option("ramdisk", "ramdisk")

    if isinstance(hdr, HeaderV0):
        args += file_option("second", "second")
        args += file_option("recovery_dtbo", "recovery_dtbo")
        args += file_option("dtb", "dtb")
        args += option("pagesize", f"0x{hdr.page_size:08x}".encode())
        args += option("base", b"0x00000000")
        args += option("kernel_offset", f"0x{hdr.kernel_addr:08x}".encode())
        args += option("ramdisk_offset", f"0x{hdr.ramdisk_addr:08x}".encode())
        args += option("second_offset", f"0x{hdr.second_bootloader_addr:08x}".encode())
        args += option("tags_offset", f"0x{hdr.tags_addr:08x}".encode())
        if isinstance(hdr.versioned, TrailerV2):
            args += option("dtb_offset", f"0x{hdr.versioned.dtb_addr:016x}".encode())
        args += option("board", text(hdr.board_name_text))
        args += option("cmdline", text(hdr.cmdline_text))
    elif isinstance(hdr, HeaderV3):
        args += option("cmdline", text(hdr.cmdline_text))
    return args


def _write_mkbootimg_args(header: Header, paths: dict[str, Path], null: bool) -> None:
    sep = b"\x00" if null else b" "
    end = b"\x00" if null else b"\n"
    click.echo(sep.join(_mkbootimg_args(header, paths, null)) + end, nl=False)


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Unpack an Android boot, recovery or vendor_boot image.",
    epilog="Examples:\n  unpack-bootimg --boot_img boot.img\n  unpack-bootimg --boot_img boot.img --out extracted --format mkbootimg",
)
@click.version_option(version=_package_version(), prog_name="unpack-bootimg")
@click.option(
    "--boot_img",
    "boot_img",
    required=True,
    type=click.Path(path_type=Path),
    help="Path to the boot, recovery or vendor_boot image.",
)
@click.option(
    "--out",
    type=click.Path(path_type=Path),
    default=Path("out"),
    show_default=True,
    help="Output directory of the unpacked images.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["info", "mkbootimg"], case_sensitive=False),
    default="info",
    show_default=True,
    help="Text output format: human readable info, or mkbootimg arguments.",
)
@click.option(
    "-0",
    "--null",
    is_flag=True,
    default=False,
    help="Separate mkbootimg arguments with NUL instead of spaces.",
)
@click.pass_context
def cli(ctx: click.Context, boot_img: Path, out: Path, output_format: str, null: bool) -> None:
    def _run() -> None:
        with boot_img.open("rb") as in_file:
            header = Header.parse(in_file)
            sections = boot_sections(header)
            written = extract_sections(in_file, sections, out)
        paths = {section.name: path for section, path in zip(sections, written)}
        if output_format.lower() == "mkbootimg":
            _write_mkbootimg_args(header, paths, null)
        else:
            _print_info(header)

    ctx.exit(_handle_action(_run))


def main(argv: list[str] | None = None) -> int:
    try:
        return cli.main(args=argv, prog_name="unpack-bootimg", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return EXIT_USAGE
    except SystemExit as exc:  # noqa: TRY003
        code = exc.code if isinstance(exc.code, int) else EXIT_USAGE
        return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
