"""Command-line interface for uefi-run."""

import argparse
import logging
import sys

from uefi_run import __version__
from uefi_run.config import build_launch_config
from uefi_run.errors import UefiRunError
from uefi_run.runner import run

log = logging.getLogger("uefi_run")


def build_parser() -> argparse.ArgumentParser:
    """Build the uefi-run argument parser."""
    parser = argparse.ArgumentParser(
        prog="uefi-run",
        description="Runs UEFI executables in qemu.",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-b", "--bios",
        metavar="bios_path",
        help=(
            "BIOS image (default = $UEFI_RUN_BIOS, /usr/share/OVMF/OVMF.fd, "
            "/usr/share/ovmf/x64/OVMF_CODE.fd or ./OVMF.fd)"
        ),
    )
    parser.add_argument(
        "-q", "--qemu",
        metavar="qemu_path",
        help="Path to qemu executable (default = $UEFI_RUN_QEMU or qemu-system-x86_64)",
    )
    parser.add_argument("efi_exe", metavar="FILE", help="EFI executable")
    parser.add_argument(
        "qemu_args",
        nargs=argparse.REMAINDER,
        help="Additional arguments for qemu",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    qemu_args = list(args.qemu_args)
    if qemu_args and qemu_args[0] == "--":
        qemu_args = qemu_args[1:]
    log.debug("efi_exe=%s qemu_args=%r", args.efi_exe, qemu_args)

    try:
        config = build_launch_config(
            args.efi_exe,
            bios_path=args.bios,
            qemu_path=args.qemu,
            qemu_args=qemu_args,
        )
        run(config)
    except UefiRunError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def entrypoint() -> None:
    raise SystemExit(main())
