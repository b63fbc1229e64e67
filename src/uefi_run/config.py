"""Configuration for uefi-run."""

import os
from collections.abc import Sequence
from pathlib import Path

from uefi_run.firmware import find_firmware
from uefi_run.models import LaunchConfig

DEFAULT_QEMU = "qemu-system-x86_64"


def get_qemu_path() -> str:
    """Return the QEMU binary from env or default."""
    return os.environ.get("UEFI_RUN_QEMU", "").strip() or DEFAULT_QEMU


def get_bios_override() -> str | None:
    """Return the firmware image named in the environment, if any."""
    return os.environ.get("UEFI_RUN_BIOS", "").strip() or None


def build_launch_config(
    efi_exe: str,
    bios_path: str | None = None,
    qemu_path: str | None = None,
    qemu_args: Sequence[str] = (),
) -> LaunchConfig:
    """Resolve defaults and build the immutable launch configuration.

    Explicit values win over the environment, which wins over the built-in
    defaults. Firmware discovery only runs when neither names an image, and
    raises FirmwareNotFoundError when it comes up empty.
    """
    bios = bios_path or get_bios_override() or find_firmware()
    return LaunchConfig(
        efi_exe=Path(efi_exe),
        bios_path=Path(bios),
        qemu_path=qemu_path or get_qemu_path(),
        qemu_args=tuple(qemu_args),
    )
