"""Build the QEMU command line and start QEMU."""

import logging
import shlex
import subprocess
from pathlib import Path

from uefi_run.errors import LaunchError
from uefi_run.models import LaunchConfig

log = logging.getLogger(__name__)


def build_qemu_args(config: LaunchConfig, esp_dir: Path) -> list[str]:
    """Return QEMU's arguments: the fixed baseline, then the passthrough args."""
    args = [
        # QEMU enables a lot of default devices which slow down boot.
        "-nodefaults",
        # Modern machine, with KVM acceleration when available.
        "-machine", "q35,accel=kvm:tcg",
        # Standard VGA card with Bochs VBE extensions.
        "-vga", "std",
        # OVMF connects the UEFI console to the first serial port.
        "-serial", "stdio",
        "-bios", str(config.bios_path),
        # Mount the staging directory as a FAT partition.
        "-drive", f"format=raw,file=fat:rw:{esp_dir}",
    ]
    args.extend(config.qemu_args)
    return args


def launch_qemu(config: LaunchConfig, esp_dir: Path) -> subprocess.Popen:
    """Start QEMU as a child process sharing our stdio."""
    command = [config.qemu_path, *build_qemu_args(config, esp_dir)]
    log.debug("starting %s", shlex.join(command))
    try:
        return subprocess.Popen(command)
    except OSError as e:
        raise LaunchError(f"Failed to start qemu ({config.qemu_path}): {e}") from e
