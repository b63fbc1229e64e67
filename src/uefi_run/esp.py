"""Stage an EFI executable into a temporary EFI system partition directory.

QEMU mounts the directory as a FAT drive (``fat:rw:<dir>``) and the firmware
boots the removable-media default loader, ``\\EFI\\BOOT\\BOOTX64.EFI``.
"""

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from uefi_run.errors import StagingError

log = logging.getLogger(__name__)

BOOT_DIR = ("EFI", "BOOT")
BOOT_LOADER_NAME = "BOOTX64.EFI"


def stage_efi_executable(esp_root: Path, efi_exe: Path) -> Path:
    """Copy ``efi_exe`` to ``EFI/BOOT/BOOTX64.EFI`` under ``esp_root``."""
    boot_dir = esp_root.joinpath(*BOOT_DIR)
    try:
        boot_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StagingError(f"Unable to create {boot_dir}: {e}") from e

    loader = boot_dir / BOOT_LOADER_NAME
    try:
        shutil.copyfile(efi_exe, loader)
    except OSError as e:
        raise StagingError(f"Unable to copy EFI executable {efi_exe}: {e}") from e
    log.debug("staged %s as %s", efi_exe, loader)
    return loader


@contextmanager
def staged_esp(efi_exe: Path) -> Iterator[Path]:
    """Yield a temporary ESP directory containing ``efi_exe`` as the boot loader.

    The directory is removed when the block exits, however it exits.
    """
    try:
        tmp = tempfile.TemporaryDirectory(prefix="uefi-run-")
    except OSError as e:
        raise StagingError(f"Unable to create temporary directory: {e}") from e

    with tmp as tmpdir:
        esp_root = Path(tmpdir)
        log.debug("ESP staging directory: %s", esp_root)
        stage_efi_executable(esp_root, efi_exe)
        yield esp_root
    log.debug("removed ESP staging directory %s", esp_root)
