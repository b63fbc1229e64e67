"""Locate a default OVMF firmware image."""

import logging
import os
from collections.abc import Iterable

from uefi_run.errors import FirmwareNotFoundError

log = logging.getLogger(__name__)

FIRMWARE_CANDIDATES = (
    # Debian / Ubuntu
    "/usr/share/OVMF/OVMF.fd",
    # Arch Linux
    "/usr/share/ovmf/x64/OVMF_CODE.fd",
    "OVMF.fd",
)


def find_firmware(candidates: Iterable[str] | None = None) -> str:
    """Return the first candidate firmware path that exists."""
    if candidates is None:
        candidates = FIRMWARE_CANDIDATES
    for candidate in candidates:
        if os.path.exists(candidate):
            log.debug("using firmware %s", candidate)
            return candidate
        log.debug("no firmware at %s", candidate)
    raise FirmwareNotFoundError(
        "Unable to find OVMF.fd. Install OVMF or pass one with --bios."
    )
