"""Launch configuration model for uefi-run."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class LaunchConfig(BaseModel):
    """Everything needed to boot one EFI executable under QEMU."""

    model_config = ConfigDict(frozen=True)

    efi_exe: Path
    bios_path: Path
    qemu_path: str
    qemu_args: tuple[str, ...] = ()
