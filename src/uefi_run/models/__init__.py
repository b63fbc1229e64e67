"""Model package for uefi-run."""

from uefi_run.models.launch_config import LaunchConfig

__all__ = [
    "LaunchConfig",
]
