"""Run UEFI executables in QEMU."""

__version__ = "0.1.0"
