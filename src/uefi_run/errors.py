"""Exceptions raised by uefi-run."""


class UefiRunError(RuntimeError):
    """Base class for fatal uefi-run errors reported by the CLI."""


class FirmwareNotFoundError(UefiRunError):
    pass


class StagingError(UefiRunError):
    pass


class LaunchError(UefiRunError):
    pass


class SupervisorError(UefiRunError):
    """Waiting on or killing the QEMU child failed unexpectedly."""
