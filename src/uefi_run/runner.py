"""Core logic for uefi-run."""

import logging

from uefi_run.esp import staged_esp
from uefi_run.models import LaunchConfig
from uefi_run.qemu import launch_qemu
from uefi_run.signals import termination_flag
from uefi_run.supervisor import SupervisionResult, Supervisor, SupervisorTimeouts

log = logging.getLogger(__name__)


def run(config: LaunchConfig, timeouts: SupervisorTimeouts | None = None) -> SupervisionResult:
    """Stage the ESP, boot it in QEMU and supervise QEMU until it is gone."""
    # Handlers must be in place before the ESP directory exists.
    with termination_flag() as terminating:
        with staged_esp(config.efi_exe) as esp_dir:
            child = launch_qemu(config, esp_dir)
            result = Supervisor(child, terminating, timeouts).supervise()
    log.debug("qemu finished: %s (returncode=%s)", result.state.value, result.returncode)
    return result
