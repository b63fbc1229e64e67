"""Tests for uefi_run.runner covering the whole stage/launch/supervise cycle."""

import os
import signal
import stat
import tempfile
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from uefi_run.errors import LaunchError
from uefi_run.models import LaunchConfig
from uefi_run.runner import run
from uefi_run.supervisor import ChildState, SupervisorTimeouts

FAST = SupervisorTimeouts(poll_interval=0.05, grace_period=2.0, kill_timeout=5.0)

posix_only = pytest.mark.skipif(os.name != "posix", reason="uses shell scripts and POSIX signals")


@pytest.fixture
def temp_root(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def efi_exe(tmp_path) -> Path:
    exe = tmp_path / "hello.efi"
    exe.write_bytes(b"MZ\x90\x00hello uefi\x00\xff")
    return exe


def fake_qemu(tmp_path: Path, body: str) -> str:
    script = tmp_path / "fake-qemu"
    script.write_text(f"#!/bin/sh\n{body}\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return str(script)


def make_config(efi_exe, qemu_path="qemu-system-x86_64", qemu_args=()):
    return LaunchConfig(
        efi_exe=efi_exe,
        bios_path="/usr/share/OVMF/OVMF.fd",
        qemu_path=qemu_path,
        qemu_args=qemu_args,
    )


def send_sigterm_after(delay: float) -> threading.Timer:
    timer = threading.Timer(delay, os.kill, args=(os.getpid(), signal.SIGTERM))
    timer.start()
    return timer


class TestRunWithMockedQemu:
    def test_launches_baseline_args_and_cleans_up(self, efi_exe, temp_root):
        seen = {}

        def popen(command):
            esp = Path(command[-1].removeprefix("format=raw,file=fat:rw:"))
            seen["command"] = command
            seen["esp"] = esp
            seen["loader"] = (esp / "EFI" / "BOOT" / "BOOTX64.EFI").read_bytes()
            child = MagicMock()
            child.wait.return_value = 0
            child.returncode = 0
            return child

        with patch("uefi_run.qemu.subprocess.Popen", side_effect=popen):
            result = run(make_config(efi_exe))

        assert result.state is ChildState.EXITED
        assert result.returncode == 0
        assert seen["command"] == [
            "qemu-system-x86_64",
            "-nodefaults",
            "-machine", "q35,accel=kvm:tcg",
            "-vga", "std",
            "-serial", "stdio",
            "-bios", "/usr/share/OVMF/OVMF.fd",
            "-drive", f"format=raw,file=fat:rw:{seen['esp']}",
        ]
        assert seen["loader"] == efi_exe.read_bytes()
        assert not seen["esp"].exists()
        assert os.listdir(temp_root) == []

    def test_launch_failure_still_removes_staging_dir(self, efi_exe, temp_root):
        with patch("uefi_run.qemu.subprocess.Popen", side_effect=FileNotFoundError("qemu")):
            with pytest.raises(LaunchError):
                run(make_config(efi_exe))

        assert os.listdir(temp_root) == []

    def test_restores_signal_handlers(self, efi_exe, temp_root):
        before = signal.getsignal(signal.SIGTERM)
        child = MagicMock(returncode=0)
        child.wait.return_value = 0

        with patch("uefi_run.qemu.subprocess.Popen", return_value=child):
            run(make_config(efi_exe))

        assert signal.getsignal(signal.SIGTERM) is before


@posix_only
class TestRunWithRealProcess:
    def test_nonzero_qemu_status_is_informational(self, tmp_path, efi_exe, temp_root):
        qemu = fake_qemu(tmp_path, "exit 3")

        result = run(make_config(efi_exe, qemu_path=qemu), FAST)

        assert result.state is ChildState.EXITED
        assert result.returncode == 3
        assert os.listdir(temp_root) == []

    def test_passthrough_args_reach_qemu(self, tmp_path, efi_exe, temp_root):
        out = tmp_path / "argv.txt"
        qemu = fake_qemu(tmp_path, f'for a in "$@"; do echo "$a"; done > "{out}"')

        run(make_config(efi_exe, qemu_path=qemu, qemu_args=("-m", "1G", "-s")), FAST)

        argv = out.read_text().splitlines()
        assert argv[-3:] == ["-m", "1G", "-s"]
        assert argv[:2] == ["-nodefaults", "-machine"]

    def test_termination_with_exit_in_grace_period(self, tmp_path, efi_exe, temp_root):
        qemu = fake_qemu(tmp_path, "sleep 0.5\nexit 0")

        timer = send_sigterm_after(0.1)
        try:
            result = run(make_config(efi_exe, qemu_path=qemu), FAST)
        finally:
            timer.cancel()

        assert result.state is ChildState.EXITED
        assert os.listdir(temp_root) == []

    def test_termination_escalates_to_kill(self, tmp_path, efi_exe, temp_root):
        qemu = fake_qemu(tmp_path, "exec sleep 60")
        timeouts = SupervisorTimeouts(poll_interval=0.05, grace_period=0.2, kill_timeout=5.0)

        timer = send_sigterm_after(0.1)
        try:
            result = run(make_config(efi_exe, qemu_path=qemu), timeouts)
        finally:
            timer.cancel()

        assert result.state is ChildState.KILLED
        assert result.returncode == -signal.SIGKILL
        assert os.listdir(temp_root) == []
