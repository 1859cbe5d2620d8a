"""Device deployment state machine tests.

A ``FakeDevice`` stands in for the Playdate: it reacts to commands written to
the serial "port" (a plain file) whenever the deployer sleeps.
"""

from __future__ import annotations

import pytest

from crank.deploy import DeviceDeployer, DeviceSession, DeviceState
from crank.errors import DeviceError, DeviceTimeoutError, FilesystemError, ToolInvocationError
from crank.platform import LinuxPlatform


class FakeDevice:
    """Simulated device driven by the deployer's sleep calls."""

    def __init__(self, serial, mount):
        self.serial = serial
        self.mount = mount
        self.now = 0.0
        self.commands = []
        self.ejects = []
        self.ejected = False
        self.reconnect = True

    def connect_serial(self):
        self.serial.parent.mkdir(parents=True, exist_ok=True)
        self.serial.write_text("")

    def mount_volume(self):
        (self.mount / "Games").mkdir(parents=True, exist_ok=True)

    def sleep(self, seconds):
        self.now += seconds
        if self.serial.exists():
            sent = self.serial.read_text()
            if sent == "datadisk\n":
                self.commands.append(sent)
                self.serial.unlink()
                self.mount_volume()
        elif self.ejected and self.reconnect:
            self.connect_serial()

    def clock(self):
        return self.now

    def runner(self, command):
        self.ejects.append(command)
        self.ejected = True


@pytest.fixture
def pdx(tmp_path):
    bundle = tmp_path / "target" / "Hello World.pdx"
    (bundle / "images").mkdir(parents=True)
    (bundle / "pdex.bin").write_bytes(b"binary")
    (bundle / "images" / "a.pdi").write_bytes(b"image")
    return bundle


@pytest.fixture
def device(settings):
    return FakeDevice(settings.serial_device, settings.mount_point)


def make_deployer(settings, device, **kwargs):
    kwargs.setdefault("runner", device.runner)
    return DeviceDeployer(
        settings, LinuxPlatform(), sleep=device.sleep, clock=device.clock, **kwargs
    )


class TestFullDeploy:
    """Device starts in run mode and is walked through every state."""

    def test_states_and_commands(self, settings, device, pdx):
        device.connect_serial()
        transitions = []
        deployer = make_deployer(settings, device, on_transition=lambda a, b: transitions.append(b))

        session = deployer.deploy(pdx, "Hello World")

        assert session.state is DeviceState.RUNNING
        assert session.history == [
            DeviceState.IDLE,
            DeviceState.AWAITING_DISK_MODE,
            DeviceState.AWAITING_MOUNT,
            DeviceState.COPYING,
            DeviceState.EJECTING,
            DeviceState.AWAITING_SERIAL_RETURN,
            DeviceState.RUNNING,
        ]
        assert transitions == session.history[1:]
        assert device.commands == ["datadisk\n"]
        assert settings.serial_device.read_text() == "run /Games/Hello World.pdx\n"

    def test_bundle_copied_to_games(self, settings, device, pdx):
        device.connect_serial()
        make_deployer(settings, device).deploy(pdx, "Hello World")

        installed = settings.mount_point / "Games" / "Hello World.pdx"
        assert (installed / "pdex.bin").read_bytes() == b"binary"
        assert (installed / "images" / "a.pdi").read_bytes() == b"image"

    def test_eject_uses_mount_point(self, settings, device, pdx):
        device.connect_serial()
        make_deployer(settings, device).deploy(pdx, "Hello World")
        assert device.ejects == [["eject", str(settings.mount_point)]]


class TestAlreadyInDiskMode:
    def test_skips_disk_mode_request(self, settings, device, pdx):
        """No serial port but a mounted volume goes straight to copying."""
        device.mount_volume()
        session = make_deployer(settings, device).deploy(pdx, "Hello World")

        assert session.history[:4] == [
            DeviceState.IDLE,
            DeviceState.AWAITING_MOUNT,
            DeviceState.COPYING,
            DeviceState.EJECTING,
        ]
        assert DeviceState.AWAITING_DISK_MODE not in session.history
        assert device.commands == []
        assert session.state is DeviceState.RUNNING


class TestFailures:
    def test_eject_failure_is_not_fatal(self, settings, device, pdx):
        device.mount_volume()

        def failing_eject(command):
            device.ejected = True
            raise ToolInvocationError(command, returncode=1)

        session = make_deployer(settings, device, runner=failing_eject).deploy(pdx, "Hello World")
        assert session.state is DeviceState.RUNNING

    def test_mount_never_appears_times_out(self, settings, device, pdx):
        settings = settings.model_copy(update={"device_timeout": 1.0})
        transitions = []
        deployer = make_deployer(settings, device, on_transition=lambda a, b: transitions.append(b))

        with pytest.raises(DeviceTimeoutError, match="device volume"):
            deployer.deploy(pdx, "Hello World")
        assert transitions[-1] is DeviceState.FAILED
        assert device.now >= 1.0

    def test_serial_never_returns_times_out(self, settings, device, pdx):
        settings = settings.model_copy(update={"device_timeout": 2.0})
        device.mount_volume()
        device.reconnect = False

        with pytest.raises(DeviceTimeoutError, match="run mode"):
            make_deployer(settings, device).deploy(pdx, "Hello World")
        # copy completed before the timeout
        assert (settings.mount_point / "Games" / "Hello World.pdx" / "pdex.bin").exists()

    def test_missing_bundle_fails_copy(self, settings, device, tmp_path):
        device.mount_volume()
        transitions = []
        deployer = make_deployer(settings, device, on_transition=lambda a, b: transitions.append(b))

        with pytest.raises(FilesystemError):
            deployer.deploy(tmp_path / "missing.pdx", "Hello World")
        assert transitions[-2:] == [DeviceState.COPYING, DeviceState.FAILED]
        assert device.ejects == []

    def test_vanished_serial_port_not_recreated(self, settings, device):
        """Sending to a port that has gone away fails instead of creating a file."""
        settings.serial_device.parent.mkdir(parents=True)
        deployer = make_deployer(settings, device)

        with pytest.raises(DeviceError, match="datadisk"):
            deployer._send("datadisk")
        assert not settings.serial_device.exists()

    def test_send_writes_command_line(self, settings, device):
        device.connect_serial()
        make_deployer(settings, device)._send("run /Games/Game.pdx")
        assert settings.serial_device.read_text() == "run /Games/Game.pdx\n"

    def test_unwritable_serial_port(self, settings, device, pdx):
        settings.serial_device.mkdir(parents=True)
        with pytest.raises(DeviceError, match="datadisk"):
            make_deployer(settings, device).deploy(pdx, "Hello World")


class TestDeviceSession:
    def test_backward_transition_rejected(self, tmp_path):
        session = DeviceSession(tmp_path / "serial", tmp_path / "mount")
        session.advance(DeviceState.AWAITING_MOUNT)
        with pytest.raises(DeviceError, match="Illegal transition"):
            session.advance(DeviceState.AWAITING_DISK_MODE)

    def test_failed_reachable_from_any_state(self, tmp_path):
        session = DeviceSession(tmp_path / "serial", tmp_path / "mount")
        session.advance(DeviceState.COPYING)
        session.advance(DeviceState.FAILED)
        assert session.finished

    def test_no_transition_after_finish(self, tmp_path):
        session = DeviceSession(tmp_path / "serial", tmp_path / "mount")
        session.advance(DeviceState.FAILED)
        with pytest.raises(DeviceError):
            session.advance(DeviceState.RUNNING)
