"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import logging

import usb.core

from senseictl.core.device_match import matches_identity
from senseictl.core.errors import ProfileLoadError, TransferError, ValidationError
from senseictl.core.model import (
    ConfigurationDelta,
    ConfigurationSnapshot,
    DeviceIdentity,
    DeviceProfile,
)
from senseictl.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles
from senseictl.core.protocol import (
    GET_REPORT,
    GET_REPORT_VALUE,
    REPORT_INDEX,
    REQUEST_TYPE_IN,
    REQUEST_TYPE_OUT,
    SET_REPORT,
    SET_REPORT_VALUE,
    STATUS_REPORT_LENGTH,
    TRANSFER_TIMEOUT_MS,
    Command,
    StatusReport,
    decode_status,
    encode_save,
    plan_writes,
)
from senseictl.core.session import SessionHandle, discover_and_open, enumerate_devices, with_session
from senseictl.transports.base import UsbBackend
from senseictl.transports.pyusb import PyUsbBackend

LOGGER = logging.getLogger(__name__)


def _send_command(handle: SessionHandle, command: Command) -> None:
    LOGGER.debug("SET_REPORT %s: %s", command.field, command.payload[:3].hex())
    try:
        handle.connection.ctrl_transfer(
            REQUEST_TYPE_OUT,
            SET_REPORT,
            SET_REPORT_VALUE,
            REPORT_INDEX,
            command.payload,
            TRANSFER_TIMEOUT_MS,
        )
    except (usb.core.USBError, NotImplementedError) as exc:
        raise TransferError(
            f"operation failed: couldn't set {command.field}: {exc}",
            field=command.field,
        ) from exc


def read_configuration(handle: SessionHandle) -> ConfigurationSnapshot:
    try:
        data = handle.connection.ctrl_transfer(
            REQUEST_TYPE_IN,
            GET_REPORT,
            GET_REPORT_VALUE,
            REPORT_INDEX,
            STATUS_REPORT_LENGTH,
            TRANSFER_TIMEOUT_MS,
        )
    except (usb.core.USBError, NotImplementedError) as exc:
        raise TransferError(
            f"operation failed: couldn't read configuration: {exc}", field="status"
        ) from exc

    try:
        report = StatusReport(bytes(data))
    except ValueError as exc:
        raise TransferError(f"operation failed: {exc}", field="status") from exc
    return decode_status(report)


def _plan(delta: ConfigurationDelta) -> list[Command]:
    try:
        return plan_writes(delta)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _send_all(handle: SessionHandle, commands: list[Command]) -> None:
    for command in commands:
        _send_command(handle, command)


def apply_changes(handle: SessionHandle, delta: ConfigurationDelta) -> None:
    """Write every requested field in device order, stopping at the first failure."""
    _send_all(handle, _plan(delta))


def persist_to_rom(handle: SessionHandle) -> None:
    _send_command(handle, Command("save", encode_save()))


class SenseiService:
    def __init__(
        self,
        *,
        backend: UsbBackend | None = None,
        profile_id: str = DEFAULT_PROFILE_ID,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        profile = self.profiles.get(profile_id)
        if profile is None:
            available = ", ".join(sorted(self.profiles))
            raise ProfileLoadError(f"Unknown profile '{profile_id}'. Available: {available}")
        self.profile = profile
        self.backend = backend or PyUsbBackend()

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def list_devices(self) -> list[DeviceIdentity]:
        """Return the accepted identities currently attached, one per device."""
        attached: list[DeviceIdentity] = []
        for device in enumerate_devices(self.backend):
            for identity in self.profile.identities:
                if matches_identity(device, identity):
                    attached.append(identity)
                    break
        return attached

    def open(self) -> SessionHandle:
        return discover_and_open(
            self.backend,
            self.profile.identities,
            interface=self.profile.interface,
        )

    def show(self) -> ConfigurationSnapshot:
        return with_session(self.open(), read_configuration)

    def apply(self, delta: ConfigurationDelta) -> ConfigurationSnapshot | None:
        """Run one invocation's worth of work against the device.

        A request to show the configuration only reads; any writes in the same
        request are ignored.
        """
        if delta.show:
            return self.show()
        commands = _plan(delta)
        with_session(self.open(), lambda handle: _send_all(handle, commands))
        return None

    def save(self) -> None:
        with_session(self.open(), persist_to_rom)
