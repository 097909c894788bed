"""Device discovery and the interface-acquisition lifecycle around transfers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

import usb.core

from senseictl.core.device_match import first_match
from senseictl.core.errors import (
    DeviceCloseError,
    DeviceEnumerationError,
    DeviceOpenError,
    DriverLifecycleError,
    InterfaceClaimError,
    InterfaceReleaseError,
    NoDeviceFoundError,
    SenseictlError,
)
from senseictl.core.model import DeviceIdentity
from senseictl.transports.base import UsbBackend, UsbConnection, UsbDevice

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SessionHandle:
    """An open device plus what must be undone when the session ends."""

    def __init__(
        self,
        connection: UsbConnection,
        identity: DeviceIdentity,
        interface: int = 0,
    ) -> None:
        self.connection = connection
        self.identity = identity
        self.interface = interface
        self.driver_detached = False
        self.claimed = False

    def __repr__(self) -> str:
        return f"SessionHandle({self.identity}, interface={self.interface})"


def enumerate_devices(backend: UsbBackend) -> list[UsbDevice]:
    try:
        return list(backend.devices())
    except (usb.core.USBError, usb.core.NoBackendError) as exc:
        raise DeviceEnumerationError(f"couldn't enumerate USB devices: {exc}") from exc


def discover_and_open(
    backend: UsbBackend,
    identities: Sequence[DeviceIdentity],
    *,
    interface: int = 0,
) -> SessionHandle:
    devices = enumerate_devices(backend)
    found = first_match(devices, identities)
    if found is None:
        accepted = ", ".join(str(identity) for identity in identities)
        raise NoDeviceFoundError(f"no suitable device found (accepted: {accepted})")

    device, identity = found
    LOGGER.debug("Found %s (%s)", identity, identity.name or "unnamed")
    # Only the first match is opened. An open failure never falls through to
    # another device or to the next identity.
    try:
        connection = backend.open(device)
    except (usb.core.USBError, NotImplementedError) as exc:
        raise DeviceOpenError(f"couldn't open device {identity}: {exc}") from exc
    return SessionHandle(connection, identity, interface)


def _detach_kernel_driver(handle: SessionHandle) -> None:
    try:
        active = handle.connection.is_kernel_driver_active(handle.interface)
    except NotImplementedError:
        LOGGER.debug("Kernel driver query unsupported, assuming no driver is bound")
        return
    except usb.core.USBError as exc:
        raise DriverLifecycleError(
            "query", f"couldn't detect kernel driver presence: {exc}"
        ) from exc

    if not active:
        return

    try:
        handle.connection.detach_kernel_driver(handle.interface)
    except (usb.core.USBError, NotImplementedError) as exc:
        raise DriverLifecycleError("detach", f"couldn't detach kernel driver: {exc}") from exc
    handle.driver_detached = True
    LOGGER.debug("Detached kernel driver from interface %d", handle.interface)


def _claim_interface(handle: SessionHandle) -> None:
    try:
        handle.connection.claim_interface(handle.interface)
    except (usb.core.USBError, NotImplementedError) as exc:
        raise InterfaceClaimError(f"couldn't claim interface: {exc}") from exc
    handle.claimed = True


def _release_interface(handle: SessionHandle) -> None:
    try:
        handle.connection.release_interface(handle.interface)
    except (usb.core.USBError, NotImplementedError) as exc:
        raise InterfaceReleaseError(f"couldn't release interface: {exc}") from exc
    finally:
        handle.claimed = False


def _reattach_kernel_driver(handle: SessionHandle) -> None:
    try:
        handle.connection.attach_kernel_driver(handle.interface)
    except (usb.core.USBError, NotImplementedError) as exc:
        raise DriverLifecycleError(
            "reattach", f"couldn't reattach kernel driver: {exc}"
        ) from exc
    finally:
        handle.driver_detached = False


def _close(handle: SessionHandle) -> None:
    try:
        handle.connection.close()
    except (usb.core.USBError, NotImplementedError) as exc:
        raise DeviceCloseError(f"couldn't close device: {exc}") from exc


def _teardown(handle: SessionHandle) -> SenseictlError | None:
    steps: list[Callable[[SessionHandle], None]] = []
    if handle.claimed:
        steps.append(_release_interface)
    if handle.driver_detached:
        steps.append(_reattach_kernel_driver)
    steps.append(_close)

    first_error: SenseictlError | None = None
    for step in steps:
        try:
            step(handle)
        except SenseictlError as exc:
            LOGGER.debug("Teardown step %s failed: %s", step.__name__, exc)
            if first_error is None:
                first_error = exc
    return first_error


def with_session(handle: SessionHandle, body: Callable[[SessionHandle], T]) -> T:
    """Run ``body`` with the control interface claimed.

    Teardown always runs every step (release, reattach, close). The earliest
    failure of the whole session is the one raised.
    """
    try:
        _detach_kernel_driver(handle)
        _claim_interface(handle)
        result = body(handle)
    except BaseException:
        shadowed = _teardown(handle)
        if shadowed is not None:
            LOGGER.warning("Ignoring teardown failure after earlier error: %s", shadowed)
        raise

    error = _teardown(handle)
    if error is not None:
        raise error
    return result
