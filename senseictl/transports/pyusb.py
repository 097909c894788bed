"""USB transport implementation using pyusb (libusb backend)."""

from __future__ import annotations

import logging

import usb.core
import usb.util

LOGGER = logging.getLogger(__name__)


class PyUsbConnection:
    """Thin wrapper over a pyusb device.

    pyusb already raises ``NotImplementedError`` for operations libusb does
    not support on the current platform; callers handle it next to ``USBError``.
    """

    def __init__(self, device: usb.core.Device) -> None:
        self._device = device

    def is_kernel_driver_active(self, interface: int) -> bool:
        return bool(self._device.is_kernel_driver_active(interface))

    def detach_kernel_driver(self, interface: int) -> None:
        self._device.detach_kernel_driver(interface)

    def attach_kernel_driver(self, interface: int) -> None:
        self._device.attach_kernel_driver(interface)

    def claim_interface(self, interface: int) -> None:
        usb.util.claim_interface(self._device, interface)

    def release_interface(self, interface: int) -> None:
        usb.util.release_interface(self._device, interface)

    def ctrl_transfer(
        self,
        bmRequestType: int,
        bRequest: int,
        wValue: int,
        wIndex: int,
        data_or_wLength: bytes | int,
        timeout: int,
    ) -> int | bytes:
        result = self._device.ctrl_transfer(
            bmRequestType,
            bRequest,
            wValue,
            wIndex,
            data_or_wLength,
            timeout,
        )
        if isinstance(result, int):
            return result
        return bytes(result)

    def close(self) -> None:
        usb.util.dispose_resources(self._device)


class PyUsbBackend:
    def devices(self) -> list[usb.core.Device]:
        return list(usb.core.find(find_all=True))

    def open(self, device: usb.core.Device) -> PyUsbConnection:
        # pyusb opens handles lazily; reading the active configuration forces
        # the open so failures surface here rather than on the first transfer.
        device.get_active_configuration()
        LOGGER.debug("Opened device %04x:%04x", device.idVendor, device.idProduct)
        return PyUsbConnection(device)
