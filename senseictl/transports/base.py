"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class UsbDevice(Protocol):
    """An enumerated device whose identity can be read without opening it."""

    idVendor: int
    idProduct: int


class UsbConnection(Protocol):
    """An open device handle.

    Methods raise ``usb.core.USBError`` on failure. ``is_kernel_driver_active``
    raises ``NotImplementedError`` when the platform cannot answer.
    """

    def is_kernel_driver_active(self, interface: int) -> bool: ...

    def detach_kernel_driver(self, interface: int) -> None: ...

    def attach_kernel_driver(self, interface: int) -> None: ...

    def claim_interface(self, interface: int) -> None: ...

    def release_interface(self, interface: int) -> None: ...

    def ctrl_transfer(
        self,
        bmRequestType: int,
        bRequest: int,
        wValue: int,
        wIndex: int,
        data_or_wLength: bytes | int,
        timeout: int,
    ) -> int | bytes:
        """Run a control transfer; returns bytes written (OUT) or data read (IN)."""

    def close(self) -> None: ...


class UsbBackend(Protocol):
    def devices(self) -> Iterable[UsbDevice]:
        """Enumerate every attached device."""

    def open(self, device: UsbDevice) -> UsbConnection:
        """Open ``device`` and return a connection to it."""
