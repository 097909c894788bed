"""Domain-specific errors for senseictl."""

from __future__ import annotations


class SenseictlError(Exception):
    """Base error for senseictl."""


class ProfileValidationError(SenseictlError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(SenseictlError):
    """Raised when loading profile sources fails."""


class ValidationError(SenseictlError):
    """Raised when user input falls outside the accepted option grammar."""


class DiscoveryError(SenseictlError):
    """Base error for locating and opening the mouse."""


class DeviceEnumerationError(DiscoveryError):
    """Raised when the USB device list cannot be obtained."""


class NoDeviceFoundError(DiscoveryError):
    """Raised when no attached device matches an accepted identity."""

    def __init__(self, message: str = "no suitable device found") -> None:
        super().__init__(message)


class DeviceOpenError(DiscoveryError):
    """Raised when the matched device cannot be opened."""


class DriverLifecycleError(SenseictlError):
    """Raised when querying, detaching or reattaching the kernel driver fails."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


class InterfaceClaimError(SenseictlError):
    """Raised when the control interface cannot be claimed."""


class InterfaceReleaseError(SenseictlError):
    """Raised when the control interface cannot be released."""


class DeviceCloseError(SenseictlError):
    """Raised when the device handle cannot be closed."""


class TransferError(SenseictlError):
    """Raised when a control transfer fails."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
