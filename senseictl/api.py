"""Stable public API for building tooling on top of senseictl.

This module is the supported integration surface for third-party callers
(GUI front-ends, scripts). Avoid importing from private/internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from senseictl.core.errors import (
    DeviceCloseError,
    DeviceEnumerationError,
    DeviceOpenError,
    DiscoveryError,
    DriverLifecycleError,
    InterfaceClaimError,
    InterfaceReleaseError,
    NoDeviceFoundError,
    ProfileLoadError,
    ProfileValidationError,
    SenseictlError,
    TransferError,
    ValidationError,
)
from senseictl.core.model import (
    ConfigurationDelta,
    ConfigurationSnapshot,
    CpiSetting,
    DeviceIdentity,
    DeviceProfile,
    Intensity,
    Mode,
    PollingRate,
    Pulsation,
)
from senseictl.core.profile_loader import DEFAULT_PROFILE_ID
from senseictl.core.protocol import quantize_cpi
from senseictl.core.service import SenseiService
from senseictl.transports.base import UsbBackend

__all__ = [
    "SenseictlError",
    "DiscoveryError",
    "DeviceEnumerationError",
    "NoDeviceFoundError",
    "DeviceOpenError",
    "DriverLifecycleError",
    "InterfaceClaimError",
    "InterfaceReleaseError",
    "DeviceCloseError",
    "TransferError",
    "ValidationError",
    "ProfileLoadError",
    "ProfileValidationError",
    "ConfigurationDelta",
    "ConfigurationSnapshot",
    "CpiSetting",
    "DeviceIdentity",
    "DeviceProfile",
    "Intensity",
    "Mode",
    "PollingRate",
    "Pulsation",
    "quantize_cpi",
    "Client",
]


class Client:
    """Public client for reading and changing the mouse configuration.

    Every call is one complete session: discover, claim, transfer, release.
    Nothing is cached between calls.
    """

    def __init__(
        self,
        *,
        backend: UsbBackend | None = None,
        profile_id: str = DEFAULT_PROFILE_ID,
    ) -> None:
        self._service = SenseiService(backend=backend, profile_id=profile_id)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def profile(self) -> DeviceProfile:
        return self._service.profile

    def list_profiles(self) -> list[DeviceProfile]:
        return self._service.list_profiles()

    def list_devices(self) -> list[DeviceIdentity]:
        return self._service.list_devices()

    def read_configuration(self) -> ConfigurationSnapshot:
        return self._service.show()

    def apply(self, delta: ConfigurationDelta) -> ConfigurationSnapshot | None:
        return self._service.apply(delta)

    def save_to_rom(self) -> None:
        self._service.save()
