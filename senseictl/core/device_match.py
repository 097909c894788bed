"""Device-to-identity matching logic."""

from __future__ import annotations

from collections.abc import Sequence

from senseictl.core.model import DeviceIdentity
from senseictl.transports.base import UsbDevice


def matches_identity(device: UsbDevice, identity: DeviceIdentity) -> bool:
    return device.idVendor == identity.vendor_id and device.idProduct == identity.product_id


def first_match(
    devices: Sequence[UsbDevice],
    identities: Sequence[DeviceIdentity],
) -> tuple[UsbDevice, DeviceIdentity] | None:
    """Pick the first device for the highest-priority identity present.

    Identities are tried in order; within one identity the first device in
    enumeration order wins.
    """
    for identity in identities:
        for device in devices:
            if matches_identity(device, identity):
                return device, identity
    return None
