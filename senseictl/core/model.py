"""Core data models used across protocol, session, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CPI_STEP = 90


class Mode(Enum):
    LEGACY = "legacy"
    NORMAL = "normal"


class Intensity(Enum):
    OFF = "off"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Pulsation(Enum):
    STEADY = "steady"
    SLOW = "slow"
    MEDIUM = "medium"
    FAST = "fast"


class PollingRate(Enum):
    HZ_1000 = 1000
    HZ_500 = 500
    HZ_250 = 250
    HZ_125 = 125

    @property
    def label(self) -> str:
        return f"{self.value}Hz"


@dataclass(frozen=True)
class DeviceIdentity:
    vendor_id: int
    product_id: int
    name: str = ""

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    identities: tuple[DeviceIdentity, ...]
    interface: int = 0


@dataclass(frozen=True)
class CpiSetting:
    step: int
    notice: str | None = None

    @property
    def cpi(self) -> int:
        return self.step * CPI_STEP


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """Decoded device state.

    Enumerated fields are ``None`` when the device reported a code this tool
    does not know; the raw byte is kept alongside for diagnostics. The status
    report does not carry the operating mode, so ``mode`` stays ``None`` for
    decoded snapshots.
    """

    intensity: Intensity | None
    pulsation: Pulsation | None
    cpi_off: int
    cpi_on: int
    polling: PollingRate | None
    raw_intensity: int = 0
    raw_pulsation: int = 0
    raw_polling: int = 0
    mode: Mode | None = None

    @property
    def cpi_off_real(self) -> int:
        return self.cpi_off * CPI_STEP

    @property
    def cpi_on_real(self) -> int:
        return self.cpi_on * CPI_STEP


@dataclass(frozen=True)
class ConfigurationDelta:
    """Sparse set of fields to write plus the show/save flags.

    CPI fields hold device steps, already quantized.
    """

    mode: Mode | None = None
    polling: PollingRate | None = None
    intensity: Intensity | None = None
    pulsation: Pulsation | None = None
    cpi_off: int | None = None
    cpi_on: int | None = None
    show: bool = False
    save: bool = False

    def has_writes(self) -> bool:
        return any(
            value is not None
            for value in (
                self.mode,
                self.polling,
                self.intensity,
                self.pulsation,
                self.cpi_off,
                self.cpi_on,
            )
        )
