"""Sensei Raw wire protocol: command buffers, status report layout, CPI rule.

Reverse-engineered from usbmon captures. Every write is a 32 byte buffer sent
with HID SET_REPORT; the configuration is read back as a 256 byte feature
report with HID GET_REPORT. Wire codes for every enumeration start at 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from senseictl.core.model import (
    CPI_STEP,
    ConfigurationDelta,
    ConfigurationSnapshot,
    CpiSetting,
    Intensity,
    Mode,
    PollingRate,
    Pulsation,
)

LOGGER = logging.getLogger(__name__)

COMMAND_LENGTH = 32
STATUS_REPORT_LENGTH = 256

# HID class requests, interface recipient
REQUEST_TYPE_OUT = 0x21
REQUEST_TYPE_IN = 0xA1
SET_REPORT = 0x09
GET_REPORT = 0x01
SET_REPORT_VALUE = 0x0200
GET_REPORT_VALUE = 0x0300
REPORT_INDEX = 0x0000
TRANSFER_TIMEOUT_MS = 0  # wait indefinitely

CPI_MIN_STEP = 0x01
CPI_MAX_STEP = 0x3F

OP_MODE = 0x02
OP_CPI = 0x03
OP_POLLING = 0x04
OP_INTENSITY = 0x05
OP_PULSATION = 0x07
OP_SAVE = 0x09

CPI_LED_OFF = 1
CPI_LED_ON = 2

OFFSET_INTENSITY = 102
OFFSET_PULSATION = 103
OFFSET_CPI_OFF = 107
OFFSET_CPI_ON = 108
OFFSET_POLLING = 128

MODE_CODES: dict[Mode, int] = {
    Mode.LEGACY: 1,
    Mode.NORMAL: 2,
}

INTENSITY_CODES: dict[Intensity, int] = {
    Intensity.OFF: 1,
    Intensity.LOW: 2,
    Intensity.MEDIUM: 3,
    Intensity.HIGH: 4,
}

PULSATION_CODES: dict[Pulsation, int] = {
    Pulsation.STEADY: 1,
    Pulsation.SLOW: 2,
    Pulsation.MEDIUM: 3,
    Pulsation.FAST: 4,
}

POLLING_CODES: dict[PollingRate, int] = {
    PollingRate.HZ_1000: 1,
    PollingRate.HZ_500: 2,
    PollingRate.HZ_250: 3,
    PollingRate.HZ_125: 4,
}

_INTENSITY_BY_CODE = {code: value for value, code in INTENSITY_CODES.items()}
_PULSATION_BY_CODE = {code: value for value, code in PULSATION_CODES.items()}
_POLLING_BY_CODE = {code: value for value, code in POLLING_CODES.items()}


@dataclass(frozen=True)
class Command:
    """One encoded write, tagged with the field it configures."""

    field: str
    payload: bytes


def _command(opcode: int, selector: int, value: int) -> bytes:
    payload = bytearray(COMMAND_LENGTH)
    payload[0] = opcode
    payload[1] = selector
    payload[2] = value
    return bytes(payload)


def encode_mode(mode: Mode) -> bytes:
    return _command(OP_MODE, 0x00, MODE_CODES[mode])


def encode_intensity(intensity: Intensity) -> bytes:
    return _command(OP_INTENSITY, 0x01, INTENSITY_CODES[intensity])


def encode_pulsation(pulsation: Pulsation) -> bytes:
    return _command(OP_PULSATION, 0x01, PULSATION_CODES[pulsation])


def encode_polling(polling: PollingRate) -> bytes:
    return _command(OP_POLLING, 0x00, POLLING_CODES[polling])


def encode_cpi(step: int, *, led_on: bool) -> bytes:
    if not CPI_MIN_STEP <= step <= CPI_MAX_STEP:
        raise ValueError(f"CPI step {step} outside {CPI_MIN_STEP}-{CPI_MAX_STEP}")
    return _command(OP_CPI, CPI_LED_ON if led_on else CPI_LED_OFF, step)


def encode_save() -> bytes:
    return _command(OP_SAVE, 0x00, 0x00)


def quantize_cpi(cpi: int) -> CpiSetting:
    """Convert a real CPI value into a device step, clamping to the valid range.

    Clamping is advisory: the returned setting carries a notice instead of
    raising, so callers can tell the user what was actually written.
    """
    step = cpi // CPI_STEP
    if step < CPI_MIN_STEP:
        notice = f"CPI too low, using {CPI_MIN_STEP * CPI_STEP}"
        LOGGER.debug("Clamping CPI %d: %s", cpi, notice)
        return CpiSetting(step=CPI_MIN_STEP, notice=notice)
    if step > CPI_MAX_STEP:
        notice = f"CPI too high, using {CPI_MAX_STEP * CPI_STEP}"
        LOGGER.debug("Clamping CPI %d: %s", cpi, notice)
        return CpiSetting(step=CPI_MAX_STEP, notice=notice)
    return CpiSetting(step=step)


def plan_writes(delta: ConfigurationDelta) -> list[Command]:
    """Return the writes requested by ``delta`` in device order.

    CPI writes must follow the backlight writes, so the order is fixed
    regardless of how the delta was built.
    """
    commands: list[Command] = []
    if delta.mode is not None:
        commands.append(Command("mode", encode_mode(delta.mode)))
    if delta.polling is not None:
        commands.append(Command("polling", encode_polling(delta.polling)))
    if delta.intensity is not None:
        commands.append(Command("intensity", encode_intensity(delta.intensity)))
    if delta.pulsation is not None:
        commands.append(Command("pulsation", encode_pulsation(delta.pulsation)))
    if delta.cpi_off is not None:
        commands.append(Command("cpi_off", encode_cpi(delta.cpi_off, led_on=False)))
    if delta.cpi_on is not None:
        commands.append(Command("cpi_on", encode_cpi(delta.cpi_on, led_on=True)))
    if delta.save:
        commands.append(Command("save", encode_save()))
    return commands


class StatusReport:
    """Read-only view over the 256 byte feature report."""

    def __init__(self, data: bytes) -> None:
        if len(data) < STATUS_REPORT_LENGTH:
            raise ValueError(
                f"Expected {STATUS_REPORT_LENGTH} bytes of status report but got {len(data)}"
            )
        self._data = bytes(data)

    @property
    def intensity(self) -> int:
        return self._data[OFFSET_INTENSITY]

    @property
    def pulsation(self) -> int:
        return self._data[OFFSET_PULSATION]

    @property
    def cpi_off(self) -> int:
        return self._data[OFFSET_CPI_OFF]

    @property
    def cpi_on(self) -> int:
        return self._data[OFFSET_CPI_ON]

    @property
    def polling(self) -> int:
        return self._data[OFFSET_POLLING]


def decode_status(report: StatusReport) -> ConfigurationSnapshot:
    return ConfigurationSnapshot(
        intensity=_INTENSITY_BY_CODE.get(report.intensity),
        pulsation=_PULSATION_BY_CODE.get(report.pulsation),
        cpi_off=report.cpi_off,
        cpi_on=report.cpi_on,
        polling=_POLLING_BY_CODE.get(report.polling),
        raw_intensity=report.intensity,
        raw_pulsation=report.pulsation,
        raw_polling=report.polling,
    )
