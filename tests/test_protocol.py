from __future__ import annotations

import pytest

from senseictl.core.model import ConfigurationDelta, Intensity, Mode, PollingRate, Pulsation
from senseictl.core.protocol import (
    COMMAND_LENGTH,
    CPI_MAX_STEP,
    CPI_MIN_STEP,
    StatusReport,
    decode_status,
    encode_cpi,
    encode_intensity,
    encode_mode,
    encode_polling,
    encode_pulsation,
    encode_save,
    plan_writes,
    quantize_cpi,
)


def _report(**fields: int) -> StatusReport:
    offsets = {"intensity": 102, "pulsation": 103, "cpi_off": 107, "cpi_on": 108, "polling": 128}
    data = bytearray(256)
    for name, value in fields.items():
        data[offsets[name]] = value
    return StatusReport(bytes(data))


def test_command_buffers_match_device_layout() -> None:
    assert encode_mode(Mode.NORMAL)[:3] == bytes([0x02, 0x00, 0x02])
    assert encode_mode(Mode.LEGACY)[:3] == bytes([0x02, 0x00, 0x01])
    assert encode_intensity(Intensity.HIGH)[:3] == bytes([0x05, 0x01, 0x04])
    assert encode_pulsation(Pulsation.STEADY)[:3] == bytes([0x07, 0x01, 0x01])
    assert encode_polling(PollingRate.HZ_125)[:3] == bytes([0x04, 0x00, 0x04])
    assert encode_cpi(10, led_on=False)[:3] == bytes([0x03, 0x01, 0x0A])
    assert encode_cpi(10, led_on=True)[:3] == bytes([0x03, 0x02, 0x0A])
    assert encode_save()[:3] == bytes([0x09, 0x00, 0x00])


def test_command_buffers_are_zero_padded() -> None:
    for payload in (encode_mode(Mode.NORMAL), encode_cpi(63, led_on=True), encode_save()):
        assert len(payload) == COMMAND_LENGTH
        assert payload[3:] == bytes(COMMAND_LENGTH - 3)


def test_wire_codes_start_at_one_without_gaps() -> None:
    codes = [encode_polling(rate)[2] for rate in PollingRate]
    assert codes == [1, 2, 3, 4]
    codes = [encode_intensity(level)[2] for level in Intensity]
    assert codes == [1, 2, 3, 4]


@pytest.mark.parametrize("step", [0, 64])
def test_encode_cpi_rejects_out_of_range_steps(step: int) -> None:
    with pytest.raises(ValueError):
        encode_cpi(step, led_on=False)


def test_cpi_steps_survive_report_decoding() -> None:
    for step in range(CPI_MIN_STEP, CPI_MAX_STEP + 1):
        encoded = encode_cpi(step, led_on=True)[2]
        assert decode_status(_report(cpi_on=encoded)).cpi_on == step


def test_quantize_cpi_matches_truncate_and_clamp_rule() -> None:
    for cpi in range(0, 7000, 7):
        expected = min(max(cpi // 90, 1), 63)
        assert quantize_cpi(cpi).step == expected


def test_quantize_cpi_clamps_low_values_with_notice() -> None:
    setting = quantize_cpi(45)
    assert setting.step == 1
    assert setting.notice == "CPI too low, using 90"


def test_quantize_cpi_clamps_high_values_with_notice() -> None:
    setting = quantize_cpi(6000)
    assert setting.step == 63
    assert setting.notice == "CPI too high, using 5670"


def test_quantize_cpi_in_range_has_no_notice() -> None:
    setting = quantize_cpi(900)
    assert setting.step == 10
    assert setting.notice is None
    assert setting.cpi == 900


def test_plan_writes_uses_fixed_device_order() -> None:
    delta = ConfigurationDelta(cpi_on=20, polling=PollingRate.HZ_500, mode=Mode.NORMAL)
    assert [command.field for command in plan_writes(delta)] == ["mode", "polling", "cpi_on"]


def test_plan_writes_full_sequence_ends_with_save() -> None:
    delta = ConfigurationDelta(
        save=True,
        cpi_on=2,
        cpi_off=1,
        pulsation=Pulsation.FAST,
        intensity=Intensity.LOW,
        polling=PollingRate.HZ_250,
        mode=Mode.LEGACY,
    )
    fields = [command.field for command in plan_writes(delta)]
    assert fields == ["mode", "polling", "intensity", "pulsation", "cpi_off", "cpi_on", "save"]


def test_plan_writes_empty_delta() -> None:
    assert plan_writes(ConfigurationDelta()) == []


def test_decode_status_reads_fixed_offsets() -> None:
    snapshot = decode_status(_report(intensity=3, pulsation=2, cpi_off=5, cpi_on=10, polling=1))
    assert snapshot.intensity is Intensity.MEDIUM
    assert snapshot.pulsation is Pulsation.SLOW
    assert snapshot.cpi_off_real == 450
    assert snapshot.cpi_on_real == 900
    assert snapshot.polling is PollingRate.HZ_1000
    assert snapshot.mode is None


def test_decode_status_unknown_codes_are_not_errors() -> None:
    snapshot = decode_status(_report(intensity=0, pulsation=9, polling=77))
    assert snapshot.intensity is None
    assert snapshot.pulsation is None
    assert snapshot.polling is None
    assert snapshot.raw_pulsation == 9
    assert snapshot.raw_polling == 77


def test_status_report_rejects_short_data() -> None:
    with pytest.raises(ValueError):
        StatusReport(bytes(100))
