import io
import struct

import pytest

from baro280 import compensation
from baro280.defs import (
    CTRL_MEAS_ADDR,
    DIG_P1_LSB_ADDR,
    DIG_T1_LSB_ADDR,
    PRES_MSB_ADDR,
    CalibParams,
    CommunicationError,
)
from baro280.monitor import (
    Reading,
    comp_press,
    comp_temp,
    configure,
    read_calibration,
    read_measurement,
    run,
)

CALIB = (27504, 26435, -1000, 36477, -10685, 3024, 2855, 140, -7, 15500, -14600, 6000)


def _calib():
    names = ["dig_t1", "dig_t2", "dig_t3"] + [f"dig_p{i}" for i in range(1, 10)]
    return CalibParams(**dict(zip(names, CALIB)))


def _encode20(value):
    return [value >> 12, (value >> 4) & 0xFF, (value & 0x0F) << 4]


class FakeBus:
    def __init__(self):
        self.regs = bytearray(256)
        self.regs[0x88:0x88 + 24] = struct.pack("<HhhHhhhhhhhh", *CALIB)
        self.regs[0xF7:0xF7 + 6] = bytes(_encode20(415148) + _encode20(519888))
        self.log = []

    def transfer(self, out, read_length):
        out = bytes(out)
        self.log.append((out, read_length))
        if read_length:
            start = out[0]
            return bytes(self.regs[start:start + read_length])
        self.regs[out[0] | 0x80] = out[1]
        return b""


def test_comp_temp_datasheet_example():
    assert comp_temp(_calib(), 519888) == (2508, 128422)


def test_comp_press_close_to_floating_point():
    calib = _calib()
    _, t_fine = comp_temp(calib, 519888)
    pressure = comp_press(calib, t_fine, 415148)
    reference = compensation.comp_pres_double(calib, t_fine, 415148)
    assert abs(pressure - reference) < 5


def test_comp_press_zero_divisor_gives_zero():
    calib = _calib()
    calib.dig_p1 = 0
    assert comp_press(calib, 128422, 415148) == 0


def test_read_calibration_decodes_both_blocks():
    bus = FakeBus()
    calib = read_calibration(bus)
    assert [out for out, _ in bus.log] == [
        bytes([DIG_T1_LSB_ADDR | 0x80]),
        bytes([DIG_P1_LSB_ADDR | 0x80]),
    ]
    assert [length for _, length in bus.log] == [6, 18]
    assert calib == _calib()


def test_read_calibration_short_reply():
    class ShortBus:
        def transfer(self, out, read_length):
            return b"\x00"

    with pytest.raises(CommunicationError):
        read_calibration(ShortBus())


def test_configure_writes_ctrl_meas():
    bus = FakeBus()
    configure(bus)
    assert bus.log == [(bytes([CTRL_MEAS_ADDR & 0x7F, 0x27]), 0)]
    assert bus.regs[CTRL_MEAS_ADDR] == 0x27


def test_read_measurement_uses_compensation():
    bus = FakeBus()
    calib = _calib()
    reading = read_measurement(bus, calib)
    temperature, t_fine = comp_temp(calib, 519888)
    assert bus.log == [(bytes([PRES_MSB_ADDR | 0x80]), 6)]
    assert reading == Reading(temperature, comp_press(calib, t_fine, 415148))


def test_reading_units():
    reading = Reading(temperature=2508, pressure=100653)
    assert reading.celsius == pytest.approx(25.08)
    assert reading.millibar == pytest.approx(1006.53)


def test_run_prints_requested_readings():
    bus = FakeBus()
    out = io.StringIO()
    run(bus, count=2, interval=0, out=out)
    lines = out.getvalue().splitlines(keepends=True)
    assert len(lines) == 4
    assert lines[0] == "Temp = 25.08 C \n"
    assert lines[0] == lines[2]
    assert lines[1].startswith("Pressure = ") and lines[1].endswith(" mbar\n")
    reading = read_measurement(bus, _calib())
    assert lines[1] == f"Pressure = {reading.millibar:.2f} mbar\n"
    assert bus.regs[CTRL_MEAS_ADDR] == 0x27