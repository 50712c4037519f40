"""Polling monitor that reads a BMP280 over a raw SPI bus and prints readings.

The bus object provides ``transfer(out, read_length)``: one chip-select
framed transaction that sends ``out`` and then returns ``read_length``
bytes read from the device.
"""

from __future__ import annotations

import struct
import sys
import time
from dataclasses import dataclass
from typing import Protocol, TextIO

from .compensation import parse_uncomp_data
from .defs import (
    CTRL_MEAS_ADDR,
    DIG_P1_LSB_ADDR,
    DIG_T1_LSB_ADDR,
    OS_PRES_MASK,
    OS_PRES_POS,
    OS_TEMP_MASK,
    OS_TEMP_POS,
    POWER_MODE_MASK,
    POWER_MODE_POS,
    PRES_MSB_ADDR,
    CalibParams,
    CommunicationError,
    Oversampling,
    PowerMode,
    set_bits,
)

_READ_FLAG = 0x80
_WRITE_MASK = 0x7F
_TEMP_CALIB = struct.Struct("<Hhh")
_PRES_CALIB = struct.Struct("<Hhhhhhhhh")

# Temperature and pressure oversampling x1, normal mode.
CTRL_MEAS_VALUE = set_bits(
    set_bits(
        set_bits(0, OS_TEMP_MASK, OS_TEMP_POS, Oversampling.X1),
        OS_PRES_MASK,
        OS_PRES_POS,
        Oversampling.X1,
    ),
    POWER_MODE_MASK,
    POWER_MODE_POS,
    PowerMode.NORMAL,
)


class SpiBus(Protocol):
    def transfer(self, out: bytes, read_length: int) -> bytes: ...


def _i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


@dataclass(frozen=True)
class Reading:
    """One measurement: temperature in 0.01 degC and pressure in Pa."""

    temperature: int
    pressure: int

    @property
    def celsius(self) -> float:
        return self.temperature / 100.0

    @property
    def millibar(self) -> float:
        return self.pressure / 100.0


def comp_temp(calib: CalibParams, adc_t: int) -> tuple[int, int]:
    """Return (temperature in 0.01 degC, t_fine) using shift-based 32-bit math."""
    t1 = calib.dig_t1
    var1 = _i32(_i32((adc_t >> 3) - (t1 << 1)) * calib.dig_t2) >> 11
    diff = _i32((adc_t >> 4) - t1)
    var2 = _i32((_i32(diff * diff) >> 12) * calib.dig_t3) >> 14
    t_fine = _i32(var1 + var2)
    return _i32(t_fine * 5 + 128) >> 8, t_fine


def comp_press(calib: CalibParams, t_fine: int, adc_p: int) -> int:
    """Return the pressure in Pa; 0 when the formula would divide by zero."""
    var1 = _i32((t_fine >> 1) - 64000)
    quarter_sq = _i32((var1 >> 2) * (var1 >> 2))
    var2 = _i32((quarter_sq >> 11) * calib.dig_p6)
    var2 = _i32(var2 + _i32(_i32(var1 * calib.dig_p5) << 1))
    var2 = _i32((var2 >> 2) + _i32(calib.dig_p4 << 16))
    var1 = (
        _i32(
            (_i32(calib.dig_p3 * (quarter_sq >> 13)) >> 3)
            + (_i32(calib.dig_p2 * var1) >> 1)
        )
        >> 18
    )
    var1 = _i32(_i32(32768 + var1) * calib.dig_p1) >> 15
    if var1 == 0:
        return 0
    divisor = _u32(var1)
    p = _u32((_u32(1048576 - adc_p) - (var2 >> 12)) * 3125)
    if p < 0x80000000:
        p = _u32(p << 1) // divisor
    else:
        p = _u32((p // divisor) * 2)
    var1 = _i32(calib.dig_p9 * _i32(_u32((p >> 3) * (p >> 3)) >> 13)) >> 12
    var2 = _i32(_i32(p >> 2) * calib.dig_p8) >> 13
    return _u32(_i32(p) + (_i32(var1 + var2 + calib.dig_p7) >> 4))


def _read(bus: SpiBus, reg: int, length: int) -> bytes:
    data = bytes(bus.transfer(bytes([reg | _READ_FLAG]), length))
    if len(data) != length:
        raise CommunicationError(
            f"expected {length} bytes from register {reg:#04x}, got {len(data)}"
        )
    return data


def read_calibration(bus: SpiBus) -> CalibParams:
    """Read the factory temperature and pressure trimming values."""
    t1, t2, t3 = _TEMP_CALIB.unpack(_read(bus, DIG_T1_LSB_ADDR, _TEMP_CALIB.size))
    p1, p2, p3, p4, p5, p6, p7, p8, p9 = _PRES_CALIB.unpack(
        _read(bus, DIG_P1_LSB_ADDR, _PRES_CALIB.size)
    )
    return CalibParams(
        dig_t1=t1,
        dig_t2=t2,
        dig_t3=t3,
        dig_p1=p1,
        dig_p2=p2,
        dig_p3=p3,
        dig_p4=p4,
        dig_p5=p5,
        dig_p6=p6,
        dig_p7=p7,
        dig_p8=p8,
        dig_p9=p9,
    )


def configure(bus: SpiBus) -> None:
    """Set x1 oversampling for both quantities and start normal mode."""
    bus.transfer(bytes([CTRL_MEAS_ADDR & _WRITE_MASK, CTRL_MEAS_VALUE]), 0)


def read_measurement(bus: SpiBus, calib: CalibParams) -> Reading:
    """Read the raw registers and return the compensated reading."""
    raw = parse_uncomp_data(_read(bus, PRES_MSB_ADDR, 6))
    temperature, t_fine = comp_temp(calib, raw.uncomp_temp)
    pressure = comp_press(calib, t_fine, raw.uncomp_press)
    return Reading(temperature=temperature, pressure=pressure)


def run(
    bus: SpiBus,
    count: int | None = None,
    interval: float = 1.0,
    out: TextIO | None = None,
) -> None:
    """Calibrate, configure and print ``count`` readings (forever if None)."""
    out = out if out is not None else sys.stdout
    calib = read_calibration(bus)
    configure(bus)
    taken = 0
    while count is None or taken < count:
        reading = read_measurement(bus, calib)
        out.write(f"Temp = {reading.celsius:.2f} C \n")
        out.write(f"Pressure = {reading.millibar:.2f} mbar\n")
        out.flush()
        taken += 1
        time.sleep(interval)