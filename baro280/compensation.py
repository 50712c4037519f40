"""Parsing of raw register blocks and the BMP280 compensation formulas.

The integer formulas reproduce fixed-width arithmetic: intermediate
results wrap like 32- or 64-bit machine integers and divisions truncate
towards zero.
"""

from __future__ import annotations

import struct
from collections.abc import Sequence

from .defs import (
    CALIB_DATA_SIZE,
    E_32BIT_COMP_PRESS,
    E_64BIT_COMP_PRESS,
    E_DOUBLE_COMP_PRESS,
    ST_ADC_P_MAX,
    ST_ADC_P_MIN,
    ST_ADC_T_MAX,
    ST_ADC_T_MIN,
    CalibParams,
    CompensationError,
    Config,
    InvalidLengthError,
    UncompData,
    UncompRangeError,
)

_CALIB_LAYOUT = struct.Struct("<HhhHhhhhhhhh")
_UNCOMP_DATA_SIZE = 6


def _i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _i64(value: int) -> int:
    value &= 0xFFFFFFFFFFFFFFFF
    return value - (1 << 64) if value & (1 << 63) else value


def _tdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating towards zero."""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def parse_calib(data: Sequence[int] | bytes) -> CalibParams:
    """Decode the 24-byte calibration block starting at register 0x88."""
    raw = bytes(data)
    if len(raw) != CALIB_DATA_SIZE:
        raise InvalidLengthError(
            f"calibration block must be {CALIB_DATA_SIZE} bytes, got {len(raw)}"
        )
    (t1, t2, t3, p1, p2, p3, p4, p5, p6, p7, p8, p9) = _CALIB_LAYOUT.unpack(raw)
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


def parse_uncomp_data(data: Sequence[int] | bytes) -> UncompData:
    """Decode the six measurement bytes starting at register 0xF7."""
    raw = bytes(data)
    if len(raw) != _UNCOMP_DATA_SIZE:
        raise InvalidLengthError(
            f"measurement block must be {_UNCOMP_DATA_SIZE} bytes, got {len(raw)}"
        )
    press = (raw[0] << 12) | (raw[1] << 4) | (raw[2] >> 4)
    temp = (raw[3] << 12) | (raw[4] << 4) | (raw[5] >> 4)
    return UncompData(uncomp_temp=temp, uncomp_press=press)


def check_boundaries(uncomp_temp: int, uncomp_pres: int) -> None:
    """Raise UncompRangeError if a raw value lies outside the valid ADC range."""
    temp_bad = uncomp_temp <= ST_ADC_T_MIN or uncomp_temp >= ST_ADC_T_MAX
    pres_bad = uncomp_pres <= ST_ADC_P_MIN or uncomp_pres >= ST_ADC_P_MAX
    if temp_bad or pres_bad:
        raise UncompRangeError(temperature=temp_bad, pressure=pres_bad)


def comp_temp_32bit(calib: CalibParams, uncomp_temp: int) -> tuple[int, int]:
    """Return (temperature in 0.01 degC, t_fine) using 32-bit integer math."""
    ut = _i32(uncomp_temp)
    t1 = calib.dig_t1
    var1 = _tdiv(_i32(_i32(_tdiv(ut, 8) - (t1 << 1)) * calib.dig_t2), 2048)
    diff = _i32(_tdiv(ut, 16) - t1)
    var2 = _tdiv(_i32(diff * diff), 4096)
    var2 = _tdiv(_i32(var2 * calib.dig_t3), 16384)
    t_fine = _i32(var1 + var2)
    temperature = _tdiv(_i32(t_fine * 5 + 128), 256)
    return temperature, t_fine


def comp_pres_32bit(calib: CalibParams, t_fine: int, uncomp_pres: int) -> int:
    """Return the pressure in Pa using 32-bit integer math."""
    var1 = _i32(_tdiv(_i32(t_fine), 2) - 64000)
    quarter_sq = _i32(_tdiv(var1, 4) * _tdiv(var1, 4))
    var2 = _i32(_tdiv(quarter_sq, 2048) * calib.dig_p6)
    var2 = _i32(var2 + _i32(_i32(var1 * calib.dig_p5) * 2))
    var2 = _i32(_tdiv(var2, 4) + _i32(calib.dig_p4 * 65536))
    var1 = _tdiv(
        _i32(
            _tdiv(_i32(calib.dig_p3 * _tdiv(quarter_sq, 8192)), 8)
            + _tdiv(_i32(calib.dig_p2 * var1), 2)
        ),
        262144,
    )
    var1 = _tdiv(_i32(_i32(32768 + var1) * calib.dig_p1), 32768)

    offset = _i32(_u32(1048576 - uncomp_pres))
    comp = _u32(_i32(_i32(offset - _tdiv(var2, 4096)) * 3125))

    if var1 == 0:
        raise CompensationError(
            "division by zero in 32-bit pressure compensation", E_32BIT_COMP_PRESS
        )

    divisor = _u32(var1)
    if comp < 0x80000000:
        comp = _u32(comp << 1) // divisor
    else:
        comp = _u32((comp // divisor) * 2)

    eighth = comp // 8
    var1 = _tdiv(_i32(calib.dig_p9 * _i32(_u32(eighth * eighth) // 8192)), 4096)
    var2 = _tdiv(_i32(_i32(comp // 4) * calib.dig_p8), 8192)
    return _u32(_i32(_i32(comp) + _tdiv(_i32(var1 + var2 + calib.dig_p7), 16)))


def comp_pres_64bit(calib: CalibParams, t_fine: int, uncomp_pres: int) -> int:
    """Return the pressure in Pa as Q24.8 fixed point using 64-bit integer math."""
    var1 = _i64(t_fine - 128000)
    var2 = _i64(_i64(var1 * var1) * calib.dig_p6)
    var2 = _i64(var2 + _i64(_i64(var1 * calib.dig_p5) * 131072))
    var2 = _i64(var2 + _i64(calib.dig_p4 * 34359738368))
    var1 = _i64(
        _tdiv(_i64(_i64(var1 * var1) * calib.dig_p3), 256)
        + _i64(_i64(var1 * calib.dig_p2) * 4096)
    )
    var1 = _tdiv(_i64(_i64(0x800000000000 + var1) * calib.dig_p1), 8589934592)

    if var1 == 0:
        raise CompensationError(
            "division by zero in 64-bit pressure compensation", E_64BIT_COMP_PRESS
        )

    p = _u32(1048576 - uncomp_pres)
    p = _tdiv(_i64(_i64(_i64(p * 2147483648) - var2) * 3125), var1)
    var1 = _tdiv(
        _i64(_i64(calib.dig_p9 * _tdiv(p, 8192)) * _tdiv(p, 8192)), 33554432
    )
    var2 = _tdiv(_i64(calib.dig_p8 * p), 524288)
    p = _i64(_tdiv(_i64(p + var1 + var2), 256) + calib.dig_p7 * 16)
    return _u32(p)


def comp_temp_double(calib: CalibParams, uncomp_temp: int) -> tuple[float, int]:
    """Return (temperature in degC, t_fine) using floating point math."""
    ut = float(uncomp_temp)
    t1 = float(calib.dig_t1)
    var1 = (ut / 16384.0 - t1 / 1024.0) * float(calib.dig_t2)
    diff = ut / 131072.0 - t1 / 8192.0
    var2 = (diff * diff) * float(calib.dig_t3)
    t_fine = _i32(int(var1 + var2))
    return (var1 + var2) / 5120.0, t_fine


def comp_pres_double(calib: CalibParams, t_fine: int, uncomp_pres: int) -> float:
    """Return the pressure in Pa using floating point math."""
    var1 = float(t_fine) / 2.0 - 64000.0
    var2 = var1 * var1 * float(calib.dig_p6) / 32768.0
    var2 = var2 + var1 * float(calib.dig_p5) * 2.0
    var2 = var2 / 4.0 + float(calib.dig_p4) * 65536.0
    var1 = (
        float(calib.dig_p3) * var1 * var1 / 524288.0 + float(calib.dig_p2) * var1
    ) / 524288.0
    var1 = (1.0 + var1 / 32768.0) * float(calib.dig_p1)

    if var1 == 0:
        raise CompensationError(
            "division by zero in floating point pressure compensation",
            E_DOUBLE_COMP_PRESS,
        )

    pressure = 1048576.0 - float(uncomp_pres)
    pressure = (pressure - var2 / 4096.0) * 6250.0 / var1
    var1 = float(calib.dig_p9) * pressure * pressure / 2147483648.0
    var2 = pressure * float(calib.dig_p8) / 32768.0
    return pressure + (var1 + var2 + float(calib.dig_p7)) / 16.0


def compute_meas_time(config: Config) -> int:
    """Return the typical measurement time in milliseconds for ``config``."""
    startup = 1000
    period_per_osrs = 2000
    t_dur = period_per_osrs * ((1 << int(config.os_temp)) >> 1)
    p_dur = period_per_osrs * ((1 << int(config.os_pres)) >> 1)
    p_startup = 500 if config.os_pres else 0
    period = (startup + t_dur + p_startup + p_dur + 500) // 1000
    return period & 0xFF