"""Register map, enumerations, data records and errors for the BMP280 sensor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

# Chip identifiers for sample and mass production parts.
CHIP_ID1 = 0x56
CHIP_ID2 = 0x57
CHIP_ID3 = 0x58
CHIP_IDS = frozenset({CHIP_ID1, CHIP_ID2, CHIP_ID3})

# I2C bus addresses.
I2C_ADDR_PRIM = 0x76
I2C_ADDR_SEC = 0x77

# Calibration parameter registers.
DIG_T1_LSB_ADDR = 0x88
DIG_T1_MSB_ADDR = 0x89
DIG_T2_LSB_ADDR = 0x8A
DIG_T2_MSB_ADDR = 0x8B
DIG_T3_LSB_ADDR = 0x8C
DIG_T3_MSB_ADDR = 0x8D
DIG_P1_LSB_ADDR = 0x8E
DIG_P1_MSB_ADDR = 0x8F
DIG_P2_LSB_ADDR = 0x90
DIG_P2_MSB_ADDR = 0x91
DIG_P3_LSB_ADDR = 0x92
DIG_P3_MSB_ADDR = 0x93
DIG_P4_LSB_ADDR = 0x94
DIG_P4_MSB_ADDR = 0x95
DIG_P5_LSB_ADDR = 0x96
DIG_P5_MSB_ADDR = 0x97
DIG_P6_LSB_ADDR = 0x98
DIG_P6_MSB_ADDR = 0x99
DIG_P7_LSB_ADDR = 0x9A
DIG_P7_MSB_ADDR = 0x9B
DIG_P8_LSB_ADDR = 0x9C
DIG_P8_MSB_ADDR = 0x9D
DIG_P9_LSB_ADDR = 0x9E
DIG_P9_MSB_ADDR = 0x9F

# Other registers.
CHIP_ID_ADDR = 0xD0
SOFT_RESET_ADDR = 0xE0
STATUS_ADDR = 0xF3
CTRL_MEAS_ADDR = 0xF4
CONFIG_ADDR = 0xF5
PRES_MSB_ADDR = 0xF7
PRES_LSB_ADDR = 0xF8
PRES_XLSB_ADDR = 0xF9
TEMP_MSB_ADDR = 0xFA
TEMP_LSB_ADDR = 0xFB
TEMP_XLSB_ADDR = 0xFC

SOFT_RESET_CMD = 0xB6

# Spi 3-wire, measurement status and image update flags.
SPI3_WIRE_ENABLE = 1
SPI3_WIRE_DISABLE = 0
MEAS_DONE = 0
MEAS_ONGOING = 1
IM_UPDATE_DONE = 0
IM_UPDATE_ONGOING = 1

# Bit positions and masks.
STATUS_IM_UPDATE_POS = 0
STATUS_IM_UPDATE_MASK = 0x01
STATUS_MEAS_POS = 3
STATUS_MEAS_MASK = 0x08
OS_TEMP_POS = 5
OS_TEMP_MASK = 0xE0
OS_PRES_POS = 2
OS_PRES_MASK = 0x1C
POWER_MODE_POS = 0
POWER_MODE_MASK = 0x03
STANDBY_DURN_POS = 5
STANDBY_DURN_MASK = 0xE0
FILTER_POS = 2
FILTER_MASK = 0x1C
SPI3_ENABLE_POS = 0
SPI3_ENABLE_MASK = 0x01

CALIB_DATA_SIZE = 24

# Limits of the trimming values.
ST_DIG_T1_RANGE = (19000, 35000)
ST_DIG_T2_RANGE = (22000, 30000)
ST_DIG_T3_RANGE = (-3000, -1000)
ST_DIG_P1_RANGE = (30000, 42000)
ST_DIG_P2_RANGE = (-12970, -8000)
ST_DIG_P3_RANGE = (-5000, 8000)
ST_DIG_P4_RANGE = (-10000, 18000)
ST_DIG_P5_RANGE = (-500, 1100)
ST_DIG_P6_RANGE = (-1000, 1000)
ST_DIG_P7_RANGE = (-32768, 32767)
ST_DIG_P8_RANGE = (-30000, 10000)
ST_DIG_P9_RANGE = (-10000, 30000)

# Register holding custom trimming values and the API revision field.
ST_TRIMCUSTOM_REG = 0x87
ST_TRIMCUSTOM_REG_APIREV_POS = 1
ST_TRIMCUSTOM_REG_APIREV_MASK = 0x06
ST_TRIMCUSTOM_REG_APIREV_LEN = 2
ST_MAX_APIREVISION = 0x00

# Valid range of the raw ADC outputs (bounds themselves are invalid).
ST_ADC_T_MIN = 0x00000
ST_ADC_T_MAX = 0xFFFF0
ST_ADC_P_MIN = 0x00000
ST_ADC_P_MAX = 0xFFFF0

# Numeric error codes reported by the sensor API.
E_NULL_PTR = -1
E_DEV_NOT_FOUND = -2
E_INVALID_LEN = -3
E_COMM_FAIL = -4
E_INVALID_MODE = -5
E_BOND_WIRE = -6
E_IMPLAUS_TEMP = -7
E_IMPLAUS_PRESS = -8
E_CAL_PARAM_RANGE = -9
E_UNCOMP_TEMP_RANGE = -10
E_UNCOMP_PRES_RANGE = -11
E_UNCOMP_TEMP_AND_PRESS_RANGE = -12
E_UNCOMP_DATA_CALC = -13
E_32BIT_COMP_TEMP = -14
E_32BIT_COMP_PRESS = -15
E_64BIT_COMP_PRESS = -16
E_DOUBLE_COMP_TEMP = -17
E_DOUBLE_COMP_PRESS = -18


class Interface(IntEnum):
    """Bus the sensor is attached to."""

    SPI = 0
    I2C = 1


class PowerMode(IntEnum):
    """Sensor power modes."""

    SLEEP = 0x00
    FORCED = 0x01
    NORMAL = 0x03


class StandbyTime(IntEnum):
    """Standby duration between measurements in normal mode."""

    MS_0_5 = 0x00
    MS_62_5 = 0x01
    MS_125 = 0x02
    MS_250 = 0x03
    MS_500 = 0x04
    MS_1000 = 0x05
    MS_2000 = 0x06
    MS_4000 = 0x07


class Oversampling(IntEnum):
    """Oversampling settings for temperature and pressure."""

    NONE = 0x00
    X1 = 0x01
    X2 = 0x02
    X4 = 0x03
    X8 = 0x04
    X16 = 0x05


class FilterCoeff(IntEnum):
    """IIR filter coefficients."""

    OFF = 0x00
    COEFF_2 = 0x01
    COEFF_4 = 0x02
    COEFF_8 = 0x03
    COEFF_16 = 0x04


class Bmp280Error(Exception):
    """Base class of all sensor errors; carries the sensor API error code."""

    code: int = E_NULL_PTR

    def __init__(self, message: str = "", code: int | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message or f"sensor error {self.code}")


class DeviceNotFoundError(Bmp280Error):
    """No sensor with a valid chip id answered."""

    code = E_DEV_NOT_FOUND


class InvalidLengthError(Bmp280Error):
    """A register transfer was requested with an invalid length."""

    code = E_INVALID_LEN


class CommunicationError(Bmp280Error):
    """The bus read or write callback reported a failure."""

    code = E_COMM_FAIL


class UncompDataError(Bmp280Error):
    """The raw measurement registers could not be read."""

    code = E_UNCOMP_DATA_CALC


class UncompRangeError(Bmp280Error):
    """Raw temperature and/or pressure lie outside the valid ADC range."""

    def __init__(self, temperature: bool, pressure: bool) -> None:
        if not (temperature or pressure):
            raise ValueError("at least one quantity must be out of range")
        self.temperature = temperature
        self.pressure = pressure
        if temperature and pressure:
            code, what = E_UNCOMP_TEMP_AND_PRESS_RANGE, "temperature and pressure"
        elif temperature:
            code, what = E_UNCOMP_TEMP_RANGE, "temperature"
        else:
            code, what = E_UNCOMP_PRES_RANGE, "pressure"
        super().__init__(f"uncompensated {what} out of range", code)


class CompensationError(Bmp280Error):
    """A compensation formula could not be evaluated."""

    code = E_32BIT_COMP_PRESS


def get_bits(value: int, mask: int, pos: int) -> int:
    """Extract the field selected by ``mask`` and shift it down by ``pos``."""
    return (value & mask) >> pos


def set_bits(reg: int, mask: int, pos: int, val: int) -> int:
    """Return ``reg`` with the field under ``mask`` replaced by ``val``."""
    return ((reg & ~mask) | ((val << pos) & mask)) & 0xFF


@dataclass
class CalibParams:
    """Factory trimming parameters and the shared fine temperature."""

    dig_t1: int = 0
    dig_t2: int = 0
    dig_t3: int = 0
    dig_p1: int = 0
    dig_p2: int = 0
    dig_p3: int = 0
    dig_p4: int = 0
    dig_p5: int = 0
    dig_p6: int = 0
    dig_p7: int = 0
    dig_p8: int = 0
    dig_p9: int = 0
    t_fine: int = 0


@dataclass
class Config:
    """Oversampling, standby time, filter and SPI 3-wire settings."""

    os_temp: Oversampling = Oversampling.NONE
    os_pres: Oversampling = Oversampling.NONE
    odr: StandbyTime = StandbyTime.MS_0_5
    filter: FilterCoeff = FilterCoeff.OFF
    spi3w_en: int = SPI3_WIRE_DISABLE


@dataclass(frozen=True)
class Status:
    """Contents of the status register."""

    measuring: bool
    im_update: bool


@dataclass(frozen=True)
class UncompData:
    """Raw 20-bit temperature and pressure readings."""

    uncomp_temp: int
    uncomp_press: int