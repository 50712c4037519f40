"""High-level driver for a BMP280 attached through user supplied bus callbacks."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from enum import IntEnum
from typing import TypeVar

from . import compensation as _comp
from .defs import (
    CALIB_DATA_SIZE,
    CHIP_ID_ADDR,
    CHIP_IDS,
    CONFIG_ADDR,
    CTRL_MEAS_ADDR,
    DIG_T1_LSB_ADDR,
    FILTER_MASK,
    FILTER_POS,
    OS_PRES_MASK,
    OS_PRES_POS,
    OS_TEMP_MASK,
    OS_TEMP_POS,
    POWER_MODE_MASK,
    POWER_MODE_POS,
    PRES_MSB_ADDR,
    SOFT_RESET_ADDR,
    SOFT_RESET_CMD,
    SPI3_ENABLE_MASK,
    SPI3_ENABLE_POS,
    STANDBY_DURN_MASK,
    STANDBY_DURN_POS,
    STATUS_ADDR,
    STATUS_IM_UPDATE_MASK,
    STATUS_IM_UPDATE_POS,
    STATUS_MEAS_MASK,
    STATUS_MEAS_POS,
    Bmp280Error,
    CommunicationError,
    Config,
    DeviceNotFoundError,
    FilterCoeff,
    Interface,
    InvalidLengthError,
    Oversampling,
    PowerMode,
    StandbyTime,
    Status,
    UncompData,
    UncompDataError,
    get_bits,
    set_bits,
)
from .defs import CalibParams

ReadFn = Callable[[int, int, int], bytes]
WriteFn = Callable[[int, int, bytes], None]
DelayFn = Callable[[int], None]

_E = TypeVar("_E", bound=IntEnum)

_MAX_BURST = 4
_INIT_TRIES = 5
_SPI_READ_FLAG = 0x80
_SPI_WRITE_MASK = 0x7F


def _as_enum(cls: type[_E], value: int) -> _E | int:
    """Return the enum member for ``value``, or the plain value if it has none."""
    try:
        return cls(value)
    except ValueError:
        return value


class Bmp280:
    """A BMP280 sensor reached through ``read``, ``write`` and ``delay_ms`` callbacks.

    ``read(dev_id, reg_addr, length)`` returns the bytes read,
    ``write(dev_id, reg_addr, data)`` sends ``data`` and ``delay_ms(ms)``
    waits. Exceptions raised by the callbacks become CommunicationError.
    """

    def __init__(
        self,
        read: ReadFn,
        write: WriteFn,
        delay_ms: DelayFn,
        dev_id: int = 0,
        intf: Interface = Interface.SPI,
    ) -> None:
        for name, func in (("read", read), ("write", write), ("delay_ms", delay_ms)):
            if not callable(func):
                raise Bmp280Error(f"{name} callback must be callable")
        self.read = read
        self.write = write
        self.delay_ms = delay_ms
        self.dev_id = dev_id
        self.intf = Interface(intf)
        self.chip_id = 0
        self.calib = CalibParams()
        self.conf = Config()

    def read_registers(self, reg_addr: int, length: int) -> bytes:
        """Read ``length`` bytes starting at ``reg_addr``."""
        if self.intf is Interface.SPI:
            reg_addr |= _SPI_READ_FLAG
        try:
            data = bytes(self.read(self.dev_id, reg_addr, length))
        except Exception as exc:
            raise CommunicationError(f"reading register {reg_addr:#04x} failed") from exc
        if len(data) != length:
            raise CommunicationError(
                f"expected {length} bytes from register {reg_addr:#04x}, got {len(data)}"
            )
        return data

    def write_registers(self, reg_addrs: Sequence[int], data: Sequence[int]) -> None:
        """Write ``data[i]`` to ``reg_addrs[i]``; at most four registers per call."""
        if len(reg_addrs) != len(data):
            raise InvalidLengthError("register and data sequences differ in length")
        addrs = list(reg_addrs)[:_MAX_BURST]
        values = list(data)[:_MAX_BURST]
        if not addrs:
            raise InvalidLengthError("nothing to write")
        if self.intf is Interface.SPI:
            addrs = [addr & _SPI_WRITE_MASK for addr in addrs]
        buffer = [values[0]]
        for addr, value in zip(addrs[1:], values[1:]):
            buffer.extend((addr, value))
        try:
            self.write(self.dev_id, addrs[0], bytes(buffer))
        except Exception as exc:
            raise CommunicationError(f"writing register {addrs[0]:#04x} failed") from exc

    def soft_reset(self) -> None:
        """Reset the sensor and wait for its 2 ms start-up time."""
        try:
            self.write_registers([SOFT_RESET_ADDR], [SOFT_RESET_CMD])
        finally:
            self.delay_ms(2)

    def initialize(self) -> None:
        """Detect the chip, reset it and load the calibration parameters."""
        for _ in range(_INIT_TRIES):
            try:
                self.chip_id = self.read_registers(CHIP_ID_ADDR, 1)[0]
            except Bmp280Error:
                pass
            else:
                if self.chip_id in CHIP_IDS:
                    self.soft_reset()
                    self._read_calibration()
                    break
            self.delay_ms(10)
        else:
            raise DeviceNotFoundError("no sensor with a valid chip id found")
        self.conf = Config()

    def _read_calibration(self) -> None:
        raw = self.read_registers(DIG_T1_LSB_ADDR, CALIB_DATA_SIZE)
        calib = _comp.parse_calib(raw)
        calib.t_fine = self.calib.t_fine
        self.calib = calib

    def get_config(self) -> Config:
        """Read the oversampling, standby, filter and SPI 3-wire settings."""
        ctrl, config = self.read_registers(CTRL_MEAS_ADDR, 2)
        conf = Config(
            os_temp=_as_enum(Oversampling, get_bits(ctrl, OS_TEMP_MASK, OS_TEMP_POS)),
            os_pres=_as_enum(Oversampling, get_bits(ctrl, OS_PRES_MASK, OS_PRES_POS)),
            odr=_as_enum(
                StandbyTime, get_bits(config, STANDBY_DURN_MASK, STANDBY_DURN_POS)
            ),
            filter=_as_enum(FilterCoeff, get_bits(config, FILTER_MASK, FILTER_POS)),
            spi3w_en=get_bits(config, SPI3_ENABLE_MASK, SPI3_ENABLE_POS),
        )
        self.conf = replace(conf)
        return conf

    def set_config(self, config: Config) -> None:
        """Write ``config``; the sensor is left in sleep mode."""
        self._conf_sensor(PowerMode.SLEEP, config)

    def get_status(self) -> Status:
        """Read the measuring and image-update flags."""
        value = self.read_registers(STATUS_ADDR, 1)[0]
        return Status(
            measuring=bool(get_bits(value, STATUS_MEAS_MASK, STATUS_MEAS_POS)),
            im_update=bool(
                get_bits(value, STATUS_IM_UPDATE_MASK, STATUS_IM_UPDATE_POS)
            ),
        )

    def get_power_mode(self) -> PowerMode | int:
        """Read the current power mode."""
        value = self.read_registers(CTRL_MEAS_ADDR, 1)[0]
        return _as_enum(PowerMode, get_bits(value, POWER_MODE_MASK, POWER_MODE_POS))

    def set_power_mode(self, mode: PowerMode | int) -> None:
        """Re-apply the current configuration and switch to ``mode``."""
        self._conf_sensor(mode, self.conf)

    def _conf_sensor(self, mode: PowerMode | int, config: Config) -> None:
        ctrl, conf_reg = self.read_registers(CTRL_MEAS_ADDR, 2)
        # Resetting puts the device to sleep as quickly as possible.
        self.soft_reset()
        ctrl = set_bits(ctrl, OS_TEMP_MASK, OS_TEMP_POS, int(config.os_temp))
        ctrl = set_bits(ctrl, OS_PRES_MASK, OS_PRES_POS, int(config.os_pres))
        conf_reg = set_bits(
            conf_reg, STANDBY_DURN_MASK, STANDBY_DURN_POS, int(config.odr)
        )
        conf_reg = set_bits(conf_reg, FILTER_MASK, FILTER_POS, int(config.filter))
        conf_reg = set_bits(
            conf_reg, SPI3_ENABLE_MASK, SPI3_ENABLE_POS, int(config.spi3w_en)
        )
        self.write_registers([CTRL_MEAS_ADDR, CONFIG_ADDR], [ctrl, conf_reg])
        self.conf = replace(config)
        if int(mode) != PowerMode.SLEEP:
            ctrl = set_bits(ctrl, POWER_MODE_MASK, POWER_MODE_POS, int(mode))
            self.write_registers([CTRL_MEAS_ADDR], [ctrl])

    def get_uncomp_data(self) -> UncompData:
        """Read and range-check the raw temperature and pressure."""
        try:
            raw = self.read_registers(PRES_MSB_ADDR, 6)
        except CommunicationError as exc:
            raise UncompDataError("reading the measurement registers failed") from exc
        data = _comp.parse_uncomp_data(raw)
        _comp.check_boundaries(data.uncomp_temp, data.uncomp_press)
        return data

    def comp_temp_32bit(self, uncomp_temp: int) -> int:
        """Temperature in 0.01 degC; updates the shared fine temperature."""
        temperature, self.calib.t_fine = _comp.comp_temp_32bit(self.calib, uncomp_temp)
        return temperature

    def comp_pres_32bit(self, uncomp_pres: int) -> int:
        """Pressure in Pa from 32-bit integer math."""
        return _comp.comp_pres_32bit(self.calib, self.calib.t_fine, uncomp_pres)

    def comp_pres_64bit(self, uncomp_pres: int) -> int:
        """Pressure in Pa as Q24.8 fixed point from 64-bit integer math."""
        return _comp.comp_pres_64bit(self.calib, self.calib.t_fine, uncomp_pres)

    def comp_temp_double(self, uncomp_temp: int) -> float:
        """Temperature in degC; updates the shared fine temperature."""
        temperature, self.calib.t_fine = _comp.comp_temp_double(self.calib, uncomp_temp)
        return temperature

    def comp_pres_double(self, uncomp_pres: int) -> float:
        """Pressure in Pa from floating point math."""
        return _comp.comp_pres_double(self.calib, self.calib.t_fine, uncomp_pres)

    def compute_meas_time(self) -> int:
        """Typical measurement time in milliseconds for the active configuration."""
        return _comp.compute_meas_time(self.conf)