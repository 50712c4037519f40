# baro280

Register protocol, configuration and compensation arithmetic for the BMP280
barometric pressure and temperature sensor, in plain Python with no
dependencies outside the standard library.

The package does not open a bus by itself. You hand it the functions that
move bytes over SPI or I2C on your platform, and it handles the register
protocol: the SPI read/write address bit, burst writes, the soft reset,
chip-id detection, reading the factory calibration and turning raw ADC
counts into degrees Celsius and pascals.

## Modules

- `baro280.defs` – register addresses, bit masks and limits; the enums
  `Interface`, `PowerMode`, `StandbyTime`, `Oversampling` and
  `FilterCoeff`; the records `Config`, `Status`, `UncompData` and
  `CalibParams`; the helpers `get_bits(value, mask, pos)` and
  `set_bits(reg, mask, pos, val)`; and the exceptions, all derived from
  `Bmp280Error`, which carries a numeric `code`: `DeviceNotFoundError`,
  `InvalidLengthError`, `CommunicationError`, `UncompDataError`,
  `UncompRangeError` (with `temperature` and `pressure` flags saying which
  value was out of range) and `CompensationError`.
- `baro280.compensation` – pure functions with no I/O:
  `parse_calib` for the 24 calibration bytes from register 0x88,
  `parse_uncomp_data` for the six data bytes from register 0xF7,
  `check_boundaries`, the compensation formulas
  `comp_temp_32bit`, `comp_pres_32bit`, `comp_pres_64bit`,
  `comp_temp_double`, `comp_pres_double`, and `compute_meas_time`.
- `baro280.device` – the `Bmp280` class, which drives a sensor through
  callbacks you supply.
- `baro280.monitor` – a small polling logger over a raw SPI bus:
  `read_calibration`, `configure`, `read_measurement`, `comp_temp`,
  `comp_press`, the `Reading` record and `run`.

## The device class

`Bmp280(read, write, delay_ms, dev_id=0, intf=Interface.SPI)` takes:

- `read(dev_id, reg_addr, length)`, returning the bytes read;
- `write(dev_id, reg_addr, data)`, sending `data` (a `bytes` object);
- `delay_ms(ms)`, waiting the given number of milliseconds.

A callback that is not callable raises `Bmp280Error`. An exception raised
by `read` or `write`, or a read that returns the wrong number of bytes,
becomes `CommunicationError`. On SPI the register address gets bit 7 set
for reads and cleared for writes.

```python
from baro280.defs import Config, Interface, Oversampling, PowerMode
from baro280.device import Bmp280

sensor = Bmp280(my_read, my_write, my_delay, dev_id=0, intf=Interface.SPI)
sensor.initialize()
sensor.set_config(Config(os_temp=Oversampling.X1, os_pres=Oversampling.X4))
sensor.set_power_mode(PowerMode.NORMAL)

raw = sensor.get_uncomp_data()
celsius = sensor.comp_temp_double(raw.uncomp_temp)
pascal = sensor.comp_pres_double(raw.uncomp_press)
```

- `initialize()` reads the chip id up to five times, waiting 10 ms after
  each failed try, and raises `DeviceNotFoundError` if none is valid. On
  success it soft-resets the chip, loads the calibration and resets the
  stored configuration to its defaults.
- `read_registers(reg_addr, length)` and `write_registers(reg_addrs, data)`
  give direct register access. Writes pair each address with a value, take
  at most four registers per call (extra ones are dropped), and raise
  `InvalidLengthError` when the two sequences differ in length or are empty.
- `soft_reset()` writes the reset command and waits 2 ms.
- `set_config(config)` soft-resets the sensor and writes oversampling,
  standby time, IIR filter and the 3-wire SPI flag, leaving it in sleep
  mode. `get_config()` reads these settings back; a field whose register
  value has no enum member is returned as a plain integer.
- `set_power_mode(mode)` re-applies the current configuration and then
  writes the power mode. `get_power_mode()` and `get_status()` report the
  mode and the measuring and image-update flags.
- `get_uncomp_data()` returns an `UncompData`, raising `UncompDataError`
  when the read fails and `UncompRangeError` when a value is at or beyond
  the limits of the ADC range.
- `comp_temp_32bit` and `comp_temp_double` update the fine temperature that
  the pressure formulas use, so call one of them before `comp_pres_32bit`,
  `comp_pres_64bit` or `comp_pres_double`. A pressure formula that would
  divide by zero raises `CompensationError`.
- `compute_meas_time()` returns the typical conversion time in milliseconds
  for the active configuration.

Units: the 32-bit temperature is in hundredths of a degree Celsius, the
32-bit pressure in pascals, the 64-bit pressure in pascals as Q24.8 fixed
point (divide by 256), and the floating-point variants in degrees Celsius
and pascals. The integer formulas wrap and truncate like 32- or 64-bit
machine integers.

## Working without hardware

Everything in `baro280.compensation` is a pure function. Recorded
calibration bytes and raw samples can be turned into physical values on any
machine: parse them with `parse_calib` and `parse_uncomp_data`, then pass a
`CalibParams` and the fine temperature returned by a temperature function to
the pressure functions.

```python
from baro280 import compensation as comp

calib = comp.parse_calib(calibration_bytes)      # 24 bytes
raw = comp.parse_uncomp_data(data_bytes)         # 6 bytes
temp, t_fine = comp.comp_temp_32bit(calib, raw.uncomp_temp)
pressure = comp.comp_pres_32bit(calib, t_fine, raw.uncomp_press)
```

## The polling monitor

`baro280.monitor` expects a bus object with a method
`transfer(out, read_length)` that performs one chip-select framed
transaction: it sends `out` and returns `read_length` bytes.

- `read_calibration(bus)` reads the temperature and pressure trimming values.
- `configure(bus)` sets x1 oversampling for both quantities and normal mode.
- `read_measurement(bus, calib)` returns a `Reading` with `temperature`
  (0.01 °C) and `pressure` (Pa), plus `celsius` and `millibar` properties.
  Its `comp_press` returns 0 instead of raising when it would divide by zero.
- `run(bus, count=None, interval=1.0, out=None)` calibrates, configures and
  writes `Temp = … C` and `Pressure = … mbar` lines to `out` (standard
  output by default) every `interval` seconds, `count` times or forever.

## What the package does not do

It contains no SPI or I2C driver and no command-line program: to read a
real sensor you supply the bus callbacks or the `transfer` object yourself
and call the functions from your own code.

## Running the tests

Install the package with its `test` extra and run `pytest` from the project
directory.