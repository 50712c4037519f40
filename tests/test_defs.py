import pytest

from baro280 import defs
from baro280.defs import (
    Bmp280Error,
    CalibParams,
    CommunicationError,
    CompensationError,
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
    UncompRangeError,
    get_bits,
    set_bits,
)


def test_power_mode_values_match_register_encoding():
    mask, pos = defs.POWER_MODE_MASK, defs.POWER_MODE_POS
    assert set_bits(0x00, mask, pos, PowerMode.SLEEP) == 0x00
    assert set_bits(0x00, mask, pos, PowerMode.FORCED) == 0x01
    assert set_bits(0x00, mask, pos, PowerMode.NORMAL) == 0x03
    # 0x27 is the ctrl_meas value written by the monitor: normal mode.
    assert PowerMode(get_bits(0x27, mask, pos)) is PowerMode.NORMAL
    assert PowerMode(get_bits(0x25, mask, pos)) is PowerMode.FORCED


def test_interface_values():
    assert Interface(0) is Interface.SPI
    assert Interface(1) is Interface.I2C


def test_oversampling_and_filter_enumerations_are_contiguous():
    assert [o.value for o in Oversampling] == list(range(len(Oversampling)))
    assert [f.value for f in FilterCoeff] == list(range(len(FilterCoeff)))
    assert [s.value for s in StandbyTime] == list(range(len(StandbyTime)))
    reg = set_bits(0x00, defs.OS_TEMP_MASK, defs.OS_TEMP_POS, 0x05)
    assert Oversampling(get_bits(reg, defs.OS_TEMP_MASK, defs.OS_TEMP_POS)) is Oversampling.X16
    reg = set_bits(0x00, defs.STANDBY_DURN_MASK, defs.STANDBY_DURN_POS, 0x07)
    assert StandbyTime(
        get_bits(reg, defs.STANDBY_DURN_MASK, defs.STANDBY_DURN_POS)
    ) is StandbyTime.MS_4000


def test_get_bits_extracts_fields():
    assert get_bits(0xFF, defs.POWER_MODE_MASK, defs.POWER_MODE_POS) == PowerMode.NORMAL
    assert get_bits(0x00, defs.OS_TEMP_MASK, defs.OS_TEMP_POS) == 0


@pytest.mark.parametrize(
    "mask,pos,field",
    [
        (defs.OS_TEMP_MASK, defs.OS_TEMP_POS, Oversampling),
        (defs.OS_PRES_MASK, defs.OS_PRES_POS, Oversampling),
        (defs.STANDBY_DURN_MASK, defs.STANDBY_DURN_POS, StandbyTime),
        (defs.FILTER_MASK, defs.FILTER_POS, FilterCoeff),
    ],
)
@pytest.mark.parametrize("reg", [0x00, 0x5A, 0xFF])
def test_set_then_get_round_trip(mask, pos, field, reg):
    for value in field:
        updated = set_bits(reg, mask, pos, value)
        assert get_bits(updated, mask, pos) == value
        # Bits outside the field are preserved.
        assert updated & ~mask & 0xFF == reg & ~mask & 0xFF


def test_set_bits_truncates_oversized_value_to_field():
    updated = set_bits(0x00, defs.POWER_MODE_MASK, defs.POWER_MODE_POS, 0xFF)
    assert updated == defs.POWER_MODE_MASK


def test_set_bits_result_fits_in_a_byte():
    for reg in range(256):
        result = set_bits(reg, defs.OS_TEMP_MASK, defs.OS_TEMP_POS, 7)
        assert 0 <= result <= 0xFF


def test_error_codes_of_subclasses():
    assert DeviceNotFoundError().code == defs.E_DEV_NOT_FOUND
    assert InvalidLengthError().code == defs.E_INVALID_LEN
    assert CommunicationError().code == defs.E_COMM_FAIL
    assert UncompDataError().code == defs.E_UNCOMP_DATA_CALC


@pytest.mark.parametrize(
    "cls",
    [DeviceNotFoundError, InvalidLengthError, CommunicationError,
     UncompDataError, CompensationError],
)
def test_all_errors_derive_from_base(cls):
    with pytest.raises(Bmp280Error) as excinfo:
        raise cls("failure")
    assert type(excinfo.value) is cls
    assert str(excinfo.value) == "failure"


def test_compensation_error_accepts_explicit_code():
    err = CompensationError("division by zero", defs.E_64BIT_COMP_PRESS)
    assert err.code == defs.E_64BIT_COMP_PRESS
    assert str(err) == "division by zero"


@pytest.mark.parametrize(
    "temperature,pressure,code",
    [
        (True, True, defs.E_UNCOMP_TEMP_AND_PRESS_RANGE),
        (True, False, defs.E_UNCOMP_TEMP_RANGE),
        (False, True, defs.E_UNCOMP_PRES_RANGE),
    ],
)
def test_uncomp_range_error_codes(temperature, pressure, code):
    err = UncompRangeError(temperature, pressure)
    assert err.code == code
    assert err.temperature is temperature
    assert err.pressure is pressure


def test_uncomp_range_error_requires_a_failure():
    with pytest.raises(ValueError):
        UncompRangeError(False, False)


def test_config_defaults_match_reset_state():
    config = Config()
    assert config.os_temp == Oversampling.NONE
    assert config.os_pres == Oversampling.NONE
    assert config.odr == StandbyTime.MS_0_5
    assert config.filter == FilterCoeff.OFF
    assert config.spi3w_en == defs.SPI3_WIRE_DISABLE


def test_calib_params_default_to_zero_and_are_mutable():
    calib = CalibParams()
    assert calib.t_fine == 0
    calib.t_fine = 128000
    assert calib.t_fine == 128000


def test_status_and_uncomp_data_are_immutable():
    status = Status(measuring=True, im_update=False)
    data = UncompData(uncomp_temp=519888, uncomp_press=415148)
    assert status.measuring is True
    assert data.uncomp_press == 415148
    with pytest.raises(AttributeError):
        data.uncomp_temp = 0