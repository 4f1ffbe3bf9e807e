"""
Unit tests for device drivers and sensors.
Uses temporary files in place of sysfs attributes.
"""

import random

import pytest

from autobacklight.domain.errors import BacklightReadError, BacklightWriteError, SensorReadError
from autobacklight.drivers import sysfs
from autobacklight.drivers.backlight_sim import SimulatedBacklight
from autobacklight.drivers.backlight_sysfs import SysfsBacklight, detect_backlight_dir
from autobacklight.sensors.iio_sensor import IioIlluminanceSensor
from autobacklight.sensors.rs485_lux_sensor import LuxRegisterSpec, RS485LuxSensor
from autobacklight.sensors.simulated_lux_sensor import PatternConfig, SimulatedLuxSensor


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def backlight_dir(tmp_path):
    """Fake /sys/class/backlight/intel_backlight."""
    device = tmp_path / "intel_backlight"
    device.mkdir()
    (device / "brightness").write_text("120\n")
    (device / "max_brightness").write_text("937\n")
    return device


class TestSysfs:
    """Test single-integer resource helpers."""

    def test_read_trims_whitespace(self, tmp_path):
        path = tmp_path / "value"
        path.write_text("  42 \n")
        assert sysfs.read_int(path) == 42

    def test_read_garbage(self, tmp_path):
        path = tmp_path / "value"
        path.write_text("bright\n")
        with pytest.raises(ValueError):
            sysfs.read_int(path)

    def test_write_adds_newline(self, tmp_path):
        path = tmp_path / "value"
        sysfs.write_int(path, 77)
        assert path.read_text() == "77\n"


class TestSysfsBacklight:
    """Test the sysfs backlight device."""

    def test_read_and_write(self, backlight_dir):
        """Test brightness round trip through the device files."""
        device = SysfsBacklight(str(backlight_dir))
        assert device.device_id == "intel_backlight"
        assert device.read_brightness() == 120
        assert device.read_max_brightness() == 937

        device.write_brightness(300)
        assert (backlight_dir / "brightness").read_text() == "300\n"

    def test_missing_device(self, tmp_path):
        """Test unreadable files raise BacklightReadError."""
        device = SysfsBacklight(str(tmp_path / "gone"))
        with pytest.raises(BacklightReadError):
            device.read_brightness()
        with pytest.raises(BacklightReadError):
            device.read_max_brightness()

    def test_write_failure(self, tmp_path):
        """Test an unwritable resource raises BacklightWriteError."""
        device = SysfsBacklight(str(tmp_path / "gone"))
        with pytest.raises(BacklightWriteError):
            device.write_brightness(10)

    def test_detect_first_device(self, tmp_path, backlight_dir):
        """Test autodetection picks a directory with both attributes."""
        (tmp_path / "acpi_video0").mkdir()  # no attributes
        assert detect_backlight_dir(tmp_path) == backlight_dir

        device = SysfsBacklight("", class_dir=tmp_path)
        assert device.read_max_brightness() == 937

    def test_detect_nothing(self, tmp_path):
        """Test autodetection failure is a read error."""
        with pytest.raises(BacklightReadError):
            SysfsBacklight("", class_dir=tmp_path)


class TestIioSensor:
    """Test the IIO illuminance sensor."""

    def test_read(self, tmp_path):
        path = tmp_path / "in_illuminance_raw"
        path.write_text("3000\n")
        assert IioIlluminanceSensor(str(path)).read_illuminance() == 3000

    def test_unparseable(self, tmp_path):
        path = tmp_path / "in_illuminance_raw"
        path.write_text("n/a\n")
        with pytest.raises(SensorReadError):
            IioIlluminanceSensor(str(path)).read_illuminance()

    def test_missing(self, tmp_path):
        with pytest.raises(SensorReadError):
            IioIlluminanceSensor(str(tmp_path / "missing")).read_illuminance()

    def test_negative(self, tmp_path):
        path = tmp_path / "in_illuminance_raw"
        path.write_text("-5\n")
        with pytest.raises(SensorReadError):
            IioIlluminanceSensor(str(path)).read_illuminance()


class TestSimulatedDevices:
    """Test the simulated sensor and backlight."""

    def test_manual_value(self):
        sensor = SimulatedLuxSensor(manual_value=500)
        assert sensor.read_illuminance() == 500
        sensor.set_manual(1200)
        assert sensor.read_illuminance() == 1200
        assert sensor.status()["mode"] == "manual"

    def test_disabled_sensor_fails(self):
        sensor = SimulatedLuxSensor()
        sensor.disable()
        with pytest.raises(SensorReadError):
            sensor.read_illuminance()
        sensor.enable()
        assert sensor.read_illuminance() >= 0

    @pytest.mark.parametrize("kind,t,expected", [
        ("sine", 0, 1000),
        ("sine", 150, 1800),
        ("sine", 450, 200),
        ("step", 0, 1800),
        ("step", 59, 1800),
        ("step", 60, 200),
        ("step", 125, 1800),
        ("ramp", 0, 0),
        ("ramp", 150, 500),
        ("ramp", 660, 200),
    ])
    def test_pattern_curve(self, kind, t, expected):
        """Test each pattern at known points of its period, without noise."""
        clock = FakeClock(1000.0)
        sensor = SimulatedLuxSensor(clock=clock)
        sensor.set_pattern(PatternConfig(type=kind, noise=0))

        clock.now += t
        assert sensor.read_illuminance() == expected

    def test_random_pattern_is_seeded(self):
        cfg = PatternConfig(type="random", noise=0)
        a = SimulatedLuxSensor(clock=FakeClock(), rng=random.Random(7))
        b = SimulatedLuxSensor(clock=FakeClock(), rng=random.Random(7))
        a.set_pattern(cfg)
        b.set_pattern(cfg)

        readings = [a.read_illuminance() for _ in range(20)]
        assert readings == [b.read_illuminance() for _ in range(20)]
        assert all(200 <= r <= 1800 for r in readings)
        assert len(set(readings)) > 1

    def test_noise_stays_in_band(self):
        sensor = SimulatedLuxSensor(clock=FakeClock(), rng=random.Random(1))
        sensor.set_pattern(PatternConfig(type="step", noise=20))
        for _ in range(20):
            assert 1780 <= sensor.read_illuminance() <= 1820

    def test_pattern_clamped_at_zero(self):
        """Test a curve dipping below zero reads as darkness, not a negative value."""
        clock = FakeClock()
        sensor = SimulatedLuxSensor(clock=clock)
        sensor.set_pattern(PatternConfig(type="sine", baseline=10, amplitude=50, noise=0))
        clock.now += 450
        assert sensor.read_illuminance() == 0

    def test_pattern_restarts_when_set(self):
        """Test selecting a pattern starts it at the beginning of its period."""
        clock = FakeClock()
        sensor = SimulatedLuxSensor(clock=clock)
        sensor.set_pattern(PatternConfig(type="ramp", noise=0))
        clock.now += 300
        assert sensor.read_illuminance() == 1000

        sensor.set_pattern(PatternConfig(type="ramp", noise=0))
        assert sensor.read_illuminance() == 0
        assert sensor.status()["reads"] == 2

    def test_rejects_bad_input(self):
        sensor = SimulatedLuxSensor()
        with pytest.raises(ValueError):
            sensor.set_manual(-1)
        with pytest.raises(ValueError):
            sensor.set_pattern(PatternConfig(type="square"))
        assert sensor.status()["mode"] == "manual"

    def test_simulated_backlight_clamps(self):
        backlight = SimulatedBacklight(max_brightness=100, level=50)
        backlight.write_brightness(150)
        assert backlight.read_brightness() == 100
        backlight.write_brightness(-3)
        assert backlight.read_brightness() == 0
        assert list(backlight.writes) == [100, 0]


class FakeModbusDriver:
    def __init__(self, regs=None, error=None):
        self.regs = regs or []
        self.error = error
        self.calls = []

    def read_registers(self, functioncode, address, count):
        self.calls.append((functioncode, address, count))
        if self.error:
            raise self.error
        return self.regs

    def close(self):
        pass


class TestRS485Sensor:
    """Test register decoding for the Modbus lux sensor."""

    def test_combines_registers(self):
        """Test hi word first decoding and scaling."""
        driver = FakeModbusDriver(regs=[1, 2])
        spec = LuxRegisterSpec(functioncode=4, address=2, count=2, scale=0.001)
        sensor = RS485LuxSensor(driver, spec)

        assert sensor.read_illuminance() == 66  # (1 << 16 | 2) / 1000
        assert driver.calls == [(4, 2, 2)]

    def test_driver_error(self):
        """Test bus failures surface as SensorReadError."""
        sensor = RS485LuxSensor(FakeModbusDriver(error=ConnectionError("no port")))
        with pytest.raises(SensorReadError):
            sensor.read_illuminance()

    def test_empty_response(self):
        sensor = RS485LuxSensor(FakeModbusDriver(regs=[]))
        with pytest.raises(SensorReadError):
            sensor.read_illuminance()
