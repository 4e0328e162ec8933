"""Driver for the DHT20 I2C temperature and humidity sensor.

The sensor sits at the fixed address 0x38. A measurement is triggered,
polled until ready, read as seven bytes (status, 20-bit humidity, 20-bit
temperature, CRC-8) and converted to degrees Celsius and percent relative
humidity.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol

ADDRESS = 0x38
FRAME_LENGTH = 7
MIN_READ_INTERVAL_MS = 1000

OK = 0
ERROR_CHECKSUM = -10
ERROR_CONNECT = -11
MISSING_BYTES = -12
ERROR_BYTES_ALL_ZERO = -13
ERROR_READ_TIMEOUT = -14
ERROR_LASTREAD = -15

_ERROR_MESSAGES = {
    ERROR_CHECKSUM: "checksum mismatch",
    ERROR_CONNECT: "sensor did not answer",
    MISSING_BYTES: "sensor sent too few bytes",
    ERROR_BYTES_ALL_ZERO: "sensor sent only zero bytes",
    ERROR_READ_TIMEOUT: "read timed out",
    ERROR_LASTREAD: "read requested less than a second after the last one",
}

_UINT32 = 0xFFFFFFFF
_RESET_REGISTERS = (0x1B, 0x1C, 0x1E)


class I2CBus(Protocol):
    """The bus operations the driver needs."""

    def begin(self) -> None:
        """Initialise the bus."""

    def write(self, address: int, data: bytes) -> int:
        """Send ``data`` to ``address`` in one transmission; return 0 on success."""

    def read(self, address: int, count: int) -> bytes:
        """Request ``count`` bytes from ``address``; return what arrived."""


class DHT20Error(Exception):
    """A failed sensor operation, carrying the driver's error code."""

    def __init__(self, code: int) -> None:
        super().__init__(f"{_ERROR_MESSAGES.get(code, 'sensor error')} ({code})")
        self.code = code


def crc8(data: bytes) -> int:
    """CRC-8 with polynomial 0x31 and initial value 0xFF."""
    crc = 0xFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = ((crc << 1) ^ 0x31) if crc & 0x80 else (crc << 1)
            crc &= 0xFF
    return crc


def _default_clock() -> int:
    return int(time.monotonic() * 1000)


def _default_sleep(milliseconds: float) -> None:
    time.sleep(milliseconds / 1000)


class DHT20:
    """A DHT20 sensor on an I2C bus.

    ``clock`` returns milliseconds and ``sleep`` waits a number of
    milliseconds; both default to the system's monotonic time.
    """

    address = ADDRESS

    def __init__(
        self,
        bus: I2CBus,
        clock: Callable[[], int] = _default_clock,
        sleep: Callable[[float], None] = _default_sleep,
    ) -> None:
        self.bus = bus
        self._clock = clock
        self._sleep = sleep
        self._temperature = 0.0
        self._humidity = 0.0
        self.hum_offset = 0.0
        self.temp_offset = 0.0
        self._status = OK
        self._last_request = 0
        self._last_read = 0
        self._bits = bytes(FRAME_LENGTH)

    def _millis(self) -> int:
        return int(self._clock()) & _UINT32

    @property
    def temperature(self) -> float:
        """Last converted temperature in degrees Celsius, offset included."""
        return self._temperature + self.temp_offset

    @property
    def humidity(self) -> float:
        """Last converted relative humidity in percent, offset included."""
        return self._humidity + self.hum_offset

    @property
    def internal_status(self) -> int:
        """The status byte of the last converted frame."""
        return self._status

    @property
    def last_read(self) -> int:
        """Millisecond timestamp of the last successful data read."""
        return self._last_read

    @property
    def last_request(self) -> int:
        """Millisecond timestamp of the last measurement request."""
        return self._last_request

    def begin(self) -> bool:
        """Start the bus and report whether the sensor answers."""
        self.bus.begin()
        return self.is_connected()

    def is_connected(self) -> bool:
        return self.bus.write(ADDRESS, b"") == 0

    def reset_sensor(self) -> int:
        """Reset the calibration registers if the sensor asks for it.

        Returns 255 when no reset was needed, otherwise the number of
        registers reset successfully (3 means all of them).
        """
        count = 255
        if self.read_status() & 0x18 != 0x18:
            count = (count + 1) & 0xFF
            for register in _RESET_REGISTERS:
                if self._reset_register(register):
                    count += 1
            self._sleep(10)
        return count

    def read(self) -> tuple[float, float]:
        """Measure and return (temperature, humidity).

        Raises DHT20Error when called within a second of the previous read,
        when the data cannot be read, or when its checksum is wrong.
        """
        if (self._millis() - self._last_read) & _UINT32 < MIN_READ_INTERVAL_MS:
            raise DHT20Error(ERROR_LASTREAD)
        status = self.request_data()
        if status < 0:
            raise DHT20Error(status)
        while self.is_measuring():
            pass
        self.read_data()
        self.convert()
        return self.temperature, self.humidity

    def request_data(self) -> int:
        """Trigger a measurement; return the bus status (0 on success)."""
        self.reset_sensor()
        status = self.bus.write(ADDRESS, bytes((0xAC, 0x33, 0x00)))
        self._last_request = self._millis()
        return status

    def read_data(self) -> int:
        """Read the raw measurement frame; return the number of bytes read."""
        data = bytes(self.bus.read(ADDRESS, FRAME_LENGTH))
        if not data:
            raise DHT20Error(ERROR_CONNECT)
        if len(data) < FRAME_LENGTH:
            raise DHT20Error(MISSING_BYTES)
        data = data[:FRAME_LENGTH]
        self._bits = data
        if not any(data):
            raise DHT20Error(ERROR_BYTES_ALL_ZERO)
        self._last_read = self._millis()
        return len(data)

    def convert(self) -> None:
        """Convert the raw frame into temperature and humidity.

        The values are stored even when the checksum fails, after which
        DHT20Error is raised.
        """
        bits = self._bits
        self._status = bits[0]
        raw = (bits[1] << 12) | (bits[2] << 4) | (bits[3] >> 4)
        self._humidity = raw * 9.5367431640625e-5
        raw = ((bits[3] & 0x0F) << 16) | (bits[4] << 8) | bits[5]
        self._temperature = raw * 1.9073486328125e-4 - 50
        if crc8(bits[:6]) != bits[6]:
            raise DHT20Error(ERROR_CHECKSUM)

    def read_status(self) -> int:
        """Read the sensor's status byte (0xFF if nothing arrived)."""
        data = self.bus.read(ADDRESS, 1)
        self._sleep(1)
        return data[0] if data else 0xFF

    def is_calibrated(self) -> bool:
        return self.read_status() & 0x08 == 0x08

    def is_measuring(self) -> bool:
        return self.read_status() & 0x80 == 0x80

    def is_idle(self) -> bool:
        return self.read_status() & 0x80 == 0x00

    def _reset_register(self, register: int) -> bool:
        if self.bus.write(ADDRESS, bytes((register, 0x00, 0x00))) != 0:
            return False
        self._sleep(5)
        value = (bytes(self.bus.read(ADDRESS, 3)) + bytes(3))[:3]
        self._sleep(10)
        if self.bus.write(ADDRESS, bytes((0xB0 | register, value[1], value[2]))) != 0:
            return False
        self._sleep(5)
        return True