"""Square-wave generator driven by polling."""

from __future__ import annotations

import time
from collections.abc import Callable


def _micros() -> int:
    return time.monotonic_ns() // 1000


class FrequencyGenerator:
    """Toggles an output at a set frequency each time update() finds half a period passed.

    ``clock`` returns the time in microseconds; ``output``, when given, receives
    the pin and the new level (True for high) on each toggle.
    """

    def __init__(
        self,
        pin: int | None = None,
        *,
        clock: Callable[[], int] = _micros,
        output: Callable[[int | None, bool], None] | None = None,
    ) -> None:
        self.pin = pin
        self._clock = clock
        self._output = output
        self.frequency = 0
        self.period_duration_micros = 0
        self.running = False
        self.time_micros = clock()
        self.pulse_count = 0
        self.pin_state = False

    def set_frequency(self, frequency: int) -> None:
        if frequency <= 0:
            raise ValueError(f"frequency must be positive, got {frequency}")
        self.frequency = frequency
        self.period_duration_micros = 1_000_000 // frequency

    def start(self) -> None:
        self.time_micros = self._clock()
        self.running = True

    def stop(self) -> None:
        self.running = False

    def update(self) -> None:
        if not self.running:
            return
        now = self._clock()
        if now > self.time_micros + self.period_duration_micros // 2:
            self.time_micros = now
            self.pin_state = not self.pin_state
            if self._output is not None:
                self._output(self.pin, self.pin_state)
            if self.pin_state:
                self.pulse_count += 1

    def reset_pulse_count(self) -> None:
        self.pulse_count = 0