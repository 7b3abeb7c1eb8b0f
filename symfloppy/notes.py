"""MIDI notes and their square-wave frequencies."""

from __future__ import annotations

from dataclasses import dataclass

NOTE_OFF = -1

MIDI_FREQUENCY_MAPPING: tuple[int, ...] = (
    8, 9, 9, 10, 10, 11, 12, 12, 13, 14, 15, 15, 16, 17, 18, 19,
    21, 22, 23, 25, 26, 28, 29, 31, 33, 35, 37, 39, 41, 44, 46, 49,
    52, 55, 58, 62, 65, 69, 73, 78, 82, 87, 93, 98, 104, 110, 117, 123,
    131, 139, 147, 156, 165, 175, 185, 196, 208, 220, 233, 247, 262, 277, 294, 311,
    330, 349, 370, 392, 415, 440, 466, 494, 523, 554, 587, 622, 659, 698, 740, 784,
    831, 880, 932, 988, 1047, 1109, 1175, 1245, 1319, 1397, 1480, 1568, 1661, 1760, 1865, 1976,
    2093, 2217, 2349, 2489, 2637, 2794, 2960, 3136, 3322, 3520, 3729, 3951, 4186, 4435, 4699, 4978,
    5274, 5588, 5920, 6272, 6645, 7040, 7459, 7902, 8372, 8870, 9397, 9956, 10548, 11175, 11840, 12544,
)


def midi_note_to_frequency(midi_note: int) -> int:
    """Return the frequency in hertz, rounded, of a MIDI note number 0-127."""
    if not 0 <= midi_note < len(MIDI_FREQUENCY_MAPPING):
        raise ValueError(f"MIDI note out of range: {midi_note}")
    return MIDI_FREQUENCY_MAPPING[midi_note]


@dataclass
class Note:
    """A note event: the note number, or NOTE_OFF, and the wait before it."""

    note: int = NOTE_OFF
    event_delta_millis: int = 0

    def is_note_on(self) -> bool:
        return self.note > 0

    def set_note_off(self) -> None:
        self.note = NOTE_OFF

    def frequency(self) -> int:
        return midi_note_to_frequency(self.note)