import pytest

from symfloppy.notes import MIDI_FREQUENCY_MAPPING, NOTE_OFF, Note, midi_note_to_frequency


def test_note_holds_its_values():
    note = Note(60, 250)
    assert note.note == 60
    assert note.event_delta_millis == 250


def test_default_note_is_off():
    note = Note()
    assert note.note == NOTE_OFF
    assert note.event_delta_millis == 0
    assert note.is_note_on() is False


def test_set_note_off():
    note = Note(69, 10)
    assert note.is_note_on() is True
    note.set_note_off()
    assert note.note == -1
    assert note.is_note_on() is False


def test_note_zero_counts_as_off():
    assert Note(0, 0).is_note_on() is False


@pytest.mark.parametrize(
    "midi_note, expected",
    [(0, 8), (60, 262), (69, 440), (81, 880), (127, 12544)],
)
def test_midi_note_to_frequency(midi_note, expected):
    assert midi_note_to_frequency(midi_note) == expected


def test_note_frequency():
    assert Note(69, 0).frequency() == 440


@pytest.mark.parametrize("midi_note", [-1, 128, 500])
def test_out_of_range_note_raises(midi_note):
    with pytest.raises(ValueError):
        midi_note_to_frequency(midi_note)


def test_off_note_has_no_frequency():
    with pytest.raises(ValueError):
        Note().frequency()


def test_every_note_has_a_rising_frequency():
    frequencies = [midi_note_to_frequency(midi_note) for midi_note in range(128)]
    assert frequencies == list(MIDI_FREQUENCY_MAPPING)
    assert all(a <= b for a, b in zip(frequencies, frequencies[1:]))


def test_octave_roughly_doubles():
    for midi_note in range(24, 116):
        low = midi_note_to_frequency(midi_note)
        high = midi_note_to_frequency(midi_note + 12)
        assert abs(high - 2 * low) <= 2