"""Playback of one channel of a standard MIDI file as a stream of note events."""

from __future__ import annotations

import struct
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from symfloppy.notes import Note

CH_NOTE_OFF = 0x80
CH_NOTE_ON = 0x90

_META = 0xFF
_META_END_TRACK = 0x2F
_META_TEMPO = 0x51
_SYSEX_CODES = (0xF0, 0xF7)
_ONE_PARAM_CODES = (0xC0, 0xD0)

NoteEventFunction = Callable[[Note], None]
StopPlayingEventFunction = Callable[[], None]


def _millis() -> int:
    return time.monotonic_ns() // 1_000_000


class MidiFormatError(ValueError):
    """Raised when MIDI data is malformed or of an unsupported kind."""


class ChunkType(Enum):
    """What open_chunk() found next in the file."""

    MTRK = auto()
    END = auto()
    UNKNOWN = auto()


class EventType(Enum):
    """Kinds of events that read_event() reports."""

    END = auto()
    CHANNEL = auto()
    TEMPO = auto()
    END_TRACK = auto()
    META = auto()
    SYSEX = auto()


@dataclass(frozen=True)
class MidiEvent:
    """One event of a track; ``tempo`` is in microseconds per beat."""

    type: EventType
    delta_ticks: int = 0
    channel: int = 0
    code: int = 0
    param1: int = 0
    param2: int = 0
    tempo: int = 0


class MidiStream:
    """Sequential reader of the chunks and events of a standard MIDI file."""

    def __init__(self, data: bytes) -> None:
        if len(data) < 14 or data[:4] != b"MThd":
            raise MidiFormatError("missing MThd header")
        length = int.from_bytes(data[4:8], "big")
        if length < 6 or len(data) < 8 + length:
            raise MidiFormatError("truncated MThd header")
        self.format, self.track_count, division = struct.unpack(">HHH", data[8:14])
        if division & 0x8000:
            raise MidiFormatError("SMPTE time division is not supported")
        if division == 0:
            raise MidiFormatError("time division must not be zero")
        self.ticks_per_beat = division
        self._data = data
        self._pos = 8 + length
        self._track = b""
        self._track_pos = 0
        self._running_status = 0
        self.closed = False

    def open_chunk(self) -> ChunkType:
        """Move to the next chunk and report its kind."""
        if self.closed or self._pos >= len(self._data):
            return ChunkType.END
        header = self._data[self._pos:self._pos + 8]
        if len(header) < 8:
            raise MidiFormatError("truncated chunk header")
        start = self._pos + 8
        end = start + int.from_bytes(header[4:], "big")
        if end > len(self._data):
            raise MidiFormatError("truncated chunk")
        self._pos = end
        self._track_pos = 0
        self._running_status = 0
        if header[:4] != b"MTrk":
            self._track = b""
            return ChunkType.UNKNOWN
        self._track = self._data[start:end]
        return ChunkType.MTRK

    def read_event(self) -> MidiEvent:
        """Read the next event of the open track; END once the track is exhausted."""
        if self.closed or self._track_pos >= len(self._track):
            return MidiEvent(EventType.END)
        delta = self._read_varlen()
        status = self._peek_byte()
        if status & 0x80:
            self._track_pos += 1
        elif self._running_status:
            status = self._running_status
        else:
            raise MidiFormatError("data byte without running status")

        if status == _META:
            meta_type = self._read_byte()
            payload = self._read_bytes(self._read_varlen())
            if meta_type == _META_TEMPO and len(payload) == 3:
                return MidiEvent(EventType.TEMPO, delta, tempo=int.from_bytes(payload, "big"))
            if meta_type == _META_END_TRACK:
                self._track_pos = len(self._track)
                return MidiEvent(EventType.END_TRACK, delta)
            return MidiEvent(EventType.META, delta)
        if status in _SYSEX_CODES:
            self._read_bytes(self._read_varlen())
            return MidiEvent(EventType.SYSEX, delta)
        if status >= 0xF0:
            raise MidiFormatError(f"unsupported status byte 0x{status:02X}")

        self._running_status = status
        code = status & 0xF0
        param1 = self._read_byte()
        param2 = 0 if code in _ONE_PARAM_CODES else self._read_byte()
        return MidiEvent(
            EventType.CHANNEL, delta, channel=status & 0x0F, code=code, param1=param1, param2=param2
        )

    def close(self) -> None:
        """Release the data; further reads report the end."""
        self.closed = True
        self._data = b""
        self._track = b""

    def _peek_byte(self) -> int:
        if self._track_pos >= len(self._track):
            raise MidiFormatError("truncated track")
        return self._track[self._track_pos]

    def _read_byte(self) -> int:
        value = self._peek_byte()
        self._track_pos += 1
        return value

    def _read_bytes(self, count: int) -> bytes:
        end = self._track_pos + count
        if end > len(self._track):
            raise MidiFormatError("truncated track")
        chunk = self._track[self._track_pos:end]
        self._track_pos = end
        return chunk

    def _read_varlen(self) -> int:
        value = 0
        for _ in range(4):
            byte = self._read_byte()
            value = (value << 7) | (byte & 0x7F)
            if not byte & 0x80:
                return value
        raise MidiFormatError("variable-length quantity too long")


class Player:
    """Plays the note events of one MIDI channel of a file, driven by update()."""

    def __init__(
        self,
        file_name: str | None = None,
        channel: int = 1,
        *,
        root: str | Path = ".",
        clock: Callable[[], int] = _millis,
    ) -> None:
        self.file_name = file_name
        self.channel = channel
        self.root = Path(root)
        self._clock = clock
        self.micros_per_tick = 0
        self.midi_format = 0
        self.note = Note()
        self.time_millis = clock()
        self.is_finished = False
        self.error_occurred = False
        self.is_playing = False
        self._stream: MidiStream | None = None
        self._on_note: NoteEventFunction | None = None
        self._on_stop: StopPlayingEventFunction | None = None

    def load(self) -> None:
        """Open the file and its first track; raises OSError or MidiFormatError."""
        if not self.file_name:
            raise ValueError("no file name set")
        data = (self.root / self.file_name.lstrip("/")).read_bytes()
        stream = MidiStream(data)
        self.midi_format = stream.format
        if stream.open_chunk() is not ChunkType.MTRK:
            stream.close()
            raise MidiFormatError("first chunk is not a track")
        self._stream = stream

    def find_next_note(self) -> None:
        """Advance to the next note event of the channel, or to the end of the file."""
        stream = self._stream
        if stream is None:
            self.is_finished = True
            self.is_playing = False
            self.stop()
            return

        found = False
        while not self.is_finished and not self.error_occurred and not found:
            try:
                event = stream.read_event()
                if event.type is EventType.END:
                    chunk = stream.open_chunk()
                    if chunk is ChunkType.END:
                        self.is_finished = True
                        self.is_playing = False
                        self.stop()
                    elif chunk is not ChunkType.MTRK:
                        self.error_occurred = True
                        self.stop()
                    continue
            except MidiFormatError:
                self.error_occurred = True
                self.stop()
                continue

            if event.type is EventType.TEMPO:
                self.micros_per_tick = event.tempo // stream.ticks_per_beat
                continue
            if event.type is not EventType.CHANNEL:
                continue
            if event.channel != self.channel - 1 or event.code not in (CH_NOTE_OFF, CH_NOTE_ON):
                continue

            self.note.event_delta_millis = event.delta_ticks * self.micros_per_tick // 1000
            if event.code == CH_NOTE_OFF or event.param2 == 0:
                self.note.set_note_off()
            else:
                self.note.note = event.param1
            found = True

    def _close_file(self) -> None:
        if self._stream is not None:
            self._stream.close()

    def update(self) -> None:
        """Emit the pending note once its delay has passed, then fetch the next one."""
        if not self.is_playing or self.is_finished or self.error_occurred:
            return
        now = self._clock()
        if now - self.time_millis > self.note.event_delta_millis:
            self.time_millis = now
            if self._on_note is not None:
                self._on_note(self.note)
            self.find_next_note()

    def on_note_event(self, callback: NoteEventFunction) -> None:
        self._on_note = callback

    def on_stop_playing_event(self, callback: StopPlayingEventFunction) -> None:
        self._on_stop = callback

    def play(self) -> None:
        self.is_playing = True
        self.is_finished = False
        self.error_occurred = False

    def stop(self) -> None:
        self.is_playing = False
        self._close_file()
        if self._on_stop is not None:
            self._on_stop()

    def pause(self) -> None:
        self.is_playing = False