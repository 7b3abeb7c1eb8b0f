"""Listing of the MIDI files stored on the device's file system."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

MIDI_SUFFIXES = (".mid", ".midi")


@dataclass(frozen=True)
class MidiFile:
    """A stored MIDI file: its name and its size in bytes."""

    name: str
    size: int


class MidiFileManager:
    """Keeps a list of at most MAX_FILES MIDI files found under a root directory."""

    MAX_FILES = 100

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)
        self._files: list[MidiFile] = []

    def _resolve(self, directory: str) -> Path:
        return self.root / directory.lstrip("/")

    def load_files(self, directory: str = "/") -> None:
        """Replace the list with the MIDI files of ``directory``; a missing one yields none."""
        self._files = []
        path = self._resolve(directory)
        if not path.is_dir():
            return
        for entry in sorted(path.iterdir(), key=lambda p: p.name):
            if len(self._files) >= self.MAX_FILES:
                break
            if entry.is_file() and entry.name.endswith(MIDI_SUFFIXES):
                self._files.append(MidiFile(entry.name, entry.stat().st_size))

    def file_at(self, index: int) -> MidiFile | None:
        """Return the file at ``index``, or None when the index is out of range."""
        if 0 <= index < len(self._files):
            return self._files[index]
        return None

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[MidiFile]:
        return iter(self._files)