"""The device: plays stored MIDI files on a buzzer and serves the web interface."""

from __future__ import annotations

import argparse
import logging
import threading
import time
from pathlib import Path

from symfloppy.frequency import FrequencyGenerator
from symfloppy.library import MidiFileManager
from symfloppy.notes import Note
from symfloppy.player import MidiFormatError, Player
from symfloppy.server import SymfloppyServer

log = logging.getLogger(__name__)

PIN_BUZZER = 5
PIN_NEOPIXEL = 15
PIN_BUTTON_LEFT = 4
PIN_BUTTON_MIDDLE = 12
PIN_BUTTON_RIGHT = 13

SERVER_PORT = 80
DEFAULT_MIDI_CHANNEL = 14
PLAYER_CHANNEL = 1


class Symfloppy:
    """Ties the file list, the player and the tone generator together."""

    def __init__(
        self,
        root: str | Path = ".",
        *,
        channel: int = PLAYER_CHANNEL,
        player: Player | None = None,
        frequency_generator: FrequencyGenerator | None = None,
        file_manager: MidiFileManager | None = None,
    ) -> None:
        self.root = Path(root)
        self.file_manager = file_manager if file_manager is not None else MidiFileManager(self.root)
        self.player = player if player is not None else Player(root=self.root)
        self.frequency_generator = (
            frequency_generator if frequency_generator is not None else FrequencyGenerator(PIN_BUZZER)
        )
        self.player.channel = channel
        self.player.on_note_event(self._on_note)
        self.player.on_stop_playing_event(self.frequency_generator.stop)
        self.is_playing = False
        self.playing_file_index = 0

        self.file_manager.load_files("/")
        for index, midi_file in enumerate(self.file_manager):
            log.info("Fichier %d: %s (%d octets)", index, midi_file.name, midi_file.size)

    def _on_note(self, note: Note) -> None:
        if note.is_note_on():
            self.frequency_generator.set_frequency(note.frequency())
            self.frequency_generator.start()
        else:
            self.frequency_generator.stop()

    def play_file(self, index: int) -> bool:
        """Start playing the file at ``index``; False if there is none or it cannot be read."""
        midi_file = self.file_manager.file_at(index)
        if midi_file is None:
            log.warning("Invalid file index")
            return False
        self.player.stop()
        self.player.file_name = midi_file.name
        try:
            self.player.load()
        except (OSError, MidiFormatError) as error:
            log.warning("Cannot load %s: %s", midi_file.name, error)
            return False
        self.player.play()
        log.info("Playing file: %s", midi_file.name)
        return True

    def play_next_file(self) -> bool:
        """Move to the following file, wrapping to the first, and play it."""
        self.playing_file_index += 1
        if self.playing_file_index >= len(self.file_manager):
            self.playing_file_index = 0
        return self.play_file(self.playing_file_index)

    def play_previous_file(self) -> bool:
        """Move to the preceding file, wrapping to the last, and play it."""
        self.playing_file_index -= 1
        if self.playing_file_index < 0:
            self.playing_file_index = len(self.file_manager) - 1
        return self.play_file(self.playing_file_index)

    def toggle_playback(self) -> None:
        """Stop if playing, otherwise play the current file."""
        if self.is_playing:
            self.player.stop()
            self.is_playing = False
        else:
            self.play_file(self.playing_file_index)
            self.is_playing = True

    def update(self) -> None:
        """Advance playback and the tone output; call this as often as possible."""
        self.player.update()
        self.frequency_generator.update()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="symfloppy", description="Play stored MIDI files.")
    parser.add_argument("--root", default=".", help="directory holding the MIDI files")
    parser.add_argument("--host", default="0.0.0.0", help="address the web server binds to")
    parser.add_argument("--port", type=int, default=SERVER_PORT, help="web server port")
    parser.add_argument("--no-server", action="store_true", help="do not start the web server")
    parser.add_argument("--play", type=int, metavar="INDEX", help="start playing this file")
    parser.add_argument("--duration", type=float, help="stop after this many seconds")
    parser.add_argument("--interval", type=float, default=0.0002, help="seconds between updates")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    device = Symfloppy(args.root)
    if not args.no_server:
        server = SymfloppyServer(args.port, file_manager=device.file_manager, root=args.root, host=args.host)
        threading.Thread(target=server.serve, daemon=True).start()

    if args.play is not None:
        device.playing_file_index = args.play
        device.toggle_playback()

    deadline = None if args.duration is None else time.monotonic() + args.duration
    try:
        while deadline is None or time.monotonic() < deadline:
            device.update()
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        device.player.stop()
    return 0