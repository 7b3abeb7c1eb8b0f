import struct

import pytest

from symfloppy.app import Symfloppy, main
from symfloppy.frequency import FrequencyGenerator
from symfloppy.player import Player


def _midi_bytes() -> bytes:
    header = b"MThd" + (6).to_bytes(4, "big") + struct.pack(">HHH", 0, 1, 96)
    events = bytes(
        [
            0x00, 0xFF, 0x51, 0x03, 0x07, 0xA1, 0x20,
            0x00, 0x90, 0x45, 0x64,
            0x60, 0x80, 0x45, 0x00,
            0x00, 0xFF, 0x2F, 0x00,
        ]
    )
    return header + b"MTrk" + len(events).to_bytes(4, "big") + events


class _Clock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def root(tmp_path):
    (tmp_path / "a.mid").write_bytes(_midi_bytes())
    (tmp_path / "b.mid").write_bytes(_midi_bytes())
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


@pytest.fixture
def clock():
    return _Clock()


@pytest.fixture
def device(root, clock):
    player = Player(root=root, clock=clock)
    generator = FrequencyGenerator(clock=clock)
    return Symfloppy(root, player=player, frequency_generator=generator)


def test_files_are_listed_at_start(device):
    assert [f.name for f in device.file_manager] == ["a.mid", "b.mid"]


def test_player_channel_is_one(device):
    assert device.player.channel == 1


def test_play_file_starts_playback(device):
    assert device.play_file(1) is True
    assert device.player.file_name == "b.mid"
    assert device.player.is_playing is True


def test_play_file_invalid_index(device):
    assert device.play_file(5) is False
    assert device.player.file_name is None
    assert device.player.is_playing is False


def test_play_file_unreadable(root, clock):
    (root / "c.mid").write_bytes(b"not midi")
    device = Symfloppy(root, player=Player(root=root, clock=clock))
    assert device.play_file(2) is False
    assert device.player.is_playing is False


def test_next_file_wraps(device):
    device.play_next_file()
    assert device.playing_file_index == 1
    device.play_next_file()
    assert device.playing_file_index == 0
    assert device.player.file_name == "a.mid"


def test_previous_file_wraps(device):
    device.play_previous_file()
    assert device.playing_file_index == 1
    assert device.player.file_name == "b.mid"
    device.play_previous_file()
    assert device.playing_file_index == 0


def test_previous_with_no_files(tmp_path):
    device = Symfloppy(tmp_path)
    assert device.play_previous_file() is False
    assert device.playing_file_index == -1


def test_toggle_playback(device):
    device.toggle_playback()
    assert device.is_playing is True
    assert device.player.is_playing is True
    device.toggle_playback()
    assert device.is_playing is False
    assert device.player.is_playing is False


def test_update_drives_generator(device, clock):
    device.play_file(0)
    clock.now = 1
    device.update()
    assert device.frequency_generator.running is False
    assert device.player.note.note == 69

    clock.now = 2
    device.update()
    assert device.frequency_generator.running is True
    assert device.frequency_generator.frequency == 440
    assert device.player.note.is_note_on() is False

    clock.now = 1000
    device.update()
    assert device.frequency_generator.running is False
    assert device.player.is_finished is True


def test_main_runs_for_duration(root):
    assert main(["--root", str(root), "--no-server", "--duration", "0"]) == 0


def test_main_with_play(root):
    assert main(["--root", str(root), "--no-server", "--play", "0", "--duration", "0.01"]) == 0