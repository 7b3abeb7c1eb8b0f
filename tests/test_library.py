import pytest

from symfloppy.library import MidiFile, MidiFileManager


@pytest.fixture
def root(tmp_path):
    (tmp_path / "b.midi").write_bytes(b"MThd" + b"\x00" * 10)
    (tmp_path / "a.mid").write_bytes(b"MThd")
    (tmp_path / "notes.txt").write_text("not midi")
    (tmp_path / "upper.MID").write_bytes(b"x")
    (tmp_path / "folder.mid").mkdir()
    return tmp_path


def test_load_keeps_only_midi_files(root):
    manager = MidiFileManager(root)
    manager.load_files("/")
    assert [f.name for f in manager] == ["a.mid", "b.midi"]
    assert len(manager) == 2


def test_sizes_match_files_on_disk(root):
    manager = MidiFileManager(root)
    manager.load_files("/")
    for midi_file in manager:
        assert midi_file.size == (root / midi_file.name).stat().st_size


def test_file_at(root):
    manager = MidiFileManager(root)
    manager.load_files("/")
    first = manager.file_at(0)
    assert first == MidiFile("a.mid", (root / "a.mid").stat().st_size)
    assert manager.file_at(len(manager) - 1).name == "b.midi"


@pytest.mark.parametrize("index", [-1, 2, 100])
def test_file_at_out_of_range_is_none(root, index):
    manager = MidiFileManager(root)
    manager.load_files("/")
    assert manager.file_at(index) is None


def test_empty_before_loading(root):
    manager = MidiFileManager(root)
    assert len(manager) == 0
    assert manager.file_at(0) is None


def test_missing_directory_gives_no_files(root):
    manager = MidiFileManager(root)
    manager.load_files("/")
    manager.load_files("/missing")
    assert len(manager) == 0


def test_subdirectory(root):
    sub = root / "songs"
    sub.mkdir()
    (sub / "tune.mid").write_bytes(b"abc")
    manager = MidiFileManager(root)
    manager.load_files("/songs")
    assert [f.name for f in manager] == ["tune.mid"]


def test_reload_reflects_changes(root):
    manager = MidiFileManager(root)
    manager.load_files("/")
    (root / "a.mid").unlink()
    manager.load_files("/")
    assert [f.name for f in manager] == ["b.midi"]


def test_limit_of_files(tmp_path):
    for i in range(MidiFileManager.MAX_FILES + 5):
        (tmp_path / f"song{i:03d}.mid").write_bytes(b"x")
    manager = MidiFileManager(tmp_path)
    manager.load_files("/")
    assert len(manager) == MidiFileManager.MAX_FILES == 100
    assert manager.file_at(MidiFileManager.MAX_FILES) is None