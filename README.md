# symfloppy

symfloppy reads standard MIDI files and follows the note-on and note-off
events of one MIDI channel, driving a square-wave tone generator at the
matching frequencies, like a music box or a singing floppy drive. A small
web interface lists the song library, accepts uploads of new files, deletes
old ones and holds a MIDI channel setting.

## Running it

    symfloppy [--root DIR] [--host HOST] [--port PORT] [--no-server]
              [--play INDEX] [--duration SECONDS] [--interval SECONDS]

| Option         | Default   | Meaning                                           |
|----------------|-----------|---------------------------------------------------|
| `--root`       | `.`       | Directory holding the MIDI files                  |
| `--host`       | `0.0.0.0` | Address the web server binds to                   |
| `--port`       | `80`      | Web server port (a port below 1024 usually needs privileges) |
| `--no-server`  |           | Do not start the web server                       |
| `--play INDEX` |           | Start playing the file at this index of the list  |
| `--duration`   |           | Stop after this many seconds (runs until Ctrl-C otherwise) |
| `--interval`   | `0.0002`  | Seconds to sleep between updates                  |

At start the `.mid` and `.midi` files directly in the root directory are
listed, sorted by name, at most 100 of them, and logged with their sizes.
The web server runs in a background thread while the main loop advances
playback. Playback follows MIDI channel 1.

## The web interface

| Route        | Method | What it does                                                      |
|--------------|--------|-------------------------------------------------------------------|
| `/`          | GET    | The control page                                                  |
| `/style.css` | GET    | Stylesheet of the control page                                    |
| `/index.js`  | GET    | Script of the control page                                        |
| `/channel`   | GET    | The stored channel setting (12 at start)                          |
| `/channel`   | POST   | Set it from the `channel` form field; leading digits are read, anything else gives 0; 400 `Missing value` if the field is absent |
| `/files`     | GET    | JSON list of songs: `{"file_list": [{"filename": ..., "size": ...}]}` |
| `/files`     | DELETE | Remove the file named in the `filename` form field; answers `OK` or `NOK`; 400 if the field is absent |
| `/files-old` | DELETE | Remove every file named by a `filename` parameter; `NOK` if any removal failed |
| `/info`      | GET    | JSON disk use of the root directory: `totalBytes`, `usedBytes`, `freeBytes` |
| `/upload`    | POST   | Save each uploaded file into the root directory; answers `FILE UPLOADED` |

Any other path or method answers 404 `Not found`. Names that would lead
outside the root directory are refused on delete.

## Using it as a library

- `symfloppy.notes`: `midi_note_to_frequency(69)` gives `440`; notes outside
  0-127 raise `ValueError`. A `Note` dataclass holds `note` (or `NOTE_OFF`,
  -1) and `event_delta_millis`, with `is_note_on()`, `set_note_off()` and
  `frequency()`.

- `symfloppy.frequency.FrequencyGenerator(pin, clock=..., output=...)`:
  `set_frequency()` (positive values only), `start()`, `update()`, `stop()`.
  Each `update()` that finds half a period passed flips `pin_state`, calls
  `output(pin, level)` if given, and counts a pulse on every rising edge in
  `pulse_count`; `reset_pulse_count()` clears it.

- `symfloppy.library.MidiFileManager(root)`: `load_files(directory)` replaces
  the list with the `MidiFile(name, size)` entries found; `len()` and
  iteration work on it; `file_at(index)` returns `None` out of range.

- `symfloppy.player`: `MidiStream(data)` reads chunks (`open_chunk()` returns a
  `ChunkType`) and events (`read_event()` returns a `MidiEvent` whose `type` is
  an `EventType`); malformed data and SMPTE time division raise
  `MidiFormatError`. `Player(file_name, channel, root=..., clock=...)` opens a
  file with `load()` (raising `OSError`, `MidiFormatError`, or `ValueError`
  when no file name is set), follows tempo changes, and on each `update()`
  calls the callback from `on_note_event()` once the pending note's delay has
  passed. `play()`, `pause()` and `stop()` control it; `stop()` and the end of
  the file call the callback from `on_stop_playing_event()`.

- `symfloppy.server`: `create_app(file_manager, root)` builds the Flask
  application; `SymfloppyServer(port, file_manager, root, host)` wraps it,
  exposes `channel`, and `serve()` runs it.

- `symfloppy.app.Symfloppy(root, channel=...)` ties these together:
  `play_file(index)` returns whether playback started,
  `play_next_file()` and `play_previous_file()` wrap around at both ends,
  `toggle_playback()` starts or stops the current song, and `update()`
  advances the player and the tone generator.

## What it does not do

- No sound comes out on its own: the tone generator only switches a level and
  hands it to an `output` callback, and the `symfloppy` command gives it none.
- The channel set through the web interface is only stored; playback keeps
  following the channel the `Symfloppy` object was created with.
- The song list is read once at start; uploads and deletions through the web
  interface show in `/files` only after a restart.
- Uploads are not limited in size by the server; only the control page checks
  the 100 kB limit.