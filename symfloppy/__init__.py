"""Follow one MIDI channel of stored files as square-wave tones, with a web interface for the song library."""

__version__ = "1.0.0"

__all__ = ["app", "frequency", "library", "notes", "player", "server"]