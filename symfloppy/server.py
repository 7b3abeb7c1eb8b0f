"""HTTP interface for choosing the MIDI channel and managing stored MIDI files."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

from flask import Flask, Response, current_app, jsonify, request

from symfloppy.library import MidiFileManager

log = logging.getLogger(__name__)

DEFAULT_PORT = 80
DEFAULT_CHANNEL = 12
MAX_UPLOAD_BYTES = 100_000

HTTP_CODE_OK = 200
HTTP_CODE_CREATED = 201
HTTP_CODE_BAD_REQUEST = 400
HTTP_CODE_NOT_FOUND = 404
HTTP_CODE_ERROR = 500

_CHANNEL_KEY = "SYMFLOPPY_CHANNEL"
_MANAGER_KEY = "SYMFLOPPY_FILE_MANAGER"
_ROOT_KEY = "SYMFLOPPY_ROOT"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _panel(title: str, *rows: str) -> str:
    body = "".join(f'<div class="content{cls}">{html}</div>' for html, cls in (
        (row[1:], " center") if row.startswith("^") else (row, "") for row in rows
    ))
    return (
        f'<section class="block block-position">'
        f'<div class="title">{title}</div>{body}</section>'
    )


def _build_index_html() -> str:
    channel_panel = _panel(
        "MIDI input channel",
        '<select name="channel" id="select_channel_save"></select>',
        '<span id="span_channel_help"></span>',
        '^<button type="button" id="button_channel_save">Save</button>',
    )
    upload_panel = _panel(
        "Music box file",
        '<input type="file" id="input_file" accept=".mid,.midi">',
        '<span id="span_upload_help"></span>',
        '^<button type="button" id="button_upload">Upload</button>',
    )
    welcome_panel = (
        '<section class="block block-position"><div class="title">Welcome</div>'
        "<p>Pick the channel to follow and upload MIDI files to play.</p></section>"
    )
    return (
        "<!DOCTYPE html>\n<html><head>"
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        '<script src="index.js"></script>'
        '<link rel="stylesheet" href="style.css">'
        "</head><body>"
        '<h1 class="block-position"><span style="color:red">S</span>'
        '<span style="color:grey">ym</span>floppy</h1>'
        f"{welcome_panel}{channel_panel}{upload_panel}"
        '<p class="block-position version" id="corporate_mention">Software version: v1.0</p>'
        "</body></html>\n"
    )


_STYLE_RULES = {
    ".block-position": "max-width: 500px; margin: 0 auto",
    "body": "font-family: Arial, Helvetica, sans-serif",
    ".block": "border: 1px solid grey; border-radius: 10px; padding: 20px; margin-bottom: 20px",
    ".block .title": "font-weight: bold",
    ".block .content": "margin: 20px",
    "span": "font-style: italic",
    ".valid": "color: #006600",
    ".error": "color: red",
    "button": "width: 140px; height: 30px; border: 1px solid grey; border-radius: 10px",
    ".center": "text-align: center",
    ".version": "text-align: right",
}

STYLE_CSS = "".join(f"{selector} {{ {rules}; }}\n" for selector, rules in _STYLE_RULES.items())

INDEX_JS = f"""\
document.addEventListener('DOMContentLoaded', () => {{
  const byId = (id) => document.getElementById(id);
  const channelSelect = byId('select_channel_save');
  const fileInput = byId('input_file');
  const uploadHelp = byId('span_upload_help');
  const channelHelp = byId('span_channel_help');

  const show = (target, text, kind) => {{
    target.classList.remove('valid', 'error');
    if (kind) target.classList.add(kind);
    target.innerText = text;
  }};

  for (let n = 1; n <= 16; n += 1) {{
    channelSelect.add(new Option(`channel ${{n}}`, String(n)));
  }}

  fetch('/channel').then((r) => r.json()).then((v) => {{ channelSelect.value = v; }});

  byId('button_channel_save').onclick = async () => {{
    const body = new FormData();
    body.append('channel', channelSelect.value);
    try {{
      await fetch('/channel', {{ method: 'POST', body }});
      show(channelHelp, 'Channel saved', 'valid');
    }} catch (err) {{
      show(channelHelp, 'Error occurred', 'error');
    }}
  }};

  byId('button_upload').onclick = async () => {{
    const [file] = fileInput.files;
    if (!file) {{
      show(uploadHelp, 'Please select a file first', 'error');
      return;
    }}
    if (file.size > {MAX_UPLOAD_BYTES}) {{
      const kb = Math.ceil(file.size / 1000);
      show(uploadHelp, `File is too large (${{kb}}kb), the limit is 100kb`, 'error');
      return;
    }}
    show(uploadHelp, 'Uploading...');
    const body = new FormData();
    body.append('file', file);
    try {{
      await fetch('/upload', {{ method: 'POST', body }});
    }} catch (err) {{
      show(uploadHelp, 'Error occurred', 'error');
    }}
    show(uploadHelp, 'File uploaded', 'valid');
  }};
}});
"""

INDEX_HTML = _build_index_html()


def _to_int(text: str) -> int:
    """Parse leading digits like the firmware does: anything unparsable is 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _text(body: str, status: int = HTTP_CODE_OK, content_type: str = "text/html") -> Response:
    return Response(body, status=status, headers={"Content-Type": content_type})


def _stored_path(root: Path, name: str) -> Path | None:
    """Map a stored file name to a path under ``root``; None if it escapes it."""
    base = root.resolve()
    target = (base / name.lstrip("/")).resolve()
    if target == base or base not in target.parents:
        return None
    return target


def _remove(root: Path, name: str) -> bool:
    target = _stored_path(root, name)
    if target is None:
        return False
    try:
        target.unlink()
    except OSError:
        return False
    return True


def create_app(file_manager: MidiFileManager, root: str | Path = ".") -> Flask:
    """Build the web application serving the page, channel setting and file routes."""
    app = Flask(__name__)
    app.config[_CHANNEL_KEY] = DEFAULT_CHANNEL
    app.config[_MANAGER_KEY] = file_manager
    app.config[_ROOT_KEY] = Path(root)

    def not_found(_error: Exception) -> Response:
        return _text("Not found", HTTP_CODE_NOT_FOUND)

    app.register_error_handler(404, not_found)
    app.register_error_handler(405, not_found)

    @app.get("/")
    def index() -> Response:
        return _text(INDEX_HTML, content_type="text/html; charset=UTF-8")

    @app.get("/style.css")
    def style() -> Response:
        return _text(STYLE_CSS, content_type="text/css; charset=UTF-8")

    @app.get("/index.js")
    def script() -> Response:
        return _text(INDEX_JS, content_type="application/javascript; charset=UTF-8")

    @app.get("/channel")
    def get_channel() -> Response:
        channel = current_app.config[_CHANNEL_KEY]
        log.info("GET /channel - channel : %s", channel)
        return _text(str(channel))

    @app.post("/channel")
    def set_channel() -> Response:
        if "channel" not in request.form:
            return _text("Missing value", HTTP_CODE_BAD_REQUEST)
        current_app.config[_CHANNEL_KEY] = _to_int(request.form["channel"])
        return _text("OK")

    @app.delete("/files")
    def delete_file() -> Response:
        if "filename" not in request.form:
            return _text("Missing value", HTTP_CODE_BAD_REQUEST)
        ok = _remove(current_app.config[_ROOT_KEY], request.form["filename"])
        return _text("OK" if ok else "NOK")

    @app.delete("/files-old")
    def delete_files_old() -> Response:
        result = "OK"
        for name, value in request.values.items(multi=True):
            log.info("POST[%s]: %s", name, value)
            if name == "filename" and not _remove(current_app.config[_ROOT_KEY], value):
                result = "NOK"
        return _text(result)

    @app.get("/files")
    def list_files() -> Response:
        manager: MidiFileManager = current_app.config[_MANAGER_KEY]
        file_list = [{"filename": f.name, "size": f.size} for f in manager]
        return jsonify({"file_list": file_list})

    @app.get("/info")
    def info() -> Response:
        usage = shutil.disk_usage(current_app.config[_ROOT_KEY])
        return jsonify(
            {
                "totalBytes": usage.total,
                "usedBytes": usage.used,
                "freeBytes": usage.total - usage.used,
            }
        )

    @app.post("/upload")
    def upload() -> Response:
        root: Path = current_app.config[_ROOT_KEY]
        for storage in request.files.values():
            name = Path(storage.filename or "").name
            if not name:
                continue
            log.info("Upload Start: %s", name)
            target = root / name
            storage.save(target)
            log.info("Upload Complete: %s,size: %d", name, target.stat().st_size)
        return _text("FILE UPLOADED")

    return app


class SymfloppyServer:
    """The web server of the device, listening on ``port``."""

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        file_manager: MidiFileManager | None = None,
        root: str | Path = ".",
        host: str = "0.0.0.0",
    ) -> None:
        self.port = port
        self.host = host
        self.file_manager = file_manager if file_manager is not None else MidiFileManager(root)
        self.app = create_app(self.file_manager, root)

    @property
    def channel(self) -> int:
        return self.app.config[_CHANNEL_KEY]

    @channel.setter
    def channel(self, value: int) -> None:
        self.app.config[_CHANNEL_KEY] = value

    def serve(self) -> None:
        """Run the server until interrupted."""
        self.app.run(host=self.host, port=self.port)