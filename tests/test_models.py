"""Tests for result types and helpers."""

from __future__ import annotations

import base64
import io

from models.data import RemoteError, SpeechAudio
from utils.helpers import guess_media_type, read_upload


class TestSpeechAudio:
    def test_data_url(self):
        audio = SpeechAudio(data=b"0123456789", media_type="audio/wav")
        prefix, encoded = audio.url.split(",", 1)
        assert prefix == "data:audio/wav;base64"
        assert base64.b64decode(encoded) == b"0123456789"

    def test_open_and_save(self, tmp_path):
        audio = SpeechAudio(data=b"abc")
        assert audio.open().read() == b"abc"

        out = audio.save(tmp_path / "nested" / "intro.mp3")
        assert out.read_bytes() == b"abc"


class TestErrors:
    def test_remote_error_fields(self):
        err = RemoteError("voice too short", status_code=400, detail="voice too short")
        assert str(err) == "voice too short"
        assert err.message == "voice too short"
        assert err.status_code == 400


class TestHelpers:
    def test_guess_media_type(self):
        assert guess_media_type("portrait.png") == "image/png"
        assert guess_media_type("mystery", "audio/webm") == "audio/webm"

    def test_read_upload_sources(self, tmp_path):
        assert read_upload(b"raw") == (b"raw", "")

        path = tmp_path / "clip.webm"
        path.write_bytes(b"disk")
        assert read_upload(path) == (b"disk", "clip.webm")
        assert read_upload(str(path)) == (b"disk", "clip.webm")

        assert read_upload(io.BytesIO(b"stream")) == (b"stream", "")
