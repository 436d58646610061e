"""Tests for the ``voicescribe-record`` command in file mode."""

import pytest

from voicescribe.ui import cli


class FakeAPIClient:
    """Stands in for APIClient and remembers what was uploaded."""

    instances: list["FakeAPIClient"] = []

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.max_attempts = 3
        self.uploaded = []
        self.closed = False
        FakeAPIClient.instances.append(self)

    def transcribe(self, recording, on_attempt=None, on_retry=None):
        self.uploaded.append(recording)
        return "dictated memo"

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client(monkeypatch):
    FakeAPIClient.instances = []
    monkeypatch.setattr(cli, "APIClient", FakeAPIClient)
    return FakeAPIClient


def test_file_upload_keeps_source_extension(tmp_path, fake_client, capsys):
    audio = tmp_path / "memo.opus"
    audio.write_bytes(b"opus-bytes")

    assert cli.main(["--file", str(audio), "--api-url", "http://gw:8000"]) == 0

    client = fake_client.instances[0]
    assert client.kwargs["base_url"] == "http://gw:8000"
    assert client.uploaded[0].filename == "recording.opus"
    assert client.uploaded[0].data == b"opus-bytes"
    assert client.closed
    assert capsys.readouterr().out.strip() == "dictated memo"


def test_output_writes_transcript(tmp_path, fake_client):
    audio = tmp_path / "memo.wav"
    audio.write_bytes(b"wav-bytes")
    target = tmp_path / "out.txt"

    assert cli.main(["--file", str(audio), "-o", str(target)]) == 0

    assert target.read_text(encoding="utf-8") == "dictated memo"


def test_missing_file_fails(tmp_path, fake_client, capsys):
    assert cli.main(["--file", str(tmp_path / "nope.wav")]) == 1
    assert "does not exist" in capsys.readouterr().err
