import pytest
import requests

from scotland_demographics import fetch
from scotland_demographics.fetch import download_file


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


def test_download_writes_file(monkeypatch, tmp_path):
    calls = {}

    def _get(url, stream, timeout):
        calls.update(url=url, stream=stream, timeout=timeout)
        return FakeResponse([b"PK", b"", b"data"])

    monkeypatch.setattr(fetch.requests, "get", _get)
    dest = download_file("https://example.test/a.xlsx", tmp_path / "nested" / "a.xlsx")

    assert dest.read_bytes() == b"PKdata"
    assert calls == {"url": "https://example.test/a.xlsx", "stream": True, "timeout": 60}


def test_http_error_removes_partial_file(monkeypatch, tmp_path):
    monkeypatch.setattr(fetch.requests, "get", lambda *a, **k: FakeResponse([], 404))
    dest = tmp_path / "a.xlsx"
    with pytest.raises(requests.HTTPError):
        download_file("https://example.test/a.xlsx", dest)
    assert not dest.exists()


def test_interrupted_stream_removes_partial_file(monkeypatch, tmp_path):
    broken = FakeResponse([b"PK", requests.ConnectionError("reset")])
    monkeypatch.setattr(fetch.requests, "get", lambda *a, **k: broken)
    dest = tmp_path / "a.xlsx"
    with pytest.raises(requests.ConnectionError):
        download_file("https://example.test/a.xlsx", dest)
    assert not dest.exists()
