"""
Tests for core/data.py: dataset retrieval never raises, image fetches time out.
"""
import json

import requests

from core.data import build_session, fetch_image, fetch_rows


class FakeResponse:
    def __init__(self, payload=None, status=200, content=b"", bad_json=False):
        self.payload = payload
        self.status_code = status
        self.content = content
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


REMOTE = "https://script.example.com/exec"


class TestFetchRowsRemote:
    def test_returns_rows(self, settings, sample_rows):
        http = FakeSession(FakeResponse(sample_rows))
        assert fetch_rows(REMOTE, settings=settings, session=http) == sample_rows
        assert http.calls == [(REMOTE, settings.fetch_timeout)]

    def test_http_error_gives_empty(self, settings, caplog):
        http = FakeSession(FakeResponse(status=500))
        assert fetch_rows(REMOTE, settings=settings, session=http) == []
        assert "Error fetching data" in caplog.text

    def test_network_error_gives_empty(self, settings):
        http = FakeSession(exc=requests.ConnectionError("refused"))
        assert fetch_rows(REMOTE, settings=settings, session=http) == []

    def test_malformed_json_gives_empty(self, settings):
        http = FakeSession(FakeResponse(bad_json=True))
        assert fetch_rows(REMOTE, settings=settings, session=http) == []

    def test_non_array_gives_empty(self, settings):
        http = FakeSession(FakeResponse({"error": "quota"}))
        assert fetch_rows(REMOTE, settings=settings, session=http) == []

    def test_empty_array_gives_empty(self, settings):
        assert fetch_rows(REMOTE, settings=settings, session=FakeSession(FakeResponse([]))) == []

    def test_non_list_rows_become_empty_rows(self, settings):
        http = FakeSession(FakeResponse([["h"], "junk", ["a"]]))
        assert fetch_rows(REMOTE, settings=settings, session=http) == [["h"], [], ["a"]]


class TestFetchRowsLocal:
    def test_settings_path(self, settings, rows_file, sample_rows):
        assert fetch_rows(settings=settings) == sample_rows

    def test_file_scheme(self, settings, rows_file, sample_rows):
        assert fetch_rows(f"file://{rows_file}", settings=settings) == sample_rows

    def test_missing_file_gives_empty(self, settings, tmp_path):
        assert fetch_rows(str(tmp_path / "nope.json"), settings=settings) == []

    def test_invalid_json_file_gives_empty(self, settings, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert fetch_rows(str(path), settings=settings) == []

    def test_object_file_gives_empty(self, settings, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text(json.dumps({"rows": []}), encoding="utf-8")
        assert fetch_rows(str(path), settings=settings) == []


class TestFetchImage:
    def test_success(self):
        http = FakeSession(FakeResponse(content=b"\x89PNG"))
        assert fetch_image("https://t/x", timeout=3, session=http) == b"\x89PNG"
        assert http.calls == [("https://t/x", 3)]

    def test_timeout(self, caplog):
        http = FakeSession(exc=requests.Timeout("slow"))
        assert fetch_image("https://t/x", timeout=0.1, session=http) is None
        assert "timed out" in caplog.text

    def test_http_error(self):
        assert fetch_image("https://t/x", timeout=1, session=FakeSession(FakeResponse(status=404))) is None


def test_build_session_mounts_retries():
    session = build_session(retries=4, backoff_factor=0.5)
    adapter = session.get_adapter("https://example.com")
    assert adapter.max_retries.total == 4
    assert 503 in adapter.max_retries.status_forcelist
    session.close()
