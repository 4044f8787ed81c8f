import json

import pytest
import requests

from neorisk.config import settings
from neorisk.data import neo_fetcher
from neorisk.errors import FetchError

HORIZONS_TEXT = (
    "header\n$$SOE\n"
    "2460000.5, A.D. 2023-Feb-25 00:00:00.0000, 1, 2, 3, 4, 5, 6,\n"
    "$$EOE\n"
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "OUTPUT_DIR", str(tmp_path))
    return tmp_path


def _fake_get(response=None, exc=None, calls=None):
    def _get(url, params=None, headers=None, timeout=None):
        if calls is not None:
            calls.append((url, params))
        if exc is not None:
            raise exc
        return response
    return _get


def test_neo_lookup_uses_api_key_and_caches(monkeypatch):
    calls = []
    monkeypatch.setenv("NASA_API_KEY", "abc123")
    monkeypatch.setattr(requests, "get", _fake_get(FakeResponse(payload={"name": "Apophis"}), calls=calls))

    doc = neo_fetcher.fetch_neo_lookup("2099942")
    assert doc == {"name": "Apophis"}
    assert calls[0][0].endswith("/neo/2099942")
    assert calls[0][1] == {"api_key": "abc123"}

    # second call served from the fresh cache
    doc = neo_fetcher.fetch_neo_lookup("2099942")
    assert doc == {"name": "Apophis"}
    assert len(calls) == 1


def test_demo_key_by_default(monkeypatch):
    calls = []
    monkeypatch.delenv("NASA_API_KEY", raising=False)
    monkeypatch.setattr(requests, "get", _fake_get(FakeResponse(payload={"name": "X"}), calls=calls))
    neo_fetcher.fetch_neo_lookup("1")
    assert calls[0][1] == {"api_key": "DEMO_KEY"}


def test_network_failure_uses_fallback_file(monkeypatch, tmp_path):
    fallback = tmp_path / "asteroid.json"
    fallback.write_text(json.dumps({"name": "Local"}), encoding="utf-8")
    monkeypatch.setattr(requests, "get", _fake_get(exc=requests.ConnectionError("offline")))

    assert neo_fetcher.fetch_neo_lookup("2099942", fallback_path=str(fallback)) == {"name": "Local"}


def test_http_error_without_fallback_raises(monkeypatch):
    monkeypatch.setattr(requests, "get", _fake_get(FakeResponse(status_code=500)))
    with pytest.raises(FetchError):
        neo_fetcher.fetch_neo_lookup("2099942")


def test_stale_cache_beats_fallback(monkeypatch, tmp_path):
    cache = {
        "neows:7": {
            "timestamp": "2000-01-01T00:00:00+00:00",
            "payload": {"name": "Cached"},
            "source": "network",
            "status": "ok",
        }
    }
    (tmp_path / settings.FETCH_CACHE_FILE).write_text(json.dumps(cache), encoding="utf-8")
    monkeypatch.setattr(requests, "get", _fake_get(exc=requests.Timeout("slow")))

    assert neo_fetcher.fetch_neo_lookup("7") == {"name": "Cached"}


def test_horizons_vectors_request_and_validation(monkeypatch):
    calls = []
    monkeypatch.setattr(requests, "get", _fake_get(FakeResponse(text=HORIZONS_TEXT), calls=calls))

    text = neo_fetcher.fetch_horizons_vectors("399", "2023-02-25", "2023-03-25")
    assert "$$SOE" in text
    params = calls[0][1]
    assert params["EPHEM_TYPE"] == "VECTORS"
    assert params["COMMAND"] == "'399'"
    assert params["CENTER"] == "'500@10'"


def test_horizons_html_error_page_rejected(monkeypatch):
    monkeypatch.setattr(requests, "get", _fake_get(FakeResponse(text="<html>error</html>")))
    with pytest.raises(FetchError):
        neo_fetcher.fetch_horizons_vectors("99942", "2029-04-01", "2029-05-01")


def test_unreadable_fallback_file_raises_fetch_error(monkeypatch, tmp_path):
    fallback = tmp_path / "asteroid.json"
    fallback.write_text("not json", encoding="utf-8")
    monkeypatch.setattr(requests, "get", _fake_get(exc=requests.ConnectionError("offline")))

    with pytest.raises(FetchError):
        neo_fetcher.fetch_neo_lookup("2099942", fallback_path=str(fallback))


def test_naive_cache_timestamp_is_read_as_utc(monkeypatch, tmp_path):
    cache = {
        "neows:8": {
            "timestamp": "2026-01-01T00:00:00",
            "payload": {"name": "Naive"},
            "source": "network",
            "status": "ok",
        }
    }
    (tmp_path / settings.FETCH_CACHE_FILE).write_text(json.dumps(cache), encoding="utf-8")
    monkeypatch.setattr(requests, "get", _fake_get(exc=requests.ConnectionError("offline")))

    assert neo_fetcher.fetch_neo_lookup("8") == {"name": "Naive"}
