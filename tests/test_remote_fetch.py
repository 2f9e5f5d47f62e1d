"""
Tests for the remote fetch — status handling, retries, timeout propagation.

``urllib.request.urlopen`` is replaced in every test; nothing touches the
network.
"""

from __future__ import annotations

import http.client
import io
import urllib.error

import pytest

from ossm_gitops.core.services import remote_fetch
from ossm_gitops.core.services.remote_fetch import FetchResult, fetch_remote

URL = "https://example.test/bookinfo.yaml"


class _Response(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Install a scripted urlopen; each call pops the next outcome."""
    outcomes: list = []
    calls: list[dict] = []

    def urlopen(req, timeout=None):
        calls.append({"url": req.full_url, "timeout": timeout, "ua": req.get_header("User-agent")})
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(remote_fetch.urllib.request, "urlopen", urlopen)
    monkeypatch.setattr(remote_fetch.time, "sleep", lambda _s: None)
    urlopen.outcomes = outcomes
    urlopen.calls = calls
    return urlopen


class TestFetchRemote:
    def test_success(self, fake_urlopen):
        fake_urlopen.outcomes.append(_Response(b"kind: Service\n"))
        result = fetch_remote(URL, timeout=4)

        assert result.ok is True
        assert result.status == 200
        assert result.content == b"kind: Service\n"
        assert result.size_bytes == 14
        assert result.attempts == 1
        assert fake_urlopen.calls[0]["timeout"] == 4
        assert fake_urlopen.calls[0]["ua"].startswith("ossm-gitops/")

    def test_http_error_is_failure_not_content(self, fake_urlopen):
        fake_urlopen.outcomes.append(
            urllib.error.HTTPError(URL, 404, "Not Found", {}, io.BytesIO(b"404: Not Found"))
        )
        result = fetch_remote(URL)

        assert result.ok is False
        assert result.status == 404
        assert result.content == b""
        assert "404" in result.error

    def test_non_2xx_status_without_exception(self, fake_urlopen):
        fake_urlopen.outcomes.append(_Response(b"moved", status=304))
        result = fetch_remote(URL)
        assert result.ok is False
        assert result.status == 304

    def test_unreachable_host(self, fake_urlopen):
        fake_urlopen.outcomes.append(urllib.error.URLError("Name or service not known"))
        result = fetch_remote(URL)
        assert result.ok is False
        assert result.status is None
        assert "Name or service not known" in result.error

    def test_timeout(self, fake_urlopen):
        fake_urlopen.outcomes.append(TimeoutError("timed out"))
        result = fetch_remote(URL, timeout=2)
        assert result.ok is False
        assert "Timed out after 2s" in result.error

    def test_retries_until_success(self, fake_urlopen):
        fake_urlopen.outcomes.extend([
            urllib.error.URLError("reset"),
            urllib.error.URLError("reset"),
            _Response(b"ok"),
        ])
        result = fetch_remote(URL, retries=2)
        assert result.ok is True
        assert result.attempts == 3
        assert len(fake_urlopen.calls) == 3

    def test_retries_exhausted(self, fake_urlopen):
        fake_urlopen.outcomes.extend([urllib.error.URLError("down")] * 2)
        result = fetch_remote(URL, retries=1)
        assert result.ok is False
        assert result.attempts == 2


class TestMalformedInput:
    def test_url_without_scheme(self, fake_urlopen):
        result = fetch_remote("raw.githubusercontent.com/istio/bookinfo.yaml")
        assert result.ok is False
        assert "Invalid URL" in result.error
        assert result.attempts == 1
        assert fake_urlopen.calls == []

    def test_bad_port(self, fake_urlopen):
        fake_urlopen.outcomes.append(http.client.InvalidURL("nonnumeric port: 'abc'"))
        result = fetch_remote("http://host:abc/")
        assert result.ok is False
        assert "nonnumeric port" in result.error

    def test_truncated_body(self, fake_urlopen):
        fake_urlopen.outcomes.append(http.client.IncompleteRead(b"kind: Serv", 40))
        result = fetch_remote(URL)
        assert result.ok is False
        assert result.content == b""
        assert "IncompleteRead" in result.error

    def test_retries_after_bad_response(self, fake_urlopen):
        fake_urlopen.outcomes.extend([
            http.client.RemoteDisconnected("closed"),
            _Response(b"kind: Service\n"),
        ])
        result = fetch_remote(URL, retries=1)
        assert result.ok is True
        assert result.attempts == 2


class TestFetchResult:
    def test_to_dict(self):
        d = FetchResult(url=URL, ok=True, status=200, content=b"abc", attempts=1).to_dict()
        assert d == {
            "url": URL,
            "ok": True,
            "status": 200,
            "size_bytes": 3,
            "error": None,
            "attempts": 1,
        }
