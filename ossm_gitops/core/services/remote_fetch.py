"""
Remote fetch — the single outbound HTTP GET of a generation run.

The fetched body is opaque: no checksum, signature or content-type
verification.  What *is* checked is the transport outcome (DNS, timeout,
non-2xx), so a failure can be reported instead of written to disk.
"""

from __future__ import annotations

import http.client
import logging
import time
import urllib.error
import urllib.request
from dataclasses import dataclass

from ossm_gitops import __version__

logger = logging.getLogger(__name__)

_USER_AGENT = f"ossm-gitops/{__version__}"


@dataclass
class FetchResult:
    """Outcome of a remote fetch."""

    url: str
    ok: bool = False
    status: int | None = None
    content: bytes = b""
    error: str | None = None
    attempts: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "ok": self.ok,
            "status": self.status,
            "size_bytes": self.size_bytes,
            "error": self.error,
            "attempts": self.attempts,
        }


def _fetch_once(url: str, timeout: float) -> FetchResult:
    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.status
            body = resp.read()
    except urllib.error.HTTPError as exc:
        return FetchResult(url=url, status=exc.code, error=f"HTTP {exc.code}: {exc.reason}")
    except urllib.error.URLError as exc:
        return FetchResult(url=url, error=f"Cannot reach {url}: {exc.reason}")
    except TimeoutError:
        return FetchResult(url=url, error=f"Timed out after {timeout}s")
    except OSError as exc:
        return FetchResult(url=url, error=f"Fetch failed: {exc}")
    except http.client.HTTPException as exc:
        # Truncated body, malformed status line, bad port
        return FetchResult(url=url, error=f"Bad HTTP response from {url}: {exc!r}")
    except ValueError as exc:
        return FetchResult(url=url, error=f"Invalid URL {url!r}: {exc}")

    if not 200 <= status < 300:
        return FetchResult(url=url, status=status, error=f"HTTP {status}")
    return FetchResult(url=url, ok=True, status=status, content=body)


def fetch_remote(
    url: str,
    *,
    timeout: float = 10.0,
    retries: int = 0,
    backoff: float = 1.0,
) -> FetchResult:
    """Fetch ``url`` and return its body.

    Never raises for network problems, bad responses or malformed URLs;
    the caller decides whether a failed ``FetchResult`` is fatal.

    Args:
        url: Absolute http(s) URL.
        timeout: Per-attempt timeout in seconds.
        retries: Extra attempts after the first failure.
        backoff: Seconds to wait between attempts.

    Returns:
        FetchResult with ``ok`` set and ``attempts`` counted.
    """
    attempts = retries + 1
    result = FetchResult(url=url)
    for attempt in range(1, attempts + 1):
        logger.debug("GET %s (attempt %d/%d, timeout=%ss)", url, attempt, attempts, timeout)
        result = _fetch_once(url, timeout)
        result.attempts = attempt
        if result.ok:
            logger.info("Fetched %s (%d bytes)", url, result.size_bytes)
            return result
        logger.debug("Fetch attempt %d failed: %s", attempt, result.error)
        if attempt < attempts and backoff > 0:
            time.sleep(backoff)
    return result
