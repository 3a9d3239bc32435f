from __future__ import annotations

"""Minimal JSON-over-HTTP GET with bounded retries, used by the rate providers.

Kept on urllib so the rate layer has no transport dependency of its own.
"""
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger("ledgerlens.http")


class HttpError(Exception):
    pass


def get_json(
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    if params:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}{urllib.parse.urlencode(params)}"
    request = urllib.request.Request(url, headers={"Accept": "application/json"})
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
                if resp.status >= 400:
                    raise HttpError(f"HTTP {resp.status} for {url}")
                payload = json.loads(resp.read().decode("utf-8"))
                if not isinstance(payload, dict):
                    raise HttpError(f"unexpected JSON payload from {url}")
                return payload
        except (
            urllib.error.URLError,
            TimeoutError,
            HttpError,
            ValueError,
        ) as e:  # ValueError for JSON decode
            last_err = e
            if attempt == retries:
                break
            logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, e)
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
