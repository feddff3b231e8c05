# ingestion/client.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class FetchError(RuntimeError):
    pass


def _host(url: str) -> str:
    # never log full URLs, Infura keys live in the path
    return urlsplit(url).netloc or url


class HttpClient:
    """
    One long-lived HTTP session shared by every fetcher in a run.

    Timeouts, connection errors, 429 and 5xx responses are retried with
    exponential backoff; anything else, or running out of attempts, raises
    FetchError.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.timeout = timeout
        self.max_retries = max(0, int(max_retries))
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()
        self._sleep = sleep

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", url, params=params)

    def post_json(self, url: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", url, json=payload)

    def _request(self, method: str, url: str, **kwargs) -> Any:
        last_err: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                r = self.session.request(method, url, timeout=self.timeout, **kwargs)
                if r.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(f"{r.status_code} {r.reason}", response=r)
                r.raise_for_status()
                return r.json()
            except (requests.Timeout, requests.ConnectionError) as e:
                last_err = e
            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status not in RETRYABLE_STATUS:
                    raise FetchError(f"{method} {_host(url)} failed: {e}") from e
                last_err = e
            except ValueError as e:
                raise FetchError(f"{method} {_host(url)} returned invalid JSON") from e

            if attempt < self.max_retries:
                delay = min(8.0, self.backoff_seconds * (2 ** attempt))
                logger.debug("%s %s attempt %d failed (%s), retrying in %.1fs",
                             method, _host(url), attempt + 1, last_err, delay)
                self._sleep(delay)

        raise FetchError(
            f"{method} {_host(url)} failed after {self.max_retries + 1} attempts: {last_err}"
        ) from last_err
