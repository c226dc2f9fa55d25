from __future__ import annotations

import logging

import requests

from .errors import HttpFailure

log = logging.getLogger(__name__)


class HttpClient:
    """Blocking HTTP transport used for catalog listings and artifact downloads."""

    def __init__(self, timeout: float | None = None, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def get(self, url: str) -> requests.Response:
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HttpFailure(url, str(exc)) from exc
        if r.status_code >= 400:
            raise HttpFailure(url, r.reason or "", status_code=r.status_code)
        return r

    def download(self, url: str) -> bytes:
        log.info("downloading %s...", url)
        try:
            r = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HttpFailure(url, str(exc)) from exc
        if r.status_code >= 400:
            r.close()
            raise HttpFailure(url, r.reason or "", status_code=r.status_code)

        chunks: list[bytes] = []
        try:
            for chunk in r.iter_content(chunk_size=1024 * 1024):
                if chunk:
                    chunks.append(chunk)
        except requests.RequestException as exc:
            raise HttpFailure(url, str(exc)) from exc
        finally:
            r.close()
        return b"".join(chunks)
