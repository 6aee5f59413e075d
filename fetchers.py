"""
Manifest fetchers used by the viewer.

HttpFetcher talks to wherever the built site is hosted (or to server.py
during development). FileFetcher reads straight from the build output
directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

import requests


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class FetchError(Exception):
    """A manifest could not be fetched. status is the HTTP status when known."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class HttpFetcher:
    def __init__(self, base_url: str, session: requests.Session | None = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch_json(self, path: str) -> Any:
        url = self.url_for(path)
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise FetchError(f"HTTP error! status: {response.status_code}", status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}") from e


class FileFetcher:
    def __init__(self, root: Path):
        self.root = Path(root)

    def fetch_json(self, path: str) -> Any:
        file_path = self.root / path.lstrip('/')
        if not file_path.is_file():
            raise FetchError(f"Not found: {file_path}", status=404)
        try:
            return json.loads(file_path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise FetchError(f"Could not read {file_path}: {e}") from e
