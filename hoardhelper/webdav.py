"""WebDAV client used to upload organised files to the remote library.

The client is an explicit object built from Settings and passed to the
upload queue; nothing here is module state.
"""
from __future__ import annotations

import logging
import os
import time
from typing import BinaryIO, Callable
from urllib.parse import quote, urlparse

import requests

from .models import ExportResult
from .settings import Settings

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 1024 * 1024

FILE_EXISTS_ERROR = "File already exists"

ProgressCallback = Callable[[int], None]
ConnectionCallback = Callable[[bool, str | None], None]


class WebDAVError(Exception):
    """Exception raised for WebDAV transport errors."""
    pass


def is_local_host(hostname: str | None) -> bool:
    """True for loopback and common private-network hosts."""
    if not hostname:
        return False
    return (
        hostname in ("localhost", "127.0.0.1")
        or hostname.startswith("192.168.")
        or hostname.startswith("10.")
    )


class _ProgressReader:
    """File wrapper that reports upload progress as integer percent."""

    def __init__(self, fileobj: BinaryIO, total: int, on_progress: ProgressCallback | None):
        self._fileobj = fileobj
        self._total = total
        self._sent = 0
        self._on_progress = on_progress

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        chunk = self._fileobj.read(CHUNK_SIZE if size is None or size < 0 else size)
        if chunk:
            self._sent += len(chunk)
            if self._on_progress:
                percent = round(self._sent * 100 / self._total) if self._total else 100
                self._on_progress(percent)
        return chunk


class WebDAVClient:
    """Minimal WebDAV client (PROPFIND, MKCOL, PUT) on a requests Session."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """
        Initialize the client.

        Args:
            url: Base URL of the WebDAV root
            username: Account name
            password: Account password or app token
            timeout: Per-request timeout in seconds
            session: Optional pre-built session

        Raises:
            WebDAVError: If the URL cannot be parsed
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise WebDAVError(f"Invalid WebDAV URL: {url!r}")
        if parsed.scheme != "https" and not is_local_host(parsed.hostname):
            log.warning(
                "Connection to %s is not HTTPS; this is unsafe for remote transfers",
                parsed.hostname,
            )

        self.base_url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, password)

    @classmethod
    def from_settings(cls, settings: Settings) -> WebDAVClient:
        if not settings.has_credentials:
            raise WebDAVError("WebDAV URL, username and password must all be set")
        return cls(settings.url, settings.username, settings.password)

    def _url(self, remote_path: str) -> str:
        path = "/" + remote_path.replace("\\", "/").lstrip("/")
        return self.base_url + quote(path, safe="/()")

    def _request(self, method: str, remote_path: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(
                method, self._url(remote_path), timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise WebDAVError(f"{method} {remote_path} failed: {e}") from e

    # -- public API ------------------------------------------------

    def test_connection(self) -> bool:
        """List the root collection; raises WebDAVError when that fails."""
        response = self._request("PROPFIND", "/", headers={"Depth": "1"})
        if response.status_code in (200, 207):
            return True
        raise WebDAVError(f"Connection test failed: HTTP {response.status_code}")

    def exists(self, remote_path: str) -> bool:
        response = self._request("PROPFIND", remote_path, headers={"Depth": "0"})
        if response.status_code == 404:
            return False
        if response.status_code in (200, 207):
            return True
        raise WebDAVError(
            f"Could not stat {remote_path}: HTTP {response.status_code}"
        )

    def create_directory(self, remote_path: str) -> None:
        response = self._request("MKCOL", remote_path)
        # 405: the collection already exists
        if response.status_code not in (200, 201, 405):
            raise WebDAVError(
                f"Could not create {remote_path}: HTTP {response.status_code}"
            )

    def ensure_remote_dir(self, remote_path: str) -> None:
        """Create every missing collection along *remote_path*."""
        parts = [p for p in remote_path.replace("\\", "/").split("/") if p]
        log.debug("Ensuring directory exists: %s", remote_path)

        current = ""
        for part in parts:
            current += "/" + part
            if not self.exists(current):
                log.info("Creating directory: %s", current)
                self.create_directory(current)

    def upload(
        self,
        local_path: str,
        remote_destination: str | None,
        on_progress: ProgressCallback | None = None,
    ) -> ExportResult:
        """
        Stream a local file to *remote_destination*.

        Existing remote files are never overwritten.

        Args:
            local_path: Source file
            remote_destination: Remote path, with or without leading '/'
            on_progress: Called with the integer percent sent so far

        Returns:
            ExportResult
        """
        if not remote_destination:
            return ExportResult(success=False, error="Invalid remote path")
        if not remote_destination.startswith("/"):
            remote_destination = "/" + remote_destination

        log.info("Starting upload: %s -> %s", local_path, remote_destination)
        try:
            self.ensure_remote_dir(remote_destination.rsplit("/", 1)[0])
            total = os.path.getsize(local_path)
            with open(local_path, "rb") as f:
                response = self._request(
                    "PUT",
                    remote_destination,
                    data=_ProgressReader(f, total, on_progress),
                    headers={"If-None-Match": "*"},
                )
        except WebDAVError as e:
            log.error("Upload setup failed: %s", e)
            return ExportResult(success=False, error=str(e))
        except OSError as e:
            log.error("Local file read error: %s", e)
            return ExportResult(success=False, error=f"Local file read error: {e}")

        if response.status_code == 412:
            return ExportResult(success=False, error=FILE_EXISTS_ERROR)
        if response.status_code not in (200, 201, 204):
            return ExportResult(
                success=False,
                error=f"Upload failed: HTTP {response.status_code}",
            )

        log.info("Upload finished: %s", remote_destination)
        return ExportResult(success=True)


def check_connection(client: WebDAVClient) -> tuple[bool, str | None]:
    """Run one connection test; returns (online, error message)."""
    try:
        client.test_connection()
    except WebDAVError as e:
        return False, str(e)
    return True, None


def monitor_connection(
    client: WebDAVClient,
    interval: float,
    on_change: ConnectionCallback,
    checks: int | None = None,
) -> bool:
    """
    Poll the server every *interval* seconds, reporting state changes.

    Args:
        client: Client to test
        interval: Seconds between checks
        on_change: Called with (online, error) on the first check and
                   whenever the state flips
        checks: Stop after this many checks (None: run until interrupted)

    Returns:
        The state of the last check
    """
    previous = None
    done = 0
    while True:
        online, error = check_connection(client)
        done += 1
        if online != previous:
            if online:
                log.info("Connection to %s is up", client.base_url)
            else:
                log.warning("Connection to %s lost: %s", client.base_url, error)
            on_change(online, error)
            previous = online
        if checks is not None and done >= checks:
            return online
        time.sleep(interval)
