# geomesh/assets/fetch.py
"""
Byte-fetching capabilities used by the mesh loader.

Fetches run on a worker pool. Completions are queued and only delivered
when the owning thread calls FileSource.dispatch(), so callbacks never run
concurrently with the code that owns loader and database state.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Empty, Queue
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests

from geomesh.settings import FetchSettings

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    UNKNOWN = "unknown"
    MESH = "mesh"


class ErrorReason(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not-found"
    SERVER = "server"
    CONNECTION = "connection"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ResponseError:
    reason: ErrorReason
    message: str = ""


@dataclass(frozen=True, slots=True)
class Response:
    error: Optional[ResponseError] = None
    not_modified: bool = False
    data: Optional[bytes] = None
    etag: Optional[str] = None


ResponseCallback = Callable[[Response], None]


class AsyncRequest:
    """Handle to an in-flight fetch. Cancelled requests are never delivered."""

    def __init__(self, kind: ResourceKind, uri: str) -> None:
        self.kind = kind
        self.uri = uri
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __repr__(self) -> str:
        return f"AsyncRequest({self.kind.value}, {self.uri!r}, cancelled={self.cancelled})"


class FileSource(ABC):
    def __init__(self, max_workers: int = 2, name: str = "FileSource") -> None:
        self._max_workers = max_workers
        self._name = name
        self._executor: Optional[ThreadPoolExecutor] = None
        self._completed: Queue[Tuple[AsyncRequest, ResponseCallback, Response]] = (
            Queue()
        )

    @abstractmethod
    def fetch(self, kind: ResourceKind, uri: str) -> Response:
        """
        Fetch a resource and describe the outcome as a Response.
        Runs on a worker thread. Must be thread-safe.
        """
        pass

    def request(
        self, kind: ResourceKind, uri: str, callback: ResponseCallback
    ) -> AsyncRequest:
        """
        Non-blocking fetch. Returns the handle instantly; callback runs
        inside a later dispatch() call.
        """
        req = AsyncRequest(kind, uri)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix=self._name
            )
        self._executor.submit(self._worker_fetch, req, callback)
        return req

    def _worker_fetch(self, req: AsyncRequest, callback: ResponseCallback) -> None:
        if req.cancelled:
            return
        try:
            response = self.fetch(req.kind, req.uri)
        except Exception as e:
            logger.exception("%s: fetch of %s raised", self._name, req.uri)
            response = Response(error=ResponseError(ErrorReason.OTHER, str(e)))
        self._deliver(req, callback, response)

    def _deliver(
        self, req: AsyncRequest, callback: ResponseCallback, response: Response
    ) -> None:
        self._completed.put((req, callback, response))

    def dispatch(self) -> int:
        """
        Called on the owning thread.
        Runs callbacks of every completed request. Returns how many ran.
        """
        delivered = 0
        while True:
            try:
                req, callback, response = self._completed.get_nowait()
            except Empty:
                break
            if req.cancelled:
                logger.debug("%s: dropping cancelled %r", self._name, req)
                continue
            callback(response)
            delivered += 1
        return delivered

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None


class LocalFileSource(FileSource):
    """
    Reads files below root. Relative uris must stay below root; absolute
    paths and file:// URIs name a file explicitly and are read as given.
    """

    def __init__(self, root: Path, max_workers: int = 2) -> None:
        super().__init__(max_workers=max_workers, name="LocalFileSource")
        self.root = Path(root)

    def resolve(self, uri: str) -> Path:
        if uri.startswith("file://"):
            parsed = urlparse(uri)
            path = Path(unquote(parsed.netloc + parsed.path))
        else:
            path = Path(uri)
        if path.is_absolute():
            return path
        resolved = (self.root / path).resolve()
        if not resolved.is_relative_to(self.root.resolve()):
            raise ValueError(f"{uri} resolves outside {self.root}")
        return resolved

    def fetch(self, kind: ResourceKind, uri: str) -> Response:
        try:
            path = self.resolve(uri)
        except ValueError as e:
            return Response(error=ResponseError(ErrorReason.OTHER, str(e)))
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return Response(error=ResponseError(ErrorReason.NOT_FOUND, str(path)))
        except OSError as e:
            return Response(error=ResponseError(ErrorReason.OTHER, str(e)))
        return Response(data=data)


class OnlineFileSource(FileSource):
    """
    HTTP(S) fetches through a requests.Session.
    With settings.revalidate the last ETag per uri is sent as If-None-Match
    and a 304 comes back as Response(not_modified=True).
    """

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        super().__init__(
            max_workers=self.settings.max_workers, name="OnlineFileSource"
        )
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.settings.user_agent
        self._session = session
        self._etags: Dict[str, str] = {}
        self._etag_lock = threading.Lock()

    def fetch(self, kind: ResourceKind, uri: str) -> Response:
        headers = {}
        if self.settings.revalidate:
            with self._etag_lock:
                etag = self._etags.get(uri)
            if etag:
                headers["If-None-Match"] = etag

        try:
            resp = self._session.get(
                uri, headers=headers, timeout=self.settings.timeout
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            return Response(error=ResponseError(ErrorReason.CONNECTION, str(e)))
        except requests.RequestException as e:
            return Response(error=ResponseError(ErrorReason.OTHER, str(e)))

        if resp.status_code == 304:
            return Response(not_modified=True, etag=resp.headers.get("ETag"))
        if resp.status_code == 404:
            return Response(error=ResponseError(ErrorReason.NOT_FOUND, uri))
        if resp.status_code >= 500:
            return Response(
                error=ResponseError(ErrorReason.SERVER, f"HTTP {resp.status_code}")
            )
        if resp.status_code >= 400:
            return Response(
                error=ResponseError(ErrorReason.OTHER, f"HTTP {resp.status_code}")
            )

        etag = resp.headers.get("ETag")
        if etag:
            with self._etag_lock:
                self._etags[uri] = etag
        return Response(data=resp.content, etag=etag)

    def shutdown(self, wait: bool = True) -> None:
        super().shutdown(wait=wait)
        self._session.close()
