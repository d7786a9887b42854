# geomesh/assets/loader.py
from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from geomesh.assets.fetch import (
    AsyncRequest,
    ErrorReason,
    FileSource,
    ResourceKind,
    Response,
    ResponseError,
)
from geomesh.assets.importers.base import MeshParser
from geomesh.assets.importers.obj import ObjParser
from geomesh.assets.types import LoadStatus, MeshLoadedCallback

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PendingRequest:
    id: int
    uri: str
    handle: Optional[AsyncRequest] = None


class MeshLoader(ABC):
    @abstractmethod
    def load_mesh(self, uri: str, source: FileSource) -> Optional[int]:
        """
        Start loading uri through source.
        Returns the request id, or None when no request was issued.
        """
        pass

    @abstractmethod
    def on_loaded(self, callback: Optional[MeshLoadedCallback]) -> None:
        """Register the completion callback, replacing any previous one."""
        pass

    @abstractmethod
    def cancel(self, request_id: int) -> bool:
        """Abandon an in-flight request. Its callback will not fire."""
        pass

    @property
    @abstractmethod
    def pending(self) -> int:
        pass

    @staticmethod
    def create_obj_loader() -> MeshLoader:
        return ObjMeshLoader()


def to_load_status(error: ResponseError) -> LoadStatus:
    if error.reason is ErrorReason.SUCCESS:
        return LoadStatus.OK
    if error.reason is ErrorReason.NOT_FOUND:
        return LoadStatus.NOT_FOUND
    return LoadStatus.UNKNOWN_ERROR


class ObjMeshLoader(MeshLoader):
    def __init__(self, parser: Optional[MeshParser] = None) -> None:
        self._parser = parser or ObjParser()
        self._callback: Optional[MeshLoadedCallback] = None
        self._requests: Dict[int, PendingRequest] = {}
        self._ids = itertools.count()

    @property
    def pending(self) -> int:
        return len(self._requests)

    def is_pending(self, request_id: int) -> bool:
        return request_id in self._requests

    def on_loaded(self, callback: Optional[MeshLoadedCallback]) -> None:
        self._callback = callback

    def load_mesh(self, uri: str, source: FileSource) -> Optional[int]:
        # Nobody would receive the result
        if self._callback is None:
            return None
        if not uri:
            self._callback(LoadStatus.OK, uri, None)
            return None

        # Registered before the fetch exists so a fast completion finds it
        req_id = next(self._ids)
        pending = PendingRequest(req_id, uri)
        self._requests[req_id] = pending

        pending.handle = source.request(
            ResourceKind.MESH,
            uri,
            lambda response: self._on_response(req_id, uri, response),
        )
        logger.debug("Mesh request %d issued for %s", req_id, uri)
        return req_id

    def cancel(self, request_id: int) -> bool:
        pending = self._requests.pop(request_id, None)
        if pending is None:
            return False
        if pending.handle is not None:
            pending.handle.cancel()
        logger.debug("Mesh request %d for %s cancelled", request_id, pending.uri)
        return True

    def _on_response(self, req_id: int, uri: str, response: Response) -> None:
        if self._requests.pop(req_id, None) is None:
            logger.debug("Ignoring completion of stale request %d", req_id)
            return

        if response.error is not None:
            status = to_load_status(response.error)
            logger.debug(
                "Fetch of %s failed: %s %s",
                uri,
                response.error.reason.value,
                response.error.message,
            )
            self._notify(status, uri, None)
        elif response.not_modified:
            # TODO: reuse the previously parsed mesh once revalidation keeps it
            self._notify(LoadStatus.UNKNOWN_ERROR, uri, None)
        else:
            report, mesh = self._parser.parse(response.data or b"")
            self._notify(report.status, uri, mesh if report.ok else None)

    def _notify(self, status, uri, mesh) -> None:
        if self._callback is not None:
            self._callback(status, uri, mesh)
