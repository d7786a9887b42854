# geomesh/assets/registry.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional

from geomesh.assets.types import AssetDescriptor, LoadStatus
from geomesh.mesh import Mesh


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(slots=True)
class AssetRecord:
    """
    Mutable load state of one registered asset.
    loading and mesh are never set at the same time.
    """

    descriptor: AssetDescriptor
    loading: bool = False
    mesh: Optional[Mesh] = None
    request_id: Optional[int] = None
    failures: int = 0
    last_status: Optional[LoadStatus] = None
    retry_at: float = 0.0
    exhausted: bool = False

    @property
    def uri(self) -> str:
        return self.descriptor.uri

    @property
    def state(self) -> LoadState:
        if self.mesh is not None:
            return LoadState.READY
        if self.loading:
            return LoadState.LOADING
        if self.failures:
            return LoadState.FAILED
        return LoadState.IDLE

    def due(self, now: float) -> bool:
        """Should a load be started for this record at time now."""
        return (
            self.mesh is None
            and not self.loading
            and not self.exhausted
            and now >= self.retry_at
        )


class AssetRegistry:
    """
    Stores asset records keyed by uri, in registration order.
    """

    def __init__(self) -> None:
        self._storage: Dict[str, AssetRecord] = {}

    def store(self, record: AssetRecord) -> None:
        self._storage[record.uri] = record

    def get(self, uri: str) -> Optional[AssetRecord]:
        return self._storage.get(uri)

    def remove(self, uri: str) -> Optional[AssetRecord]:
        return self._storage.pop(uri, None)

    def __contains__(self, uri: str) -> bool:
        return uri in self._storage

    def __iter__(self) -> Iterator[AssetRecord]:
        return iter(list(self._storage.values()))

    def __len__(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        """Forget every record (use with caution)."""
        self._storage.clear()
