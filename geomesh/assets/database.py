# geomesh/assets/database.py
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from geomesh.assets.fetch import FileSource, LocalFileSource, OnlineFileSource
from geomesh.assets.loader import MeshLoader
from geomesh.assets.registry import AssetRecord, AssetRegistry
from geomesh.assets.types import AssetDescriptor, AssetSource, LoadStatus
from geomesh.errors import (
    DuplicateAssetError,
    MissingFetchSourceError,
    UnknownAssetError,
)
from geomesh.mesh import Mesh
from geomesh.settings import GeomeshSettings

logger = logging.getLogger(__name__)


class AssetDatabase:
    """
    Registry of map assets plus the policy for loading them.

    Not thread-safe: register, query_ready and update must all be called
    from the thread that owns the database. Fetch completions are held by
    the sources until update() delivers them on that thread.
    """

    def __init__(
        self,
        sources: Optional[Dict[AssetSource, FileSource]] = None,
        loader: Optional[MeshLoader] = None,
        settings: Optional[GeomeshSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or GeomeshSettings()
        self.registry = AssetRegistry()
        self._clock = clock

        if sources is None:
            sources = {
                AssetSource.FILE: LocalFileSource(
                    self.settings.asset_root,
                    max_workers=self.settings.fetch.max_workers,
                ),
                AssetSource.WEB: OnlineFileSource(self.settings.fetch),
            }
        self._sources: Dict[AssetSource, FileSource] = dict(sources)

        self._loader = loader or MeshLoader.create_obj_loader()
        self._loader.on_loaded(self._on_mesh_loaded)

        self._newly_ready: List[str] = []

    # -- Registration --
    def register(
        self, descriptor: AssetDescriptor, replace: bool = False
    ) -> AssetDatabase:
        """
        Add an asset. A known uri raises DuplicateAssetError unless replace
        is set, in which case the old record's load is cancelled and the
        asset starts over from an unloaded state.
        """
        existing = self.registry.get(descriptor.uri)
        if existing is not None:
            if not replace:
                raise DuplicateAssetError(descriptor.uri)
            self._cancel(existing)
            logger.info("Replacing asset %s", descriptor.uri)
        else:
            logger.info(
                "Registered asset %s (%s)", descriptor.uri, descriptor.source.value
            )

        self.registry.store(AssetRecord(descriptor))
        return self

    def unregister(self, uri: str) -> None:
        record = self.registry.remove(uri)
        if record is None:
            raise UnknownAssetError(uri)
        self._cancel(record)
        logger.info("Unregistered asset %s", uri)

    def add_source(self, kind: AssetSource, source: FileSource) -> None:
        self._sources[AssetSource(kind)] = source

    # -- Queries --
    def get_mesh(self, uri: str) -> Optional[Mesh]:
        """Loaded mesh for uri, or None. Never starts a load."""
        record = self.registry.get(uri)
        return record.mesh if record is not None else None

    def record(self, uri: str) -> AssetRecord:
        record = self.registry.get(uri)
        if record is None:
            raise UnknownAssetError(uri)
        return record

    def __contains__(self, uri: str) -> bool:
        return uri in self.registry

    def __len__(self) -> int:
        return len(self.registry)

    def query_ready(
        self, out: Optional[List[AssetDescriptor]] = None
    ) -> List[AssetDescriptor]:
        """
        Append the descriptor of every loaded asset to out and return it.

        Also starts a load for every asset that has no mesh, is not loading
        and is not backing off after a failure. Meant to be called once per
        frame.
        """
        ready = out if out is not None else []
        now = self._clock()

        for record in self.registry:
            if record.mesh is not None:
                ready.append(record.descriptor)
            elif record.due(now):
                self._start_load(record)

        return ready

    def update(self) -> List[str]:
        """
        Called on the owning thread every frame.
        Delivers finished fetches and returns the uris that became ready.
        """
        for source in self._sources.values():
            source.dispatch()

        loaded, self._newly_ready = self._newly_ready, []
        return loaded

    def reset_failures(self, uri: str) -> None:
        """Allow an asset that gave up to be loaded again."""
        record = self.record(uri)
        record.failures = 0
        record.exhausted = False
        record.retry_at = 0.0
        record.last_status = None

    def shutdown(self, wait: bool = True) -> None:
        for record in self.registry:
            self._cancel(record)
        for source in self._sources.values():
            source.shutdown(wait=wait)

    # -- Loading --
    def _source_for(self, kind: AssetSource) -> FileSource:
        source = self._sources.get(kind)
        if source is None:
            raise MissingFetchSourceError(kind)
        return source

    def _start_load(self, record: AssetRecord) -> None:
        source = self._source_for(record.descriptor.source)
        # Set first: the loader may report back before load_mesh returns
        record.loading = True
        request_id = self._loader.load_mesh(record.uri, source)
        if record.loading:
            record.request_id = request_id

    def _cancel(self, record: AssetRecord) -> None:
        if record.request_id is not None:
            self._loader.cancel(record.request_id)
        record.request_id = None
        record.loading = False

    def _on_mesh_loaded(
        self, status: LoadStatus, uri: str, mesh: Optional[Mesh]
    ) -> None:
        record = self.registry.get(uri)
        if record is None or not record.loading:
            logger.debug("Dropping load result for %s: not awaited", uri)
            return

        record.loading = False
        record.request_id = None
        record.last_status = status

        if status is LoadStatus.OK and mesh is not None:
            record.mesh = mesh
            record.failures = 0
            record.retry_at = 0.0
            self._newly_ready.append(uri)
            logger.info(
                "Loaded %s: %d vertices, %d triangles",
                uri,
                mesh.vertex_count,
                mesh.triangle_count,
            )
            return

        record.failures += 1
        retry = self.settings.retry
        if retry.exhausted(record.failures):
            record.exhausted = True
            logger.warning(
                "Giving up on %s after %d attempts (%s)",
                uri,
                record.failures,
                status.value,
            )
        else:
            delay = retry.delay_for(record.failures)
            record.retry_at = self._clock() + delay
            logger.warning(
                "Failed to load %s (%s), retrying in %.2fs", uri, status.value, delay
            )
