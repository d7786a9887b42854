from typing import List, Tuple

import pytest

from geomesh.assets.database import AssetDatabase
from geomesh.assets.fetch import (
    AsyncRequest,
    ErrorReason,
    FileSource,
    ResourceKind,
    Response,
    ResponseCallback,
    ResponseError,
)
from geomesh.assets.types import AssetSource
from geomesh.settings import GeomeshSettings, RetrySettings

CUBE_OBJ = """# unit cube
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
v 0 0 1
v 1 0 1
v 1 1 1
v 0 1 1

f 1 3 2
f 1 4 3
f 5 6 7
f 5 7 8
f 1 2 6
f 1 6 5
f 2 3 7
f 2 7 6
f 3 4 8
f 3 8 7
f 4 1 5
f 4 5 8
"""

TRIANGLE_OBJ = """v 0.0 0.0 0.0
v 1.0 0.0 0.0
v 0.0 1.0 0.0
f 1 2 3
"""


class ManualFileSource(FileSource):
    """Fetch source whose requests complete only when a test says so."""

    def __init__(self) -> None:
        super().__init__(name="ManualFileSource")
        self.requests: List[Tuple[AsyncRequest, ResponseCallback]] = []

    def fetch(self, kind: ResourceKind, uri: str) -> Response:
        raise AssertionError("ManualFileSource never fetches on its own")

    def request(self, kind, uri, callback) -> AsyncRequest:
        req = AsyncRequest(kind, uri)
        self.requests.append((req, callback))
        return req

    @property
    def uris(self) -> List[str]:
        return [req.uri for req, _ in self.requests]

    def complete(self, uri: str, response: Response) -> None:
        """Queue the response for the oldest open request of uri."""
        for i, (req, callback) in enumerate(self.requests):
            if req.uri == uri:
                del self.requests[i]
                self._deliver(req, callback, response)
                return
        raise KeyError(uri)

    def succeed(self, uri: str, text: str) -> None:
        self.complete(uri, Response(data=text.encode()))

    def fail(self, uri: str, reason: ErrorReason = ErrorReason.NOT_FOUND) -> None:
        self.complete(uri, Response(error=ResponseError(reason)))


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def manual_source():
    return ManualFileSource()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def database(manual_source, clock):
    """Database whose file and web assets both go through manual_source."""
    settings = GeomeshSettings(
        retry=RetrySettings(max_attempts=3, base_delay=1.0, max_delay=4.0)
    )
    db = AssetDatabase(
        sources={AssetSource.FILE: manual_source, AssetSource.WEB: manual_source},
        settings=settings,
        clock=clock,
    )
    yield db
    db.shutdown()
