# geomesh/errors.py


class GeomeshError(Exception):
    """Base class for errors raised by geomesh."""


class DuplicateAssetError(GeomeshError, KeyError):
    def __init__(self, uri: str) -> None:
        super().__init__(f"Asset '{uri}' is already registered")
        self.uri = uri


class UnknownAssetError(GeomeshError, KeyError):
    def __init__(self, uri: str) -> None:
        super().__init__(f"Asset '{uri}' is not registered")
        self.uri = uri


class MissingFetchSourceError(GeomeshError, LookupError):
    def __init__(self, source: object) -> None:
        super().__init__(f"No fetch source registered for '{source}'")
        self.source = source


class ObjParseError(GeomeshError, ValueError):
    """Malformed OBJ input. Carries the 1-based line number when known."""

    def __init__(self, message: str, line_no: int = 0) -> None:
        if line_no:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no
