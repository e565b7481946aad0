class MapAxisException(Exception):
    """Base class for all mapaxis errors."""


class ParseError(MapAxisException):
    """A capabilities document is structurally malformed."""


class ConfigError(MapAxisException):
    """A project configuration is missing required entries."""


class UnknownCRS(MapAxisException, KeyError):
    """A CRS code was used that has no definition in the projection registry."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code

    def __str__(self):
        return f"no projection definition registered for {self.code!r}"


class TransformError(MapAxisException):
    """A coordinate transform failed or produced non-finite values."""
