"""
Exceptions raised at the ngspice boundary.

Parsing and normalization never raise for malformed netlists; only the
engine side does.
"""


class SpiceEngineError(Exception):
    """Base class for simulator failures."""


class EngineUnavailableError(SpiceEngineError):
    """ngspice could not be found or did not start."""


class NgspiceError(SpiceEngineError):
    """ngspice ran but the simulation failed."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class RawFileError(SpiceEngineError):
    """The raw output file could not be read."""
