"""
Exception hierarchy for lvs.

Per-unit errors (one project root, one declared package) are caught by the
scanners, logged and the unit skipped. Anything else reaches the CLI and
ends the run with a nonzero exit code.
"""


class LvsError(Exception):
    """Base class for all lvs errors."""


class DiscoveryError(LvsError):
    """A directory could not be read while looking for manifests."""


class ToolInvocationError(LvsError):
    """The external audit tool failed without producing usable output."""


class OutputLimitExceeded(ToolInvocationError):
    """The external tool wrote more output than the configured ceiling."""

    def __init__(self, limit: int):
        super().__init__(f"output exceeded {limit} bytes")
        self.limit = limit


class CommandTimeout(ToolInvocationError):
    """The external tool did not finish in time."""

    def __init__(self, timeout: float):
        super().__init__(f"timed out after {timeout:g}s")
        self.timeout = timeout


class ParseError(LvsError):
    """Tool output or an advisory response was not valid structured data."""


class NetworkError(LvsError):
    """An advisory query failed (transport error or non-success status)."""


class ConfigError(LvsError):
    """The configuration file or command line options are invalid."""


__all__ = [
    "LvsError",
    "DiscoveryError",
    "ToolInvocationError",
    "OutputLimitExceeded",
    "CommandTimeout",
    "ParseError",
    "NetworkError",
    "ConfigError",
]
