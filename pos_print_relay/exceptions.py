"""
Relay error taxonomy.

None of these ever crash the process: each one is caught at the layer
that knows how to degrade it (close, error frame, empty list, failed
response, host retry).
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class AuthError(RelayError):
    """Missing or wrong connection token."""


class ProtocolError(RelayError):
    """Inbound frame could not be understood."""


class DiscoveryError(RelayError):
    """Spooler query failed."""


class PrintError(RelayError):
    """Spool command failed, exited non-zero or timed out."""


class BindError(RelayError):
    """Listener could not claim its port."""

    def __init__(self, host: str, port: int, reason: str):
        super().__init__(f'Cannot listen on {host}:{port}: {reason}')
        self.host = host
        self.port = port
        self.reason = reason
