"""
Print Relay Service
===================

Owns the loopback WebSocket listener and every connection accepted on
it.

Lifecycle::

    stopped -> starting -> listening -> stopping -> stopped

Each connection is handled by its own task: the token is checked
first, then frames are dispatched one at a time in arrival order.
Connections do not wait on each other.
"""

import hmac
import logging
from enum import Enum
from datetime import datetime
from typing import List, Optional, Set
from urllib.parse import urlsplit, parse_qs

from websockets.asyncio.server import serve, Server, ServerConnection
from websockets.exceptions import ConnectionClosed
from websockets.frames import CloseCode

from .config import HOST, PORT, AUTH_TOKEN, LOG_PATH
from .dispatcher import CommandDispatcher
from .exceptions import AuthError, BindError
from .models import PrinterInfo, ServiceStatus
from .printers import PlatformPrinter, get_platform_printer

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    STOPPED = 'stopped'
    STARTING = 'starting'
    LISTENING = 'listening'
    STOPPING = 'stopping'


def extract_token(path: str) -> Optional[str]:
    """Read the ``token`` query parameter from a request path."""
    values = parse_qs(urlsplit(path).query).get('token')
    return values[0] if values else None


class PrintRelayService:
    """Token-authenticated WebSocket print relay."""

    def __init__(self, port: int = PORT, token: str = AUTH_TOKEN, log_path: str = LOG_PATH,
                 printer: PlatformPrinter = None, host: str = HOST):
        """
        Initialize the service.

        Args:
            port: Listening port (0 picks a free one)
            token: Shared secret clients must present
            log_path: Log file reported in the status
            printer: Spooler access, detected from the host OS when omitted
            host: Listening address
        """
        self.host = host
        self.port = port
        self.token = token
        self.log_path = log_path
        self.printer = printer or get_platform_printer()
        self.dispatcher = CommandDispatcher(self.printer)

        self.state = ServiceState.STOPPED
        self.started_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

        self._server: Optional[Server] = None
        self._bound_port: Optional[int] = None
        self._connections: Set[ServerConnection] = set()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self.state == ServiceState.LISTENING

    async def start(self):
        """
        Bind the listener.

        Raises:
            BindError: If the port cannot be claimed
        """
        if self.state != ServiceState.STOPPED:
            logger.debug('Start ignored, service is %s', self.state.value)
            return

        self.state = ServiceState.STARTING
        try:
            self._server = await serve(self._handle_connection, self.host, self.port)
        except OSError as e:
            self.state = ServiceState.STOPPED
            self.last_error = str(e)
            logger.error('Server error: %s', e)
            raise BindError(self.host, self.port, str(e)) from e

        self._bound_port = next(iter(self._server.sockets)).getsockname()[1]
        self.state = ServiceState.LISTENING
        self.started_at = datetime.now()
        self.last_error = None
        logger.info('Print relay running on ws://%s:%d', self.host, self._bound_port)
        logger.info('Log file: %s', self.log_path)

    async def stop(self):
        """Close the listener and every open connection."""
        if self._server is None:
            return

        self.state = ServiceState.STOPPING
        self._server.close()
        await self._server.wait_closed()

        self._server = None
        self._bound_port = None
        self._connections.clear()
        self.started_at = None
        self.state = ServiceState.STOPPED
        logger.info('Print relay stopped')

    def get_status(self) -> ServiceStatus:
        """Snapshot of the listener state."""
        return ServiceStatus(
            is_running=self.is_running,
            port=self._bound_port or self.port,
            connections=len(self._connections),
            log_path=self.log_path,
            state=self.state.value,
            started_at=self.started_at,
            last_error=self.last_error,
        )

    def discover(self) -> List[PrinterInfo]:
        """List printers known to the spooler (blocking)."""
        return self.printer.discover()

    # =========================================================================
    # Connections
    # =========================================================================

    def verify_token(self, path: str):
        """
        Check the token carried by a request path.

        Raises:
            AuthError: If the token is missing or wrong
        """
        token = extract_token(path)
        if token is None:
            raise AuthError('Missing token')
        if not hmac.compare_digest(token.encode('utf-8'), self.token.encode('utf-8')):
            raise AuthError('Invalid token')

    async def _handle_connection(self, connection: ServerConnection):
        remote = connection.remote_address
        logger.info('New connection from: %s', remote)

        try:
            self.verify_token(connection.request.path)
        except AuthError as e:
            logger.warning('%s from %s', e, remote)
            await connection.close(code=CloseCode.POLICY_VIOLATION)
            return

        self._connections.add(connection)
        try:
            await connection.send(self.dispatcher.connected_message().to_json())
            async for raw in connection:
                reply = await self.dispatcher.dispatch(raw)
                await connection.send(reply.to_json())
        except ConnectionClosed as e:
            logger.info('Connection from %s closed: %s', remote, e)
        finally:
            self._connections.discard(connection)
            logger.info('Client disconnected: %s', remote)
