"""
POS Print Relay Client
======================

Python SDK for talking to a running relay.

Usage:
    from pos_print_relay.client import RelayClient, ControlClient

    with RelayClient('ws://127.0.0.1:9978', token='your-token') as relay:
        health = relay.health()
        relay.print_text('Epson_TM', 'Hello')
        relay.open_cash_drawer('Epson_TM')

    control = ControlClient('http://127.0.0.1:9979', api_key='your-token')
    control.status()
    control.restart()
"""

import json
import uuid
import requests
from urllib.parse import urlencode
from typing import Dict, Any, Optional, List

from websockets.sync.client import connect, ClientConnection
from websockets.exceptions import ConnectionClosed

from .config import HOST, PORT, CONTROL_PORT
from .exceptions import AuthError
from .models import message as msg


class RelayClient:
    """WebSocket client for the relay protocol."""

    def __init__(self, url: str = f'ws://{HOST}:{PORT}', token: str = None, timeout: float = 60):
        """
        Initialize client.

        Args:
            url: Relay WebSocket URL
            token: Shared secret
            timeout: Seconds to wait for each response
        """
        self.url = url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.greeting: Optional[Dict[str, Any]] = None
        self._ws: Optional[ClientConnection] = None

    def connect(self) -> Dict[str, Any]:
        """
        Open the connection and read the greeting.

        Raises:
            AuthError: If the relay closes the connection without greeting
        """
        query = urlencode({'token': self.token or ''})
        self._ws = connect(f'{self.url}/?{query}', open_timeout=self.timeout)
        try:
            greeting = json.loads(self._ws.recv(timeout=self.timeout))
        except ConnectionClosed as e:
            self._ws = None
            raise AuthError(f'Connection rejected by relay: {e}') from e

        self.greeting = greeting.get('payload', {})
        return self.greeting

    def close(self):
        if self._ws is not None:
            self._ws.close()
            self._ws = None

    def __enter__(self) -> 'RelayClient':
        self.connect()
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, msg_type: str, payload: Dict[str, Any] = None) -> Dict[str, Any]:
        """Send a command and wait for the response carrying its requestId."""
        if self._ws is None:
            self.connect()

        request_id = uuid.uuid4().hex
        self._ws.send(json.dumps({
            'type': msg_type,
            'requestId': request_id,
            'payload': payload or {},
        }))

        while True:
            response = json.loads(self._ws.recv(timeout=self.timeout))
            if response.get('requestId') == request_id:
                return response

    # =========================================================================
    # Commands
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Printers known to the relay host."""
        return self._request(msg.HEALTH)['payload']

    def list_printers(self) -> List[Dict[str, Any]]:
        return self.health().get('printers', [])

    def print_text(self, printer_name: str, text: str) -> Dict[str, Any]:
        """Print a text receipt."""
        return self._request(msg.PRINT_TEXT, {'printerName': printer_name, 'text': text})['payload']

    def test_print(self, printer_name: str) -> Dict[str, Any]:
        """Print the diagnostic receipt."""
        return self._request(msg.TEST_PRINT, {'printerName': printer_name})['payload']

    def open_cash_drawer(self, printer_name: str) -> Dict[str, Any]:
        """Kick the cash drawer attached to a printer."""
        return self._request(msg.OPEN_CASH_DRAWER, {'printerName': printer_name})['payload']


class ControlClient:
    """Client for the relay control API."""

    def __init__(self, base_url: str = f'http://{HOST}:{CONTROL_PORT}', api_key: str = None):
        """
        Initialize client.

        Args:
            base_url: Base URL of the control API
            api_key: API key for authentication
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        """Get request headers."""
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    def _request(self, method: str, endpoint: str) -> Dict[str, Any]:
        """Make API request."""
        url = f'{self.base_url}{endpoint}'

        try:
            if method == 'GET':
                response = requests.get(url, headers=self._headers(), timeout=30)
            elif method == 'POST':
                response = requests.post(url, headers=self._headers(), timeout=60)
            else:
                raise ValueError(f'Unknown method: {method}')

            return response.json()

        except requests.exceptions.Timeout:
            return {'success': False, 'error': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'success': False, 'error': f'Cannot connect to {self.base_url}'}
        except ValueError as e:
            return {'success': False, 'error': str(e)}

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/health')

    def is_online(self) -> bool:
        """Check if service is online."""
        return self.health().get('status') == 'online'

    def status(self) -> Dict[str, Any]:
        """Relay listener status."""
        return self._request('GET', '/api/status')

    def list_printers(self) -> List[Dict[str, Any]]:
        """Printers known to the spooler."""
        return self._request('GET', '/api/printers').get('printers', [])

    def restart(self) -> Dict[str, Any]:
        """Restart the relay listener."""
        return self._request('POST', '/api/restart')

    def logs(self) -> str:
        """Relay log file content."""
        try:
            response = requests.get(f'{self.base_url}/api/logs', headers=self._headers(), timeout=30)
            return response.text
        except requests.exceptions.RequestException as e:
            return f'Cannot fetch logs: {e}'
