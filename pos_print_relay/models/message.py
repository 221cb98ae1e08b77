"""
Protocol Messages
=================

Inbound commands and outbound messages exchanged over the relay socket.
All frames are UTF-8 JSON objects of the shape::

    {"type": "...", "requestId": "...", "payload": {...}}
"""

import json
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union

from ..exceptions import ProtocolError

# Inbound command types
HEALTH = 'health'
PRINT_TEXT = 'print_text'
TEST_PRINT = 'test_print'
OPEN_CASH_DRAWER = 'open_cash_drawer'

COMMAND_TYPES = (HEALTH, PRINT_TEXT, TEST_PRINT, OPEN_CASH_DRAWER)

# Outbound message types
CONNECTED = 'connected'
HEALTH_RESPONSE = 'health_response'
PRINT_RESPONSE = 'print_response'
TEST_PRINT_RESPONSE = 'test_print_response'
CASH_DRAWER_RESPONSE = 'cash_drawer_response'
ERROR = 'error'

# Response type for each command
RESPONSE_TYPES = {
    HEALTH: HEALTH_RESPONSE,
    PRINT_TEXT: PRINT_RESPONSE,
    TEST_PRINT: TEST_PRINT_RESPONSE,
    OPEN_CASH_DRAWER: CASH_DRAWER_RESPONSE,
}

# Marks a message whose requestId could not be read at all
_NO_REQUEST_ID = object()


@dataclass
class ClientCommand:
    """Command received from a client."""

    type: str
    request_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientCommand':
        """Create from a decoded JSON object."""
        payload = data.get('payload')
        if not isinstance(payload, dict):
            payload = {}
        return cls(
            type=str(data.get('type')),
            request_id=data.get('requestId'),
            payload=payload,
        )

    @classmethod
    def from_message(cls, raw: Union[str, bytes]) -> 'ClientCommand':
        """
        Parse a raw frame.

        Raises:
            ProtocolError: If the frame is not a JSON object
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ProtocolError(f'Invalid JSON: {e}') from e

        if not isinstance(data, dict):
            raise ProtocolError(f'Expected a JSON object, got {type(data).__name__}')

        return cls.from_dict(data)


@dataclass
class ServerMessage:
    """Message sent to a client."""

    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    request_id: Any = _NO_REQUEST_ID

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {'type': self.type}
        if self.request_id is not _NO_REQUEST_ID:
            data['requestId'] = self.request_id
        data['payload'] = self.payload
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def reply(cls, command: ClientCommand, msg_type: str, **payload) -> 'ServerMessage':
        """Build a response correlated with ``command``."""
        return cls(type=msg_type, payload=payload, request_id=command.request_id)
