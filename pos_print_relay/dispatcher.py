"""
Command Dispatcher
==================

Turns one inbound frame into one outbound message.

Spooler work (discovery, routing) blocks on external processes, so it
runs in a worker thread and never stalls the event loop. A routing
failure becomes a ``success: false`` response; only an unreadable
frame produces an ``error`` message.
"""

import asyncio
import logging
from typing import Union, Callable, Dict, Any

from . import __version__
from .escpos import build_buffer, diagnostic_receipt, CASH_DRAWER_TEXT
from .exceptions import ProtocolError
from .models import ClientCommand, ServerMessage
from .models import message as msg
from .printers import PlatformPrinter

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Executes client commands against a platform printer."""

    def __init__(self, printer: PlatformPrinter):
        self.printer = printer
        self._handlers: Dict[str, Callable] = {
            msg.HEALTH: self.health,
            msg.PRINT_TEXT: self.print_text,
            msg.TEST_PRINT: self.test_print,
            msg.OPEN_CASH_DRAWER: self.open_cash_drawer,
        }

    def connected_message(self) -> ServerMessage:
        """Greeting sent once a connection is authenticated."""
        return ServerMessage(type=msg.CONNECTED, payload={
            'message': 'POS Print Relay Connected',
            'platform': self.printer.platform_name,
            'version': __version__,
        })

    async def dispatch(self, raw: Union[str, bytes]) -> ServerMessage:
        """Handle one raw frame and return the message to send back."""
        try:
            command = ClientCommand.from_message(raw)
        except ProtocolError as e:
            logger.warning('Message processing error: %s', e)
            return ServerMessage(type=msg.ERROR, payload={'message': 'Invalid request format'})

        logger.info('Received: %s (%s)', command.type, command.request_id or 'no-id')

        handler = self._handlers.get(command.type)
        if handler is None:
            return ServerMessage.reply(command, msg.ERROR, message=f'Unknown command: {command.type}')

        try:
            return await handler(command)
        except Exception as e:
            logger.exception('Command %s failed', command.type)
            return self._failure(command, e)

    def _failure(self, command: ClientCommand, error: Exception) -> ServerMessage:
        """Response reporting an unexpected error while running ``command``."""
        msg_type = msg.RESPONSE_TYPES[command.type]
        flag = 'ok' if msg_type == msg.HEALTH_RESPONSE else 'success'
        return ServerMessage.reply(command, msg_type, **{
            flag: False,
            'message': f'Command failed: {error}',
        })

    # =========================================================================
    # Commands
    # =========================================================================

    async def health(self, command: ClientCommand) -> ServerMessage:
        printers = await asyncio.to_thread(self.printer.discover)
        default = next((p.name for p in printers if p.is_default), None)
        return ServerMessage.reply(
            command, msg.HEALTH_RESPONSE,
            ok=True,
            platform=self.printer.platform_name,
            version=__version__,
            printers=[p.to_dict() for p in printers],
            totalPrinters=len(printers),
            defaultPrinter=default,
        )

    async def print_text(self, command: ClientCommand) -> ServerMessage:
        text = command.payload.get('text')
        if not isinstance(text, str):
            return ServerMessage.reply(
                command, msg.PRINT_RESPONSE,
                success=False, message='Print failed: missing text',
            )
        return await self._print(
            command, msg.PRINT_RESPONSE, build_buffer(text, open_drawer=False),
            ok='Printed to {printer}', failed='Print failed: {error}',
        )

    async def test_print(self, command: ClientCommand) -> ServerMessage:
        receipt = diagnostic_receipt(system=self.printer.platform_name)
        return await self._print(
            command, msg.TEST_PRINT_RESPONSE, build_buffer(receipt, open_drawer=False),
            ok='Test print sent to {printer}', failed='Test print failed: {error}',
        )

    async def open_cash_drawer(self, command: ClientCommand) -> ServerMessage:
        return await self._print(
            command, msg.CASH_DRAWER_RESPONSE, build_buffer(CASH_DRAWER_TEXT, open_drawer=True),
            ok='Cash drawer opened on {printer}', failed='Cash drawer failed: {error}',
        )

    async def _print(self, command: ClientCommand, msg_type: str, data: bytes,
                     ok: str, failed: str) -> ServerMessage:
        """Route ``data`` to the payload's printer and report the outcome."""
        printer_name = command.payload.get('printerName')
        if not isinstance(printer_name, str) or not printer_name:
            return ServerMessage.reply(
                command, msg_type,
                success=False, message=failed.format(error='missing printerName'),
            )

        result = await self._route(printer_name, data)
        if result.get('success'):
            return ServerMessage.reply(
                command, msg_type,
                success=True, message=ok.format(printer=printer_name),
            )
        return ServerMessage.reply(
            command, msg_type,
            success=False, message=failed.format(error=result.get('error', 'unknown error')),
        )

    async def _route(self, printer_name: str, data: bytes) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(self.printer.route, printer_name, data)
        except Exception as e:
            logger.exception('Routing to %s failed', printer_name)
            return {'success': False, 'error': str(e)}
