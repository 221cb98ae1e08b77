import asyncio
import json

import pytest

from pos_print_relay.dispatcher import CommandDispatcher
from pos_print_relay.escpos import DRAWER_KICK, FEED_AND_CUT
from pos_print_relay.models import ClientCommand, ServerMessage
from pos_print_relay.exceptions import ProtocolError

from .conftest import FakePrinter


def dispatch(printer, frame):
    if not isinstance(frame, (str, bytes)):
        frame = json.dumps(frame)
    reply = asyncio.run(CommandDispatcher(printer).dispatch(frame))
    return json.loads(reply.to_json())


def test_print_text_scenario(fake_printer):
    reply = dispatch(fake_printer, {
        'type': 'print_text', 'requestId': '1',
        'payload': {'printerName': 'Epson_TM', 'text': 'Hello'},
    })

    assert reply['type'] == 'print_response'
    assert reply['requestId'] == '1'
    assert reply['payload']['success'] is True
    assert 'Epson_TM' in reply['payload']['message']
    assert fake_printer.jobs == [('Epson_TM', b'Hello\n\n' + FEED_AND_CUT)]


def test_print_text_failure(printers):
    printer = FakePrinter(printers=printers, error='lp exited with status 1')

    reply = dispatch(printer, {
        'type': 'print_text', 'requestId': 'r2',
        'payload': {'printerName': 'Epson_TM', 'text': 'Hello'},
    })

    assert reply['payload'] == {'success': False, 'message': 'Print failed: lp exited with status 1'}


def test_routing_exception_becomes_failure():
    printer = FakePrinter(raises=RuntimeError('spooler exploded'))

    reply = dispatch(printer, {
        'type': 'open_cash_drawer', 'requestId': 'x',
        'payload': {'printerName': 'Epson_TM'},
    })

    assert reply['type'] == 'cash_drawer_response'
    assert reply['payload']['success'] is False
    assert 'spooler exploded' in reply['payload']['message']


@pytest.mark.parametrize('payload', [
    {'text': 'Hello'},
    {'printerName': 42, 'text': 'Hello'},
    {'printerName': '', 'text': 'Hello'},
])
def test_print_text_missing_printer(fake_printer, payload):
    reply = dispatch(fake_printer, {'type': 'print_text', 'requestId': '3', 'payload': payload})

    assert reply['type'] == 'print_response'
    assert reply['payload']['success'] is False
    assert 'printerName' in reply['payload']['message']
    assert fake_printer.jobs == []


def test_print_text_missing_text(fake_printer):
    reply = dispatch(fake_printer, {'type': 'print_text', 'requestId': '4', 'payload': {'printerName': 'Epson_TM'}})

    assert reply['payload']['success'] is False
    assert 'text' in reply['payload']['message']


def test_health(fake_printer):
    reply = dispatch(fake_printer, {'type': 'health', 'requestId': 'h'})
    payload = reply['payload']

    assert reply['type'] == 'health_response'
    assert reply['requestId'] == 'h'
    assert payload['ok'] is True
    assert payload['totalPrinters'] == len(payload['printers']) == 3
    assert payload['defaultPrinter'] == 'Star_TSP'
    assert payload['defaultPrinter'] in [p['name'] for p in payload['printers']]
    assert payload['platform'] == 'testos'


def test_health_without_printers():
    reply = dispatch(FakePrinter(), {'type': 'health'})

    assert reply['requestId'] is None
    assert reply['payload']['totalPrinters'] == 0
    assert reply['payload']['printers'] == []
    assert reply['payload']['defaultPrinter'] is None


def test_test_print(fake_printer):
    reply = dispatch(fake_printer, {'type': 'test_print', 'requestId': 't', 'payload': {'printerName': 'Star_TSP'}})

    assert reply['type'] == 'test_print_response'
    assert reply['payload']['success'] is True
    name, data = fake_printer.jobs[0]
    assert name == 'Star_TSP'
    assert data.startswith(b'POS PRINT RELAY TEST PRINT')
    assert b'Platform: testos' in data
    assert DRAWER_KICK not in data


def test_open_cash_drawer(fake_printer):
    reply = dispatch(fake_printer, {'type': 'open_cash_drawer', 'requestId': 'd', 'payload': {'printerName': 'Epson_TM'}})

    assert reply['type'] == 'cash_drawer_response'
    assert reply['payload']['success'] is True
    assert fake_printer.jobs[0][1].endswith(DRAWER_KICK + FEED_AND_CUT)


def test_unknown_command_echoes_request_id(fake_printer):
    reply = dispatch(fake_printer, {'type': 'reboot', 'requestId': 'u-1', 'payload': {}})

    assert reply == {'type': 'error', 'requestId': 'u-1', 'payload': {'message': 'Unknown command: reboot'}}


@pytest.mark.parametrize('frame', ['{not json', '[1, 2]', '"health"', b'\xff\xfe'])
def test_invalid_frame(fake_printer, frame):
    reply = dispatch(fake_printer, frame)

    assert reply == {'type': 'error', 'payload': {'message': 'Invalid request format'}}


def test_request_id_passthrough(fake_printer):
    for request_id in ['  spaced id ', 'ÜNÏCÖDE', '0']:
        reply = dispatch(fake_printer, {'type': 'health', 'requestId': request_id})
        assert reply['requestId'] == request_id


def test_connected_message(fake_printer):
    greeting = CommandDispatcher(fake_printer).connected_message().to_dict()

    assert greeting['type'] == 'connected'
    assert 'requestId' not in greeting
    assert greeting['payload']['platform'] == 'testos'
    assert greeting['payload']['message']


def test_command_parsing():
    command = ClientCommand.from_message('{"type": "health", "payload": "junk"}')

    assert command.type == 'health'
    assert command.request_id is None
    assert command.payload == {}

    with pytest.raises(ProtocolError):
        ClientCommand.from_message('null')


def test_reply_keeps_null_request_id():
    command = ClientCommand(type='health')

    assert ServerMessage.reply(command, 'health_response', ok=True).to_dict() == {
        'type': 'health_response', 'requestId': None, 'payload': {'ok': True},
    }


class BrokenDiscovery(FakePrinter):
    def discover(self):
        raise RuntimeError('lpstat vanished')


def test_unexpected_command_error_becomes_response():
    reply = dispatch(BrokenDiscovery(), {'type': 'health', 'requestId': 'b'})

    assert reply['type'] == 'health_response'
    assert reply['requestId'] == 'b'
    assert reply['payload']['ok'] is False
    assert 'lpstat vanished' in reply['payload']['message']


def test_print_text_with_lone_surrogate(fake_printer):
    reply = dispatch(fake_printer, '{"type": "print_text", "requestId": "s",'
                                   ' "payload": {"printerName": "Epson_TM", "text": "a\\ud800b"}}')

    assert reply['payload']['success'] is True
    assert fake_printer.jobs[0][1].startswith(b'a?b\n\n')


def test_reply_json_is_ascii_safe():
    command = ClientCommand(type='health', request_id='\udc00')

    text = ServerMessage.reply(command, 'health_response', ok=True).to_json()

    text.encode('utf-8')
    assert json.loads(text)['requestId'] == '\udc00'
