import pytest
import requests

from pos_print_relay.client import RelayClient, ControlClient
from pos_print_relay.exceptions import AuthError
from pos_print_relay.host import ServiceHost
from pos_print_relay.server import PrintRelayService

from .conftest import TOKEN


@pytest.fixture
def relay_url(tmp_path, fake_printer):
    service = PrintRelayService(port=0, token=TOKEN, log_path=str(tmp_path / 'relay.log'),
                                printer=fake_printer)
    host = ServiceHost(service)
    host.start()
    yield f"ws://127.0.0.1:{host.get_status()['port']}"
    host.shutdown()


def test_relay_client_round_trip(relay_url, fake_printer):
    with RelayClient(relay_url, token=TOKEN, timeout=5) as relay:
        assert relay.greeting['platform'] == 'testos'

        health = relay.health()
        printed = relay.print_text('Epson_TM', 'Hello')
        drawer = relay.open_cash_drawer('Star_TSP')
        test = relay.test_print('Epson_TM')

    assert health['defaultPrinter'] == 'Star_TSP'
    assert printed == {'success': True, 'message': 'Printed to Epson_TM'}
    assert drawer['success'] and test['success']
    assert [name for name, _ in fake_printer.jobs] == ['Epson_TM', 'Star_TSP', 'Epson_TM']


def test_relay_client_wrong_token(relay_url):
    client = RelayClient(relay_url, token='wrong', timeout=5)

    with pytest.raises(AuthError):
        client.connect()


def test_control_client_unreachable(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError('refused')
    monkeypatch.setattr(requests, 'get', refuse)

    client = ControlClient('http://127.0.0.1:1')

    assert client.status() == {'success': False, 'error': 'Cannot connect to http://127.0.0.1:1'}
    assert client.is_online() is False
    assert client.logs().startswith('Cannot fetch logs')


def test_control_client_sends_bearer(monkeypatch):
    calls = []

    class Response:
        def json(self):
            return {'success': True}

    def post(url, headers=None, timeout=None):
        calls.append((url, headers))
        return Response()
    monkeypatch.setattr(requests, 'post', post)

    result = ControlClient('http://127.0.0.1:9979/', api_key='k').restart()

    assert result == {'success': True}
    assert calls == [('http://127.0.0.1:9979/api/restart',
                      {'Content-Type': 'application/json', 'Authorization': 'Bearer k'})]
