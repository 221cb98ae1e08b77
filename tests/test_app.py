import pytest

from pos_print_relay.app import create_app

API_KEY = 'control-key'


class StubHost:
    def __init__(self):
        self.restarts = 0

    def get_status(self):
        return {'isRunning': True, 'port': 9978, 'connections': 2, 'logPath': '/tmp/relay.log'}

    def get_printers(self):
        return [
            {'name': 'Epson_TM', 'isDefault': False, 'status': 'READY', 'isConnected': True},
            {'name': 'Star_TSP', 'isDefault': True, 'status': 'READY', 'isConnected': True},
        ]

    def restart(self):
        self.restarts += 1
        return True

    def get_logs(self):
        return '[2024-01-01T00:00:00] INFO started\n'


@pytest.fixture
def host():
    return StubHost()


@pytest.fixture
def client(host):
    app = create_app(host, api_key=API_KEY)
    app.config['TESTING'] = True
    return app.test_client()


def test_health(client):
    data = client.get('/health').get_json()

    assert data['status'] == 'online'
    assert data['version']


def test_api_info(client):
    assert '/api/status' in client.get('/api').get_json()['endpoints'].values()


def test_status(client):
    data = client.get('/api/status').get_json()

    assert data['isRunning'] is True
    assert data['connections'] == 2


def test_printers(client):
    data = client.get('/api/printers').get_json()

    assert data['count'] == 2
    assert data['defaultPrinter'] == 'Star_TSP'


def test_restart_requires_api_key(client, host):
    response = client.post('/api/restart')

    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'error': 'Invalid API key'}
    assert host.restarts == 0


def test_restart(client, host):
    response = client.post('/api/restart', headers={'Authorization': f'Bearer {API_KEY}'})

    assert response.status_code == 200
    assert response.get_json()['success'] is True
    assert host.restarts == 1


def test_restart_rejects_wrong_key(client, host):
    response = client.post('/api/restart', headers={'Authorization': 'Bearer control-keY'})

    assert response.status_code == 401
    assert host.restarts == 0


def test_logs_require_api_key(client):
    response = client.get('/api/logs')

    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid API key'


def test_logs(client):
    response = client.get('/api/logs', headers={'Authorization': f'Bearer {API_KEY}'})

    assert response.mimetype == 'text/plain'
    assert 'started' in response.get_data(as_text=True)


@pytest.mark.parametrize('origin', ['http://localhost:3000', 'http://127.0.0.1:8080', 'http://localhost'])
def test_cors_allows_local_origins(client, origin):
    response = client.get('/api/status', headers={'Origin': origin})

    assert response.headers.get('Access-Control-Allow-Origin') in ('*', origin)


@pytest.mark.parametrize('origin', ['https://evil.example', 'http://localhost.evil.example'])
def test_cors_rejects_remote_origins(client, origin):
    response = client.get('/api/printers', headers={'Origin': origin})

    assert 'Access-Control-Allow-Origin' not in response.headers
