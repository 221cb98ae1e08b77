"""
POS Print Relay - Control API
=============================

Small loopback HTTP API through which a desktop shell (tray icon,
status window) drives the relay.

Run: python -m pos_print_relay
"""

import re
import sys
import hmac
import platform
import socket as sock
from datetime import datetime
from flask import Flask, request, jsonify, current_app
from flask_cors import CORS

from . import __version__
from .host import ServiceHost

# Only pages served from this machine may read the API
LOCAL_ORIGINS = [
    re.compile(r'^https?://localhost(:\d+)?$', re.IGNORECASE),
    re.compile(r'^https?://127\.0\.0\.1(:\d+)?$'),
]


def create_app(host: ServiceHost, api_key: str) -> Flask:
    """
    Create the control application.

    Args:
        host: Service host the endpoints act on
        api_key: Bearer token required by mutating endpoints
    """
    app = Flask(__name__)
    CORS(app, origins=LOCAL_ORIGINS)
    app.config['SERVICE_HOST'] = host
    app.config['API_KEY'] = api_key

    register_routes(app)
    return app


def _host() -> ServiceHost:
    return current_app.config['SERVICE_HOST']


def _check_api_key():
    """Validate API key from request."""
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return False
    return hmac.compare_digest(auth_header[7:].encode('utf-8'),
                               current_app.config['API_KEY'].encode('utf-8'))


def register_routes(app: Flask):

    # =========================================================================
    # Health & Info Endpoints
    # =========================================================================

    @app.route('/health', methods=['GET'])
    def health():
        """Health check with system info."""
        return jsonify({
            'status': 'online',
            'version': __version__,
            'hostname': sock.gethostname(),
            'platform': platform.system(),
            'python': sys.version.split()[0],
            'timestamp': datetime.now().isoformat(),
        })

    @app.route('/api', methods=['GET'])
    def api_info():
        """API info (JSON)."""
        return jsonify({
            'service': 'POS Print Relay',
            'version': __version__,
            'endpoints': {
                'health': '/health',
                'status': '/api/status',
                'printers': '/api/printers',
                'restart': '/api/restart',
                'logs': '/api/logs',
            }
        })

    # =========================================================================
    # Relay Management
    # =========================================================================

    @app.route('/api/status', methods=['GET'])
    def status():
        """Relay listener status."""
        return jsonify(_host().get_status())

    @app.route('/api/printers', methods=['GET'])
    def printers():
        """Printers known to the spooler."""
        printers = _host().get_printers()
        default = next((p['name'] for p in printers if p['isDefault']), None)
        return jsonify({
            'success': True,
            'printers': printers,
            'count': len(printers),
            'defaultPrinter': default,
        })

    @app.route('/api/restart', methods=['POST'])
    def restart():
        """Restart the relay listener."""
        if not _check_api_key():
            return jsonify({'success': False, 'error': 'Invalid API key'}), 401

        started = _host().restart()
        return jsonify({
            'success': started,
            'status': _host().get_status(),
        })

    @app.route('/api/logs', methods=['GET'])
    def logs():
        """Relay log file content."""
        if not _check_api_key():
            return jsonify({'success': False, 'error': 'Invalid API key'}), 401

        return current_app.response_class(_host().get_logs(), mimetype='text/plain')
