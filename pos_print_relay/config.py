"""
POS Print Relay Configuration
"""

import os
import tempfile

# =============================================================================
# Server Configuration
# =============================================================================

# The relay only ever listens on loopback
HOST = '127.0.0.1'
PORT = int(os.environ.get('POS_PRINT_PORT', 9978))

# Shared secret expected in the ?token= query parameter
AUTH_TOKEN = os.environ.get('POS_PRINT_TOKEN', 'supersecret')

# Local control API (status, printers, restart, logs)
CONTROL_PORT = int(os.environ.get('POS_PRINT_CONTROL_PORT', 9979))

DEBUG = os.environ.get('POS_PRINT_DEBUG', 'false').lower() == 'true'

# =============================================================================
# Logging
# =============================================================================

LOG_PATH = os.environ.get(
    'POS_PRINT_LOG_PATH',
    os.path.join(tempfile.gettempdir(), 'pos-print-relay.log'),
)
LOG_LEVEL = os.environ.get('POS_PRINT_LOG_LEVEL', 'INFO').upper()

# =============================================================================
# Printer Defaults
# =============================================================================

DISCOVERY_TIMEOUT = 5  # seconds
PRINT_TIMEOUT = 30  # seconds

# Transient spool files live in the system temp dir
TEMP_DIR = tempfile.gettempdir()
TEMP_PREFIX = 'pos-print-relay'

# =============================================================================
# Host Policy
# =============================================================================

RETRY_DELAY = 10  # seconds between start attempts after a bind failure
RESTART_DELAY = 1  # seconds between stop and start on restart
