"""
POS Print Relay
===============

Local, token-authenticated print relay for point-of-sale applications.

Accepts WebSocket connections on loopback, discovers the receipt
printers known to the OS spooler, encodes jobs as raw ESC/POS and hands
them to the spooler.

Usage:
    python -m pos_print_relay

Wire protocol:
    ws://127.0.0.1:<port>/?token=<secret>

    health            - List printers and the default one
    print_text        - Print a text receipt
    test_print        - Print a diagnostic receipt
    open_cash_drawer  - Kick the cash drawer
"""

__version__ = '1.0.0'
__author__ = 'POS Print Relay Developers'
