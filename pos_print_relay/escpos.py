"""
ESC/POS Buffer Builder
======================

Turns receipt text into the raw byte stream understood by ESC/POS
thermal printers (Star, Epson and compatibles).

No capability negotiation is done: the target is assumed to speak
ESC/POS.
"""

import platform
from datetime import datetime
from typing import Optional

from . import __version__

# ESC/POS commands
ESC = b'\x1b'
LF = b'\x0a'

# ESC p m t1 t2 - Generate pulse on drawer pin 2
DRAWER_KICK = ESC + b'\x70\x00\x19\xfa'

# Feed four lines, then ESC i (full cut)
FEED_AND_CUT = LF * 4 + ESC + b'\x69'

# Wide enough to keep multi-byte characters intact
TEXT_ENCODING = 'utf-8'

CASH_DRAWER_TEXT = 'OPENING CASH DRAWER\n'

DIAGNOSTIC_TEMPLATE = """POS PRINT RELAY TEST PRINT
================================
Date: {timestamp}
Relay Version: {version}
Platform: {platform}
================================
This is a test from the print
relay running on your computer.
================================
            SUCCESS!
================================"""


def build_buffer(text: str, open_drawer: bool = False) -> bytes:
    """
    Build a raw print buffer.

    Layout: encoded text, two line feeds, the drawer kick when
    requested, then the feed-and-cut trailer.

    Args:
        text: Receipt text
        open_drawer: Append the drawer kick before the trailer

    Returns:
        Raw ESC/POS bytes
    """
    data = bytearray()
    data.extend(text.encode(TEXT_ENCODING, errors='replace'))
    data.extend(LF * 2)

    if open_drawer:
        data.extend(DRAWER_KICK)

    data.extend(FEED_AND_CUT)
    return bytes(data)


def diagnostic_receipt(now: Optional[datetime] = None, system: Optional[str] = None) -> str:
    """Render the diagnostic receipt."""
    now = now or datetime.now()
    return DIAGNOSTIC_TEMPLATE.format(
        timestamp=now.strftime('%Y-%m-%d %H:%M:%S'),
        version=__version__,
        platform=system or platform.system(),
    )
