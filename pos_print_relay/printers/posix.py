"""
POSIX Platform Printer
======================

CUPS spooler access for Linux and macOS, through ``lpstat`` and ``lp``.

``lpstat -p`` prints one line per printer, e.g.::

    printer Epson_TM is idle.  enabled since Mon 01 Jan 2024 10:00:00
    printer Star_TSP now printing Star_TSP-12.  enabled since ...
    printer Old_Zebra disabled since Mon 01 Jan 2024 10:00:00 -

and ``lpstat -d`` prints the default destination::

    system default destination: Epson_TM
"""

import re
import logging
import platform
import subprocess
from typing import List, Optional

from .base import PlatformPrinter
from ..exceptions import DiscoveryError
from ..models import PrinterInfo, PrinterStatus

logger = logging.getLogger(__name__)

DEFAULT_DESTINATION_RE = re.compile(r'system default destination:\s*(\S+)', re.IGNORECASE)


def parse_default_destination(output: str) -> Optional[str]:
    """Extract the default destination from ``lpstat -d`` output."""
    match = DEFAULT_DESTINATION_RE.search(output or '')
    return match.group(1) if match else None


def parse_status(line: str) -> PrinterStatus:
    """Classify one ``lpstat -p`` line."""
    text = line.lower()
    # "now printing" lines also say "enabled"
    if 'now printing' in text:
        return PrinterStatus.PRINTING
    if 'idle' in text or 'enabled' in text:
        return PrinterStatus.READY
    return PrinterStatus.OFFLINE


def parse_printers(output: str, default: Optional[str] = None) -> List[PrinterInfo]:
    """Parse ``lpstat -p`` output, keeping spooler order."""
    printers = []
    for line in (output or '').splitlines():
        if not line.startswith('printer '):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        name = parts[1]
        printers.append(PrinterInfo(
            name=name,
            is_default=name == default,
            status=parse_status(line),
        ))
    return printers


class POSIXPrinter(PlatformPrinter):
    """CUPS printers on Linux and macOS."""

    def __init__(self, system: str = None, **kwargs):
        super().__init__(**kwargs)
        self.platform_name = (system or platform.system()).lower()

    def default_destination(self) -> Optional[str]:
        """Name of the default destination, or None if there is none."""
        try:
            result = self._run(['lpstat', '-d'], timeout=self.discovery_timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug('Default destination lookup failed: %s', e)
            return None

        if result.returncode != 0:
            return None
        return parse_default_destination(result.stdout)

    def _list_printers(self) -> List[PrinterInfo]:
        default = self.default_destination()

        try:
            result = self._run(['lpstat', '-p'], timeout=self.discovery_timeout)
        except subprocess.TimeoutExpired:
            raise DiscoveryError(f'lpstat timed out after {self.discovery_timeout}s')
        except OSError as e:
            raise DiscoveryError(f'Cannot run lpstat: {e}')

        if result.returncode != 0:
            raise DiscoveryError(
                f'lpstat exited with status {result.returncode}: {result.stderr.strip()}'
            )

        return parse_printers(result.stdout, default)

    def spool_command(self, printer_name: str, path: str) -> List[str]:
        return ['lp', '-d', printer_name, '-o', 'raw', path]
