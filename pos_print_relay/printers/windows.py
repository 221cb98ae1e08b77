"""
Windows Platform Printer
========================

Windows spooler access. Printers are enumerated through PowerShell and
jobs are copied in binary mode to the printer's share on localhost.

The enumeration path carries no live status, so every printer is
reported READY.
"""

import json
import logging
import subprocess
from typing import List

from .base import PlatformPrinter
from ..exceptions import DiscoveryError
from ..models import PrinterInfo, PrinterStatus

logger = logging.getLogger(__name__)

ENUMERATE_SCRIPT = (
    'Get-CimInstance -ClassName Win32_Printer | '
    'Select-Object Name, Default | '
    'ConvertTo-Json -Compress'
)


def parse_printers(output: str) -> List[PrinterInfo]:
    """
    Parse PowerShell ``ConvertTo-Json`` output.

    A single printer serializes as an object rather than a list.

    Raises:
        DiscoveryError: If the output is not valid JSON
    """
    output = (output or '').strip()
    if not output:
        return []

    try:
        data = json.loads(output)
    except ValueError as e:
        raise DiscoveryError(f'Unreadable printer list: {e}')

    if isinstance(data, dict):
        data = [data]

    printers = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        name = entry.get('Name')
        if not name:
            continue
        printers.append(PrinterInfo(
            name=name,
            is_default=bool(entry.get('Default')),
            status=PrinterStatus.READY,
        ))
    return printers


class WindowsPrinter(PlatformPrinter):
    """Printers known to the Windows spooler."""

    platform_name = 'windows'

    def _powershell(self, script: str) -> List[str]:
        return ['powershell', '-NoProfile', '-NonInteractive', '-Command', script]

    def _list_printers(self) -> List[PrinterInfo]:
        try:
            result = self._run(self._powershell(ENUMERATE_SCRIPT), timeout=self.discovery_timeout)
        except subprocess.TimeoutExpired:
            raise DiscoveryError(f'PowerShell timed out after {self.discovery_timeout}s')
        except OSError as e:
            raise DiscoveryError(f'Cannot run PowerShell: {e}')

        if result.returncode != 0:
            raise DiscoveryError(
                f'PowerShell exited with status {result.returncode}: {result.stderr.strip()}'
            )

        return parse_printers(result.stdout)

    def share_path(self, printer_name: str) -> str:
        return f'\\\\localhost\\{printer_name}'

    def spool_command(self, printer_name: str, path: str) -> List[str]:
        return ['cmd', '/c', 'copy', '/b', path, self.share_path(printer_name)]
