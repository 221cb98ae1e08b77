"""
Base Platform Printer
=====================

Abstract base class for OS spooler access. A platform printer knows how
to list the printers the spooler exposes and how to hand it a raw job.
"""

import os
import itertools
import logging
import subprocess
import time
from abc import ABC, abstractmethod
from typing import List, Dict, Any

from ..config import DISCOVERY_TIMEOUT, PRINT_TIMEOUT, TEMP_DIR, TEMP_PREFIX
from ..exceptions import DiscoveryError, PrintError
from ..models import PrinterInfo

logger = logging.getLogger(__name__)

# Breaks ties between jobs written within the same clock tick
_sequence = itertools.count(1)


class PlatformPrinter(ABC):
    """Abstract base class for platform printers."""

    # Human-readable platform name, reported to clients
    platform_name = 'unknown'

    def __init__(self, temp_dir: str = TEMP_DIR,
                 discovery_timeout: float = DISCOVERY_TIMEOUT,
                 print_timeout: float = PRINT_TIMEOUT):
        self.temp_dir = temp_dir
        self.discovery_timeout = discovery_timeout
        self.print_timeout = print_timeout

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    @abstractmethod
    def _list_printers(self) -> List[PrinterInfo]:
        """
        Query the spooler.

        Raises:
            DiscoveryError: If the spooler cannot be queried
        """
        pass

    def discover(self) -> List[PrinterInfo]:
        """
        List printers known to the spooler.

        Never raises; any failure is logged and yields an empty list.
        """
        try:
            return self._list_printers()
        except DiscoveryError as e:
            logger.warning('Printer discovery error: %s', e)
        except Exception:
            logger.exception('Unexpected printer discovery error')
        return []

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    @abstractmethod
    def spool_command(self, printer_name: str, path: str) -> List[str]:
        """Build the argument list that spools ``path`` raw to ``printer_name``."""
        pass

    def temp_path(self) -> str:
        """Unique path for a transient spool file."""
        name = f'{TEMP_PREFIX}-{time.time_ns()}-{os.getpid()}-{next(_sequence)}.raw'
        return os.path.join(self.temp_dir, name)

    def route(self, printer_name: str, data: bytes) -> Dict[str, Any]:
        """
        Send a raw buffer to a printer through the spooler.

        The buffer is written to a transient file which is removed
        whatever the outcome.

        Args:
            printer_name: Spooler printer name
            data: Raw ESC/POS bytes

        Returns:
            Dict with success status and details
        """
        path = self.temp_path()
        try:
            with open(path, 'xb') as f:
                f.write(data)
        except OSError as e:
            logger.error('Cannot write spool file %s: %s', path, e)
            return {'success': False, 'error': f'Cannot write spool file: {e}'}

        try:
            self._spool(self.spool_command(printer_name, path))
        except PrintError as e:
            logger.error('Print error on %s: %s', printer_name, e)
            return {'success': False, 'error': str(e)}
        finally:
            self._cleanup(path)

        logger.info('Printed to %s (%d bytes)', printer_name, len(data))
        return {
            'success': True,
            'printer': printer_name,
            'bytes_sent': len(data),
        }

    def _spool(self, args: List[str]):
        """Run a spool command, raising PrintError on any failure."""
        try:
            result = self._run(args, timeout=self.print_timeout)
        except subprocess.TimeoutExpired:
            raise PrintError(f'{args[0]} timed out after {self.print_timeout}s')
        except OSError as e:
            raise PrintError(f'Cannot run {args[0]}: {e}')

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or '').strip()
            raise PrintError(
                f'{args[0]} exited with status {result.returncode}' + (f': {detail}' if detail else '')
            )

    def _cleanup(self, path: str):
        try:
            os.remove(path)
        except OSError as e:
            logger.warning('Cannot remove spool file %s: %s', path, e)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _run(self, args: List[str], timeout: float) -> subprocess.CompletedProcess:
        """Run a command without a shell, capturing text output.

        A command still running at ``timeout`` is killed and
        ``subprocess.TimeoutExpired`` is raised.
        """
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors='replace',
            timeout=timeout,
            check=False,
        )
