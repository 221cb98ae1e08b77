import threading
import time

import pytest

from pos_print_relay.models import PrinterInfo, PrinterStatus
from pos_print_relay.printers import PlatformPrinter

TOKEN = 'test-token'


class FakePrinter(PlatformPrinter):
    """Platform printer that records jobs instead of spooling them."""

    platform_name = 'testos'

    def __init__(self, printers=None, error=None, delay=0, raises=None):
        super().__init__()
        self.printers = printers or []
        self.error = error
        self.delay = delay
        self.raises = raises
        self.jobs = []
        self._lock = threading.Lock()

    def _list_printers(self):
        return list(self.printers)

    def spool_command(self, printer_name, path):
        return ['true', printer_name, path]

    def route(self, printer_name, data):
        if self.delay:
            time.sleep(self.delay)
        if self.raises:
            raise self.raises
        with self._lock:
            self.jobs.append((printer_name, data))
        if self.error:
            return {'success': False, 'error': self.error}
        return {'success': True, 'printer': printer_name, 'bytes_sent': len(data)}


@pytest.fixture
def printers():
    return [
        PrinterInfo('Epson_TM', is_default=False, status=PrinterStatus.READY),
        PrinterInfo('Star_TSP', is_default=True, status=PrinterStatus.PRINTING),
        PrinterInfo('Old_Zebra', is_default=False, status=PrinterStatus.OFFLINE),
    ]


@pytest.fixture
def fake_printer(printers):
    return FakePrinter(printers=printers)
