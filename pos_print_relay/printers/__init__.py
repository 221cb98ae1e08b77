"""
POS Print Relay Platform Printers
=================================

Spooler access for each supported host OS. The platform is detected
once, when the service is created.
"""

import platform

from .base import PlatformPrinter
from .posix import POSIXPrinter
from .windows import WindowsPrinter

__all__ = ['PlatformPrinter', 'POSIXPrinter', 'WindowsPrinter', 'get_platform_printer']

# Platform registry
PRINTERS = {
    'Linux': POSIXPrinter,
    'Darwin': POSIXPrinter,
    'Windows': WindowsPrinter,
}


def get_platform_printer(system: str = None, **kwargs) -> PlatformPrinter:
    """
    Create the platform printer for a host OS.

    Args:
        system: ``platform.system()`` value, detected when omitted
        **kwargs: Passed to the printer (timeouts, temp dir)

    Raises:
        RuntimeError: If the OS has no spooler support
    """
    system = system or platform.system()
    printer_cls = PRINTERS.get(system)
    if printer_cls is None:
        raise RuntimeError(f'Unsupported platform: {system}')
    if printer_cls is POSIXPrinter:
        return printer_cls(system=system, **kwargs)
    return printer_cls(**kwargs)
