"""
POS Print Relay Models
"""

from .printer import PrinterInfo, PrinterStatus
from .message import ClientCommand, ServerMessage
from .status import ServiceStatus

__all__ = ['PrinterInfo', 'PrinterStatus', 'ClientCommand', 'ServerMessage', 'ServiceStatus']
