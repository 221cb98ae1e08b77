"""
Printer Model
=============

A printer as reported by the OS spooler in one discovery snapshot.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any


class PrinterStatus(str, Enum):
    """Spooler-reported printer state."""

    READY = 'READY'
    OFFLINE = 'OFFLINE'
    PRINTING = 'PRINTING'


@dataclass
class PrinterInfo:
    """Printer discovered on the host.

    Recomputed on every discovery call, never persisted.
    """

    name: str
    is_default: bool = False
    status: PrinterStatus = PrinterStatus.READY

    @property
    def is_connected(self) -> bool:
        return self.status != PrinterStatus.OFFLINE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {
            'name': self.name,
            'isDefault': self.is_default,
            'status': self.status.value,
            'isConnected': self.is_connected,
        }
