"""
Service Status Model
====================

Snapshot of the relay listener, computed on demand.
"""

from datetime import datetime
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class ServiceStatus:
    """Live state of a relay service."""

    is_running: bool
    port: int
    connections: int
    log_path: str
    state: str = 'stopped'
    started_at: Optional[datetime] = None
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'isRunning': self.is_running,
            'port': self.port,
            'connections': self.connections,
            'logPath': self.log_path,
            'state': self.state,
            'startedAt': self.started_at.isoformat() if self.started_at else None,
            'lastError': self.last_error,
        }
