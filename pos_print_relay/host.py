"""
Service Host
============

Runs a PrintRelayService on a background event loop and drives it from
ordinary (threaded) code: the control API, the command line entry
point, tests.

A failed start is retried after a fixed delay until it succeeds or the
host is stopped.
"""

import asyncio
import logging
import threading
import time
from typing import List, Dict, Any, Optional

from .config import RETRY_DELAY, RESTART_DELAY
from .exceptions import BindError
from .logs import read_log
from .server import PrintRelayService

logger = logging.getLogger(__name__)


class ServiceHost:
    """Owns one relay service and the loop it runs on."""

    def __init__(self, service: PrintRelayService, retry_delay: float = RETRY_DELAY,
                 restart_delay: float = RESTART_DELAY):
        self.service = service
        self.retry_delay = retry_delay
        self.restart_delay = restart_delay

        self._lock = threading.RLock()
        self._retry: Optional[threading.Timer] = None
        self._closed = False
        self._stopped = False

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name='print-relay-loop', daemon=True)
        self._thread.start()

    def _run_loop(self):
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _call(self, coro):
        """Run a coroutine on the service loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> bool:
        """
        Start the service.

        Returns:
            True if the listener is up; False if this attempt failed
            and a retry has been scheduled
        """
        with self._lock:
            if self._closed:
                return False
            self._cancel_retry()
            self._stopped = False
            return self._attempt_start()

    def _retry_start(self):
        with self._lock:
            # Superseded, or stop()/shutdown() ran after this timer fired
            if self._retry is not threading.current_thread():
                return
            self._retry = None
            if self._closed or self._stopped:
                return
            self._attempt_start()

    def _attempt_start(self) -> bool:
        # Caller holds the lock
        try:
            self._call(self.service.start())
        except BindError as e:
            logger.error('Failed to start print relay: %s', e)
            self._schedule_retry()
            return False

        logger.info('Print relay started on port %d', self.service.get_status().port)
        return True

    def stop(self):
        """Stop the service. Always succeeds."""
        with self._lock:
            self._cancel_retry()
            self._stopped = True
            if self._closed:
                return
            self._call(self.service.stop())

    def restart(self) -> bool:
        """Stop, wait briefly, start again."""
        logger.info('Restarting print relay')
        self.stop()
        time.sleep(self.restart_delay)
        return self.start()

    def shutdown(self):
        """Stop the service and the loop thread."""
        with self._lock:
            if self._closed:
                return
            self.stop()
            self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def _schedule_retry(self):
        with self._lock:
            if self._closed:
                return
            self._cancel_retry()
            logger.info('Retrying start in %s seconds', self.retry_delay)
            self._retry = threading.Timer(self.retry_delay, self._retry_start)
            self._retry.daemon = True
            self._retry.start()

    def _cancel_retry(self):
        # Caller holds the lock
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None

    # =========================================================================
    # Status window bridge
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        return self.service.get_status().to_dict()

    def get_printers(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.service.discover()]

    def get_logs(self) -> str:
        return read_log(self.service.log_path)
