"""Listener: producer thread that turns IRC lines into timestamped records."""

import logging
import queue
import time
from threading import Thread

from irc_logger.errors import SessionError
from irc_logger.models import LogRecord

logger = logging.getLogger(__name__)


class Listener(Thread):
    """Owns the IRC session. Emits one LogRecord per received line, in order.

    The first SessionError is handed to the error queue and the thread ends;
    nothing is emitted after it.
    """

    def __init__(self, session, records: queue.Queue, errors: queue.Queue,
                 debug: bool = False, clock=time.time):
        super().__init__(name="listener", daemon=True)
        self._session = session
        self._records = records
        self._errors = errors
        self._debug = debug
        self._clock = clock
        self._identified = False
        self._emitted = 0

    @property
    def emitted(self) -> int:
        return self._emitted

    def run(self):
        try:
            self._listen()
        except SessionError as exc:
            logger.debug("Listener stopping after %d records: %s", self._emitted, exc)
            self._errors.put(exc)
        except Exception as exc:
            logger.exception("Listener crashed after %d records", self._emitted)
            error = SessionError(f"Listener failed: {exc}")
            error.__cause__ = exc
            self._errors.put(error)

    def _listen(self):
        while True:
            event = self._session.next_event()

            timestamp = int(self._clock())
            self._records.put(LogRecord(timestamp, self._session.render(event)))
            self._emitted += 1

            # Retried on every line until it first succeeds, then never again.
            if not self._identified:
                self._identified = self._session.identify()

            if self._debug:
                print(repr(event), flush=True)
