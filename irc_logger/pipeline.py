"""Wires listener and writer together and waits for the fatal session error.

The log queue is unbounded: a slow database never stalls ingestion, at the
cost of memory growing while it lags. The error queue holds a single slot
because the listener stops after reporting its one error.
"""

import logging
import queue
import time

from irc_logger.errors import SessionError
from irc_logger.listener import Listener
from irc_logger.writer import Writer

logger = logging.getLogger(__name__)


class Pipeline:
    def __init__(self, session, collection, debug: bool = False, clock=time.time):
        self._records: queue.Queue = queue.Queue()
        self._errors: queue.Queue = queue.Queue(maxsize=1)
        self.listener = Listener(session, self._records, self._errors,
                                 debug=debug, clock=clock)
        self.writer = Writer(self._records, collection)

    def start(self):
        self.listener.start()
        self.writer.start()
        logger.info("Pipeline running")

    def wait(self) -> SessionError:
        """Block, without timeout, until the listener reports its fatal error."""
        error = self._errors.get()
        logger.info("Session ended after %d lines (%d stored, %d dropped)",
                    self.listener.emitted, self.writer.inserted, self.writer.failed)
        return error

    def run(self) -> SessionError:
        self.start()
        return self.wait()
