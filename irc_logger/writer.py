"""Writer: consumer thread that drains the log queue into MongoDB."""

import logging
import queue
from threading import Thread

from pymongo.errors import PyMongoError

from irc_logger.errors import PersistenceError
from irc_logger.models import LogRecord

logger = logging.getLogger(__name__)


class Writer(Thread):
    def __init__(self, records: queue.Queue, collection):
        super().__init__(name="writer", daemon=True)
        self._records = records
        self._collection = collection
        self._inserted = 0
        self._failed = 0

    @property
    def inserted(self) -> int:
        return self._inserted

    @property
    def failed(self) -> int:
        return self._failed

    def _insert(self, record: LogRecord):
        try:
            self._collection.insert_one(record.to_document())
        except PyMongoError as exc:
            raise PersistenceError(f"Cannot insert to DB due to error: {exc}") from exc

    def persist(self, record: LogRecord) -> bool:
        """Insert one record. A failed insert is logged and the record dropped."""
        try:
            self._insert(record)
        except PersistenceError as exc:
            self._failed += 1
            logger.error("%s", exc)
            return False
        self._inserted += 1
        logger.debug("Stored line at %d (total: %d)", record.timestamp, self._inserted)
        return True

    def run(self):
        while True:
            self.persist(self._records.get())
