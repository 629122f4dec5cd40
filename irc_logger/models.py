"""Captured IRC line and the document it is stored as."""

from dataclasses import dataclass

from bson.int64 import Int64

RAW_COLLECTION = "raw"


@dataclass(frozen=True)
class LogRecord:
    timestamp: int   # seconds since epoch, taken on receipt
    text: str        # raw protocol line

    def to_document(self) -> dict:
        # time is always int64 in the stored shape, even when it fits in 32 bits
        return {"time": Int64(self.timestamp), "line": self.text}
