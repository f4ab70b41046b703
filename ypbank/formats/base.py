# ypbank/formats/base.py
from abc import ABC, abstractmethod
from enum import Enum

from ypbank.core.models import TransactionCollection


class FormatTag(str, Enum):
    CSV = "csv"
    TXT = "txt"
    BINARY = "binary"

    def __str__(self):
        return self.value


class BaseFormat(ABC):
    """Parse/serialize pair for one on-disk format."""

    tag = None

    @abstractmethod
    def parse(self, data: bytes) -> TransactionCollection:
        """
        Return every record in ``data`` as a TransactionCollection.
        Raise on the first malformed record; never return a partial result.
        """
        pass

    @abstractmethod
    def serialize(self, collection) -> bytes:
        """Encode ``collection`` (in iteration order) to bytes."""
        pass

    def read(self, stream) -> TransactionCollection:
        return self.parse(stream.read())

    def write(self, stream, collection) -> None:
        stream.write(self.serialize(collection))
