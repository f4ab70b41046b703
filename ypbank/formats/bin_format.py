# ypbank/formats/bin_format.py

"""Compact binary encoding.

Layout, little-endian throughout::

    header   magic b"YPBN" | u8 version | u32 record count
    record   u64 transaction_id | i64 amount | i64 timestamp | 3s currency
             | (u16 length + UTF-8 bytes) x 4:
               account_id, counterparty, description, category

``timestamp`` is whole seconds since 1970-01-01T00:00:00 UTC. Currency
codes shorter than three letters are right-padded with NUL bytes. A record
holds nothing beyond these fields, so its size is 35 bytes plus the encoded
length of its four strings.
"""

from __future__ import annotations

import logging
import struct
from datetime import datetime, timedelta

from ypbank.core.models import STRING_FIELDS, Transaction, TransactionCollection
from ypbank.errors import (
    InvalidEncoding,
    InvalidFormat,
    InvalidRecord,
    TruncatedInput,
    UnsupportedValue,
    UnsupportedVersion,
)
from ypbank.formats.base import BaseFormat, FormatTag
from ypbank.utils import iter_transactions

logger = logging.getLogger(__name__)

MAGIC = b"YPBN"
VERSION = 1

_VERSION = struct.Struct("<B")
_COUNT = struct.Struct("<I")
_FIXED = struct.Struct("<Qqq3s")
_LENGTH = struct.Struct("<H")

HEADER_SIZE = len(MAGIC) + _VERSION.size + _COUNT.size
CURRENCY_SIZE = 3
MAX_STRING_BYTES = 0xFFFF
MAX_RECORDS = 0xFFFFFFFF

_EPOCH = datetime(1970, 1, 1)
_CURRENCY_OFFSET = _FIXED.size - CURRENCY_SIZE


def record_size(tx: Transaction) -> int:
    """Encoded size in bytes of a single record."""
    strings = sum(len(getattr(tx, name).encode("utf-8")) for name in STRING_FIELDS)
    return _FIXED.size + _LENGTH.size * len(STRING_FIELDS) + strings


class _Reader:
    """Cursor over the input that reports where data ran out."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0
        self.record = None

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise TruncatedInput(
                self.offset, size, len(self.data) - self.offset, self.record
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, st: struct.Struct):
        return st.unpack(self.take(st.size))


class BinFormat(BaseFormat):
    tag = FormatTag.BINARY

    def parse(self, data):
        reader = _Reader(bytes(data))

        magic = reader.take(len(MAGIC))
        if magic != MAGIC:
            raise InvalidFormat(f"bad magic {magic!r}, expected {MAGIC!r}", offset=0)
        (version,) = reader.unpack(_VERSION)
        if version != VERSION:
            raise UnsupportedVersion(version, VERSION)
        (count,) = reader.unpack(_COUNT)
        logger.debug("Binary header: version %d, %d record(s)", version, count)

        collection = TransactionCollection()
        for index in range(1, count + 1):
            reader.record = index
            location = f"record {index} at byte offset {reader.offset}"
            tx = self._read_record(reader, location)
            collection.add(tx, location=location)

        if reader.offset != len(reader.data):
            raise InvalidFormat(
                f"{len(reader.data) - reader.offset} trailing byte(s) after "
                f"{count} record(s)",
                offset=reader.offset,
            )
        return collection

    def _read_record(self, reader, location):
        start = reader.offset
        tx_id, amount, seconds, currency_raw = reader.unpack(_FIXED)
        try:
            currency = currency_raw.rstrip(b"\0").decode("ascii")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(
                start + _CURRENCY_OFFSET + e.start, "currency", e.reason
            ) from e

        strings = {}
        for name in STRING_FIELDS:
            (length,) = reader.unpack(_LENGTH)
            field_offset = reader.offset
            raw = reader.take(length)
            try:
                strings[name] = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidEncoding(field_offset + e.start, name, e.reason) from e

        try:
            timestamp = _EPOCH + timedelta(seconds=seconds)
        except OverflowError as e:
            raise InvalidRecord(
                "timestamp", seconds, "outside the supported date range", location
            ) from e

        try:
            return Transaction(
                transaction_id=tx_id,
                timestamp=timestamp,
                amount=amount,
                currency=currency,
                **strings,
            )
        except InvalidRecord as e:
            raise e.at(location) from e

    def serialize(self, collection):
        parts = []
        count = 0
        for tx in iter_transactions(collection):
            count += 1
            if count > MAX_RECORDS:
                raise UnsupportedValue(
                    tx.transaction_id, "record count", count,
                    f"binary format holds at most {MAX_RECORDS} records",
                )
            parts.append(self._encode_record(tx))

        header = MAGIC + _VERSION.pack(VERSION) + _COUNT.pack(count)
        logger.debug("Serialized %d binary record(s)", count)
        return header + b"".join(parts)

    def _encode_record(self, tx):
        currency = tx.currency.encode("ascii")
        if len(currency) > CURRENCY_SIZE:
            raise UnsupportedValue(
                tx.transaction_id, "currency", tx.currency,
                f"binary format holds at most {CURRENCY_SIZE} letters",
            )

        delta = tx.timestamp - _EPOCH
        seconds = delta.days * 86400 + delta.seconds

        out = [
            _FIXED.pack(
                tx.transaction_id,
                tx.amount,
                seconds,
                currency.ljust(CURRENCY_SIZE, b"\0"),
            )
        ]
        for name in STRING_FIELDS:
            encoded = getattr(tx, name).encode("utf-8")
            if len(encoded) > MAX_STRING_BYTES:
                raise UnsupportedValue(
                    tx.transaction_id, name, getattr(tx, name),
                    f"longer than {MAX_STRING_BYTES} UTF-8 bytes",
                )
            out.append(_LENGTH.pack(len(encoded)))
            out.append(encoded)
        return b"".join(out)
