# ypbank/formats/txt_format.py

import logging

from ypbank.core.models import (
    FIELD_NAMES,
    REQUIRED_FIELDS,
    Transaction,
    TransactionCollection,
)
from ypbank.errors import InvalidRecord, MalformedRecord, UnsupportedValue
from ypbank.formats.base import BaseFormat, FormatTag
from ypbank.utils import decode_text, iter_transactions

logger = logging.getLogger(__name__)

_COMMENT = '#'


def _split_blocks(text):
    """Group non-blank lines into blocks, yielding lists of (line_no, line)."""
    block = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            if block:
                yield block
                block = []
            continue
        block.append((line_no, stripped))
    if block:
        yield block


def _representable(value):
    return value == value.strip() and (not value or value.splitlines() == [value])


class TxtFormat(BaseFormat):
    """
    Human-readable records, one ``key: value`` per line:

      transaction_id: 3
      timestamp: 2024-01-05
      amount: 1000
      currency: USD
      account_id: A1
      counterparty: ACME
      description: Invoice 42
      category: services

    Records are separated by blank lines. Lines starting with ``#`` are
    comments. ``counterparty``, ``description`` and ``category`` may be
    omitted and default to empty.
    """
    tag = FormatTag.TXT

    def parse(self, data):
        text = decode_text(data)
        collection = TransactionCollection()
        index = 0
        for lines in _split_blocks(text):
            entries = [(n, l) for n, l in lines if not l.startswith(_COMMENT)]
            if not entries:
                continue
            index += 1
            tx = self._parse_block(entries, index)
            collection.add(tx, location=f"block {index}")
        logger.debug("Parsed %d text record(s)", len(collection))
        return collection

    def _parse_block(self, entries, index):
        values = {}
        for line_no, line in entries:
            key, sep, value = line.partition(':')
            key = key.strip()
            if not sep:
                raise MalformedRecord(
                    f"expected 'key: value', found {line!r}",
                    line=line_no, block=index,
                )
            if key not in FIELD_NAMES:
                raise MalformedRecord(
                    f"unrecognized key {key!r}", line=line_no, block=index, key=key
                )
            if key in values:
                raise MalformedRecord(
                    f"duplicate key {key!r}", line=line_no, block=index, key=key
                )
            values[key] = value.strip()

        first_line = entries[0][0]
        for name in REQUIRED_FIELDS:
            if name not in values:
                raise MalformedRecord(
                    f"missing required key {name!r}",
                    line=first_line, block=index, key=name,
                )

        try:
            return Transaction.from_fields(values)
        except InvalidRecord as e:
            raise e.at(f"block {index}") from e

    def serialize(self, collection):
        blocks = []
        for tx in iter_transactions(collection):
            lines = []
            for name, value in tx.to_fields().items():
                if not _representable(value):
                    raise UnsupportedValue(
                        tx.transaction_id, name, value,
                        "text format cannot hold line breaks or "
                        "leading/trailing whitespace",
                    )
                lines.append(f"{name}: {value}" if value else f"{name}:")
            blocks.append("\n".join(lines) + "\n")
        logger.debug("Serialized %d text record(s)", len(blocks))
        return "\n".join(blocks).encode('utf-8')
