# ypbank/formats/csv_format.py

import csv
import io
import logging

from ypbank.core.models import FIELD_NAMES, Transaction, TransactionCollection
from ypbank.errors import InvalidRecord, MalformedRecord
from ypbank.formats.base import BaseFormat, FormatTag
from ypbank.utils import decode_text, iter_transactions

logger = logging.getLogger(__name__)

# largest limit the C reader accepts on every platform
_FIELD_SIZE_LIMIT = 2**31 - 1


def _is_blank(row):
    return not row or (len(row) == 1 and not row[0].strip())


class CsvFormat(BaseFormat):
    """
    Comma-separated records with a header row.

    The header must name every canonical field, in order:
      transaction_id,timestamp,amount,currency,account_id,counterparty,description,category

    Fields holding a comma, a double quote or a line break are quoted, with
    internal quotes doubled; a row holding a carriage return is quoted in
    full. Blank lines are skipped and a leading UTF-8 BOM is ignored. Field
    length is not capped.
    """
    tag = FormatTag.CSV

    def parse(self, data):
        text = decode_text(data)
        # lift the 128 KiB per-field cap; restored once parsing finishes
        previous_limit = csv.field_size_limit(_FIELD_SIZE_LIMIT)
        try:
            collection = self._parse_rows(text)
        finally:
            csv.field_size_limit(previous_limit)

        logger.debug("Parsed %d CSV record(s)", len(collection))
        return collection

    def _parse_rows(self, text):
        reader = csv.reader(io.StringIO(text, newline=''), strict=True)
        collection = TransactionCollection()
        header_seen = False

        while True:
            # line_num counts physical lines consumed so far, so the next
            # record starts on the following one
            line_no = reader.line_num + 1
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                raise MalformedRecord(f"bad CSV quoting: {e}", line=line_no) from e

            if _is_blank(row):
                continue

            if not header_seen:
                names = tuple(name.strip() for name in row)
                if names != FIELD_NAMES:
                    raise MalformedRecord(
                        f"expected header {','.join(FIELD_NAMES)!r}, "
                        f"found {','.join(names)!r}",
                        line=line_no,
                    )
                header_seen = True
                continue

            if len(row) != len(FIELD_NAMES):
                raise MalformedRecord(
                    f"expected {len(FIELD_NAMES)} fields, found {len(row)}",
                    line=line_no,
                )

            location = f"line {line_no}"
            try:
                tx = Transaction.from_fields(dict(zip(FIELD_NAMES, row)))
            except InvalidRecord as e:
                raise e.at(location) from e
            collection.add(tx, location=location)

        if not header_seen:
            raise MalformedRecord("missing header", line=1)
        return collection

    def serialize(self, collection):
        buf = io.StringIO(newline='')
        writer = csv.writer(buf, lineterminator='\n')
        # minimal quoting only covers characters of the line terminator, so
        # rows holding a bare CR are fully quoted
        quoted_writer = csv.writer(buf, lineterminator='\n', quoting=csv.QUOTE_ALL)
        writer.writerow(FIELD_NAMES)
        count = 0
        for tx in iter_transactions(collection):
            fields = tx.to_fields()
            row = [fields[name] for name in FIELD_NAMES]
            if any('\r' in value for value in row):
                quoted_writer.writerow(row)
            else:
                writer.writerow(row)
            count += 1
        logger.debug("Serialized %d CSV record(s)", count)
        return buf.getvalue().encode('utf-8')
