# ypbank/errors.py
"""Errors raised while parsing, serializing or comparing transaction records.

Every error carries enough context (line, block, byte offset or record id)
to locate the fault in the input. Codecs raise on the first problem they
find and never return a partial collection.
"""

import reprlib


class YPBankError(Exception):
    """Base class for all ypbank errors."""


class InvalidRecord(YPBankError):
    """A field value failed semantic validation."""

    def __init__(self, field, value, reason=None, location=None):
        self.field = field
        self.value = value
        self.reason = reason
        self.location = location
        msg = f"invalid {field} {value!r}"
        if reason:
            msg += f": {reason}"
        if location:
            msg = f"{location}: {msg}"
        super().__init__(msg)

    def at(self, location):
        """Return a copy of this error tagged with ``location``."""
        return InvalidRecord(self.field, self.value, self.reason, location)


class MalformedRecord(YPBankError):
    """A structural violation of the CSV or text grammar."""

    def __init__(self, message, line=None, block=None, key=None):
        self.line = line
        self.block = block
        self.key = key
        where = []
        if block is not None:
            where.append(f"block {block}")
        if line is not None:
            where.append(f"line {line}")
        if where:
            message = f"{', '.join(where)}: {message}"
        super().__init__(message)


class TruncatedInput(YPBankError):
    """Binary input ended before a complete header or record was read."""

    def __init__(self, offset, needed, available, record=None):
        self.offset = offset
        self.needed = needed
        self.available = available
        self.record = record
        what = "header" if record is None else f"record {record}"
        super().__init__(
            f"truncated {what} at byte offset {offset}: "
            f"needed {needed} byte(s), {available} available"
        )


class InvalidFormat(YPBankError):
    """Binary input is not in the expected layout."""

    def __init__(self, message, offset=None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (byte offset {offset})"
        super().__init__(message)


class UnsupportedVersion(YPBankError):
    def __init__(self, version, supported):
        self.version = version
        self.supported = supported
        super().__init__(
            f"unsupported binary format version {version} (supported: {supported})"
        )


class InvalidEncoding(YPBankError):
    """Bytes could not be decoded as text."""

    def __init__(self, offset, field=None, detail=None):
        self.offset = offset
        self.field = field
        msg = f"invalid encoding at byte offset {offset}"
        if field:
            msg += f" in field '{field}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DuplicateId(YPBankError):
    """Two records in one collection share a transaction_id."""

    def __init__(self, transaction_id, location=None):
        self.transaction_id = transaction_id
        self.location = location
        msg = f"duplicate transaction_id {transaction_id}"
        if location:
            msg = f"{location}: {msg}"
        super().__init__(msg)


class UnsupportedValue(YPBankError):
    """A field value cannot be represented by the target format."""

    def __init__(self, transaction_id, field, value, reason):
        self.transaction_id = transaction_id
        self.field = field
        self.value = value
        super().__init__(
            f"transaction {transaction_id}: cannot encode {field} {reprlib.repr(value)}: {reason}"
        )
