# ypbank/__init__.py
"""Parse, convert and compare bank transaction records stored as CSV,
plain text or compact binary."""

import logging

from ypbank.compare import ComparisonReport, compare_collections
from ypbank.core.models import Transaction, TransactionCollection
from ypbank.errors import YPBankError
from ypbank.formats import FormatTag, get_format

logger = logging.getLogger(__name__)


def read_collection(stream, tag, config=None) -> TransactionCollection:
    """Read every record from a binary ``stream`` in format ``tag``."""
    return get_format(tag, config).read(stream)


def write_collection(stream, collection, tag, config=None) -> None:
    get_format(tag, config).write(stream, collection)


def convert(stream, input_tag, output_tag, config=None) -> bytes:
    """Parse ``stream`` as ``input_tag`` and return it serialized as ``output_tag``."""
    collection = read_collection(stream, input_tag, config)
    logger.debug(
        "Converting %d record(s) from %s to %s",
        len(collection), FormatTag(input_tag), FormatTag(output_tag),
    )
    return get_format(output_tag, config).serialize(collection)


def compare_streams(left_stream, left_tag, right_stream, right_tag,
                    left_label="left", right_label="right",
                    config=None) -> ComparisonReport:
    left = read_collection(left_stream, left_tag, config)
    right = read_collection(right_stream, right_tag, config)
    return compare_collections(left, right, left_label, right_label)


__all__ = [
    "ComparisonReport",
    "FormatTag",
    "Transaction",
    "TransactionCollection",
    "YPBankError",
    "compare_collections",
    "compare_streams",
    "convert",
    "get_format",
    "read_collection",
    "write_collection",
]
