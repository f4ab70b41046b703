# ypbank/utils.py
from collections.abc import Mapping

from ypbank.core.models import TransactionCollection
from ypbank.errors import InvalidEncoding

_BOM = "\ufeff"


def decode_text(data: bytes) -> str:
    """
    Decode UTF-8 input for the text-based formats, stripping a leading BOM.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(exc.start, detail=exc.reason) from exc
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text


def iter_transactions(collection):
    """
    Yield Transactions from a TransactionCollection (or any id -> Transaction
    mapping). A plain iterable is first gathered into a collection so that
    duplicate ids fail here rather than in the next parse.
    """
    if not isinstance(collection, Mapping):
        collection = TransactionCollection(collection)
    return iter(collection.values())
