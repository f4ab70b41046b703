# ypbank/core/models.py
from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional

from ypbank.errors import DuplicateId, InvalidRecord

FIELD_NAMES = (
    "transaction_id",
    "timestamp",
    "amount",
    "currency",
    "account_id",
    "counterparty",
    "description",
    "category",
)
REQUIRED_FIELDS = FIELD_NAMES[:5]
STRING_FIELDS = ("account_id", "counterparty", "description", "category")

MAX_ID = 2**64 - 1
MIN_AMOUNT = -(2**63)
MAX_AMOUNT = 2**63 - 1

_ID_RX = re.compile(r"\d+", re.ASCII)
_AMOUNT_RX = re.compile(r"[+-]?\d+", re.ASCII)
_CURRENCY_RX = re.compile(r"[A-Za-z]+", re.ASCII)


def _normalize_timestamp(value):
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            except OverflowError as exc:
                raise InvalidRecord(
                    "timestamp", value, "outside the supported date range"
                ) from exc
        if value.microsecond:
            raise InvalidRecord(
                "timestamp", value, "sub-second precision is not supported"
            )
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidRecord("timestamp", value, "expected a date or datetime")


def parse_timestamp(text: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or an ISO 8601 date-time into a naive UTC datetime."""
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidRecord("timestamp", text, str(exc)) from exc
    return _normalize_timestamp(parsed)


def format_timestamp(value: datetime) -> str:
    if value.hour == value.minute == value.second == 0:
        return value.date().isoformat()
    return value.isoformat(timespec="seconds")


@dataclass(frozen=True)
class Transaction:
    """A single transaction in the canonical model.

    ``timestamp`` accepts a ``date`` or a ``datetime`` and is stored as a
    naive UTC ``datetime``; a bare date equals midnight of that day.
    ``amount`` is in minor currency units.
    """

    transaction_id: int
    timestamp: datetime
    amount: int
    currency: str
    account_id: str
    counterparty: str = ""
    description: str = ""
    category: str = ""

    def __post_init__(self):
        tx_id = self.transaction_id
        if tx_id is None:
            raise InvalidRecord("transaction_id", tx_id, "missing")
        if isinstance(tx_id, bool) or not isinstance(tx_id, int):
            raise InvalidRecord("transaction_id", tx_id, "expected an integer")
        if not 0 <= tx_id <= MAX_ID:
            raise InvalidRecord(
                "transaction_id", tx_id, "must be an unsigned 64-bit integer"
            )

        object.__setattr__(self, "timestamp", _normalize_timestamp(self.timestamp))

        amount = self.amount
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidRecord(
                "amount", amount, "expected an integer number of minor units"
            )
        if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
            raise InvalidRecord("amount", amount, "out of signed 64-bit range")

        if not isinstance(self.currency, str) or not _CURRENCY_RX.fullmatch(
            self.currency
        ):
            raise InvalidRecord(
                "currency", self.currency, "expected an alphabetic code"
            )

        for name in STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise InvalidRecord(name, value, "expected a string")
        if not self.account_id:
            raise InvalidRecord("account_id", self.account_id, "must not be empty")

    @classmethod
    def from_fields(cls, raw: Mapping) -> "Transaction":
        """Build a Transaction from text field values, as found in CSV or text files.

        Optional string fields absent from ``raw`` default to ``""``.
        """
        for name in REQUIRED_FIELDS:
            if raw.get(name) is None:
                raise InvalidRecord(name, None, "missing")

        tx_id = raw["transaction_id"].strip()
        if not _ID_RX.fullmatch(tx_id):
            raise InvalidRecord("transaction_id", raw["transaction_id"],
                                "expected an unsigned integer")
        amount = raw["amount"].strip()
        if not _AMOUNT_RX.fullmatch(amount):
            raise InvalidRecord("amount", raw["amount"],
                                "expected an integer number of minor units")

        return cls(
            transaction_id=int(tx_id),
            timestamp=parse_timestamp(raw["timestamp"]),
            amount=int(amount),
            currency=raw["currency"].strip(),
            account_id=raw["account_id"],
            counterparty=raw.get("counterparty") or "",
            description=raw.get("description") or "",
            category=raw.get("category") or "",
        )

    def to_fields(self) -> Dict[str, str]:
        """Canonical text form of every field, in FIELD_NAMES order."""
        return {
            "transaction_id": str(self.transaction_id),
            "timestamp": format_timestamp(self.timestamp),
            "amount": str(self.amount),
            "currency": self.currency,
            "account_id": self.account_id,
            "counterparty": self.counterparty,
            "description": self.description,
            "category": self.category,
        }

    def diff(self, other: "Transaction") -> frozenset:
        """Return the names of the fields whose values differ."""
        return frozenset(
            f.name for f in fields(self) if getattr(self, f.name) != getattr(other, f.name)
        )

    def describe(self) -> str:
        """Stable one-line rendering in FIELD_NAMES order."""
        parts = []
        for name, text in self.to_fields().items():
            parts.append(f"{name}={text!r}" if name in STRING_FIELDS else f"{name}={text}")
        return " ".join(parts)


class TransactionCollection(Mapping):
    """Ordered mapping of transaction_id to Transaction.

    Iteration follows insertion order so a parsed file serializes back in
    its original order. Ids are unique; adding a duplicate raises
    ``DuplicateId``.
    """

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._records: Dict[int, Transaction] = {}
        for tx in transactions or ():
            self.add(tx)

    @classmethod
    def from_transactions(cls, transactions) -> "TransactionCollection":
        if isinstance(transactions, cls):
            return transactions
        if isinstance(transactions, Mapping):
            transactions = transactions.values()
        return cls(transactions)

    def add(self, tx: Transaction, location: Optional[str] = None) -> None:
        if tx.transaction_id in self._records:
            raise DuplicateId(tx.transaction_id, location)
        self._records[tx.transaction_id] = tx

    def ids(self) -> List[int]:
        return list(self._records)

    def transactions(self) -> List[Transaction]:
        return list(self._records.values())

    def __getitem__(self, transaction_id: int) -> Transaction:
        return self._records[transaction_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"TransactionCollection({self.transactions()!r})"
