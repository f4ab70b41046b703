# ypbank/compare.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from ypbank.core.models import FIELD_NAMES, Transaction, TransactionCollection, format_timestamp

logger = logging.getLogger(__name__)


def _display(value):
    if hasattr(value, "isoformat"):
        return format_timestamp(value)
    if isinstance(value, str):
        return repr(value)
    return str(value)


@dataclass(frozen=True)
class FieldDifference:
    name: str
    left_value: object
    right_value: object

    def swapped(self) -> "FieldDifference":
        return FieldDifference(self.name, self.right_value, self.left_value)


@dataclass(frozen=True)
class RecordDifference:
    """A transaction present on both sides whose fields do not match."""

    transaction_id: int
    fields: Tuple[FieldDifference, ...]

    @property
    def field_names(self) -> frozenset:
        return frozenset(f.name for f in self.fields)

    def swapped(self) -> "RecordDifference":
        return RecordDifference(
            self.transaction_id, tuple(f.swapped() for f in self.fields)
        )


@dataclass(frozen=True)
class ComparisonReport:
    """Three-way diff of two transaction collections, each list sorted by id.

    ``missing_in_right`` holds ids only found on the left,
    ``missing_in_left`` ids only found on the right, and ``differing`` the
    ids found on both sides with at least one mismatched field.
    """

    left_label: str = "left"
    right_label: str = "right"
    missing_in_right: List[int] = field(default_factory=list)
    missing_in_left: List[int] = field(default_factory=list)
    differing: List[RecordDifference] = field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not (self.missing_in_right or self.missing_in_left or self.differing)

    def swapped(self) -> "ComparisonReport":
        """The report ``compare_collections(right, left)`` would produce."""
        return ComparisonReport(
            left_label=self.right_label,
            right_label=self.left_label,
            missing_in_right=list(self.missing_in_left),
            missing_in_left=list(self.missing_in_right),
            differing=[d.swapped() for d in self.differing],
        )

    def describe(self) -> Iterator[str]:
        """Yield one human-readable line per difference (or one if identical)."""
        left, right = self.left_label, self.right_label
        if self.identical:
            yield f"The transaction records in '{left}' and '{right}' are identical."
            return
        for tx_id in self.missing_in_right:
            yield f"Transaction {tx_id} is missing in '{right}'."
        for tx_id in self.missing_in_left:
            yield f"Transaction {tx_id} is missing in '{left}'."
        for diff in self.differing:
            details = "; ".join(
                f"{f.name} ({left}: {_display(f.left_value)}, "
                f"{right}: {_display(f.right_value)})"
                for f in diff.fields
            )
            yield (
                f"Transaction {diff.transaction_id} differs between "
                f"'{left}' and '{right}': {details}"
            )


def diff_transactions(left: Transaction, right: Transaction) -> Tuple[FieldDifference, ...]:
    names = left.diff(right)
    return tuple(
        FieldDifference(name, getattr(left, name), getattr(right, name))
        for name in FIELD_NAMES
        if name in names
    )


def compare_collections(left, right, left_label="left", right_label="right"):
    """
    Diff two transaction collections by transaction_id.

    ``left`` and ``right`` may be TransactionCollections or any iterables of
    Transactions; the latter are gathered into collections first, which
    raises DuplicateId if an id repeats. Labels only affect ``describe()``.
    """
    left = TransactionCollection.from_transactions(left)
    right = TransactionCollection.from_transactions(right)

    left_ids = set(left)
    right_ids = set(right)

    differing = []
    for tx_id in sorted(left_ids & right_ids):
        fields = diff_transactions(left[tx_id], right[tx_id])
        if fields:
            differing.append(RecordDifference(tx_id, fields))

    report = ComparisonReport(
        left_label=left_label,
        right_label=right_label,
        missing_in_right=sorted(left_ids - right_ids),
        missing_in_left=sorted(right_ids - left_ids),
        differing=differing,
    )
    logger.debug(
        "Compared %d vs %d record(s): %d missing in %s, %d missing in %s, %d differing",
        len(left), len(right),
        len(report.missing_in_right), right_label,
        len(report.missing_in_left), left_label,
        len(report.differing),
    )
    return report
