from datetime import date, datetime

import pytest

from ypbank.core.models import Transaction, TransactionCollection


def _make_tx(transaction_id=1, **overrides):
    fields = {
        'transaction_id': transaction_id,
        'timestamp': date(2024, 1, 5),
        'amount': 1000,
        'currency': 'USD',
        'account_id': 'A1',
        'counterparty': 'ACME Corp',
        'description': 'Invoice 42',
        'category': 'services',
    }
    fields.update(overrides)
    return Transaction(**fields)


@pytest.fixture
def make_tx():
    return _make_tx


@pytest.fixture
def sample_collection():
    """Records every format can hold, including awkward values."""
    return TransactionCollection([
        _make_tx(3),
        _make_tx(
            1,
            timestamp=datetime(2024, 2, 29, 13, 45, 10),
            amount=-250,
            currency='EUR',
            account_id='DE-0042',
            counterparty='Café "Zum Löwen", Berlin',
            description='Lunch, 2 people',
            category='',
        ),
        _make_tx(
            2**64 - 1,
            timestamp=date(1969, 12, 31),
            amount=-(2**63),
            currency='JPY',
            counterparty='',
            description='',
            category='fees',
        ),
        _make_tx(7, amount=0, currency='XX', description='Ref: 7 # not a comment'),
    ])
