"""
Demo data for the dashboard.

Replaces all three entity sets with a fixed fixture: three customers, five
accounts (one of them a credit card carrying debt) and seven historical
transactions dated whole days in the past. Loading twice gives the same
counts; this is a full replace, never an append.
"""

from decimal import Decimal
from datetime import datetime, timedelta
from dataclasses import dataclass
from typing import Callable, Optional

from .logging_config import get_logger, log_action
from .models import (
    Account, AccountType, Customer, Transaction, TransactionType, new_id, utc_now
)
from .storage import ACCOUNTS, CUSTOMERS, TRANSACTIONS, DocumentStore


logger = get_logger("teller.demo")

DEMO_CUSTOMERS = [
    ("John", "Doe", "john.doe@example.com", "412-555-1234", "123 Main St, Pittsburgh, PA 15222"),
    ("Jane", "Smith", "jane.smith@example.com", "412-555-5678", "456 Oak Ave, Pittsburgh, PA 15213"),
    ("Robert", "Johnson", "robert.johnson@example.com", "412-555-9012", "789 Pine Blvd, Pittsburgh, PA 15206"),
]

# (account number, owner index, type, balance)
DEMO_ACCOUNTS = [
    ("10000001", 0, AccountType.CHECKING, "5000.00"),
    ("10000002", 0, AccountType.SAVINGS, "10000.00"),
    ("10000003", 1, AccountType.CHECKING, "3500.00"),
    ("10000004", 2, AccountType.SAVINGS, "15000.00"),
    ("10000005", 2, AccountType.CREDIT_CARD, "-2500.00"),
]

# (account index, destination index, type, amount, description, days ago)
DEMO_TRANSACTIONS = [
    (0, None, TransactionType.DEPOSIT, "5000.00", "Initial deposit", 30),
    (0, None, TransactionType.WITHDRAWAL, "1000.00", "ATM withdrawal", 20),
    (0, 1, TransactionType.TRANSFER, "2000.00", "Transfer to savings", 10),
    (1, None, TransactionType.DEPOSIT, "8000.00", "Initial deposit", 25),
    (2, None, TransactionType.DEPOSIT, "3500.00", "Initial deposit", 15),
    (3, None, TransactionType.DEPOSIT, "15000.00", "Initial deposit", 45),
    (4, None, TransactionType.WITHDRAWAL, "2500.00", "Credit card purchase", 5),
]


@dataclass
class DemoStats:
    """Record counts after a demo load"""
    customers: int
    accounts: int
    transactions: int


def seed_demo_data(
    storage: DocumentStore,
    clock: Optional[Callable[[], datetime]] = None,
    id_factory: Optional[Callable[[], str]] = None
) -> DemoStats:
    """Replace every entity set with the demo fixture in one unit of work"""
    clock = clock or utc_now
    id_factory = id_factory or new_id
    now = clock()

    customers = [
        Customer(
            id=id_factory(),
            first_name=first,
            last_name=last,
            email=email,
            phone=phone,
            address=address,
            created_at=now
        )
        for first, last, email, phone, address in DEMO_CUSTOMERS
    ]

    accounts = [
        Account(
            id=id_factory(),
            account_number=number,
            customer_id=customers[owner].id,
            type=kind,
            balance=Decimal(balance),
            created_at=now,
            updated_at=now
        )
        for number, owner, kind, balance in DEMO_ACCOUNTS
    ]

    transactions = [
        Transaction(
            id=id_factory(),
            account_id=accounts[source].id,
            type=kind,
            amount=Decimal(amount),
            description=description,
            timestamp=now - timedelta(days=days_ago),
            to_account_id=accounts[target].id if target is not None else None
        )
        for source, target, kind, amount, description, days_ago in DEMO_TRANSACTIONS
    ]

    with storage.atomic():
        storage.save_set(CUSTOMERS, [c.to_dict() for c in customers])
        storage.save_set(ACCOUNTS, [a.to_dict() for a in accounts])
        storage.save_set(TRANSACTIONS, [t.to_dict() for t in transactions])

    stats = DemoStats(
        customers=len(customers),
        accounts=len(accounts),
        transactions=len(transactions)
    )
    log_action(
        logger, "info", "Demo data loaded",
        action="load_demo_data", resource="ledger",
        extra={"customers": stats.customers, "accounts": stats.accounts,
               "transactions": stats.transactions}
    )
    return stats
