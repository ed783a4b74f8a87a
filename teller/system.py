"""
Banking system wiring: one document store shared by every manager.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import random

from .accounts import AccountManager, total_balance
from .config import TellerConfig, get_config
from .customers import CustomerManager
from .demo import DemoStats, seed_demo_data
from .models import Account, Transaction, new_id, utc_now
from .storage import (
    ACCOUNTS, CUSTOMERS, TRANSACTIONS,
    DocumentStore, InMemoryDocumentStore, JSONFileDocumentStore
)
from .transactions import TransactionProcessor, newest_first


@dataclass
class Overview:
    """Dashboard totals"""
    total_customers: int
    total_accounts: int
    total_balance: Decimal
    recent_transactions: List[Transaction] = field(default_factory=list)


def create_storage(config: TellerConfig) -> DocumentStore:
    """Build the document store selected by configuration"""
    backend = config.storage_backend.lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "json":
        return JSONFileDocumentStore(config.data_dir)
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


class BankingSystem:
    """Banking system with all components initialized"""

    def __init__(
        self,
        storage: Optional[DocumentStore] = None,
        config: Optional[TellerConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config or get_config()
        self.storage = storage or create_storage(self.config)
        self.clock = clock or utc_now
        self.id_factory = id_factory or new_id

        self.customer_manager = CustomerManager(self.storage, self.clock, self.id_factory)
        self.account_manager = AccountManager(
            self.storage, self.clock, self.id_factory,
            rng=rng,
            account_number_attempts=self.config.account_number_attempts
        )
        self.transaction_processor = TransactionProcessor(self.storage, self.clock, self.id_factory)

    def load_demo_data(self) -> DemoStats:
        """Replace all data with the demo fixture"""
        return seed_demo_data(self.storage, self.clock, self.id_factory)

    def overview(self, recent: int = 5) -> Overview:
        """Totals for the dashboard"""
        snapshot = self.storage.load_sets(CUSTOMERS, ACCOUNTS, TRANSACTIONS)
        accounts = [Account.from_dict(data) for data in snapshot[ACCOUNTS]]
        transactions = [Transaction.from_dict(data) for data in snapshot[TRANSACTIONS]]
        return Overview(
            total_customers=len(snapshot[CUSTOMERS]),
            total_accounts=len(accounts),
            total_balance=total_balance(accounts),
            recent_transactions=newest_first(transactions, recent)
        )
