"""
Ledger record types: Customer, Account and Transaction.

Each record maps to one entry of its entity-set document. Field names are
snake_case in Python and camelCase in the stored JSON.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum
import uuid

from .money import to_amount
from .storage import StorageRecord, parse_timestamp


def utc_now() -> datetime:
    """Default clock"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Default record id generator"""
    return str(uuid.uuid4())


class AccountType(Enum):
    """Banking product types"""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "creditCard"  # Negative balance represents card debt


class TransactionType(Enum):
    """Types of money movement"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"


@dataclass
class Customer(StorageRecord):
    """Customer profile"""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    created_at: datetime

    @property
    def full_name(self) -> str:
        """Get customer's full name"""
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=data["id"],
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            created_at=parse_timestamp(data["createdAt"])
        )


@dataclass
class Account(StorageRecord):
    """
    Bank account holding its own running balance
    """
    account_number: str
    customer_id: str
    type: AccountType
    balance: Decimal
    created_at: datetime
    updated_at: datetime

    def can_debit(self, amount: Decimal) -> bool:
        """Check whether amount can leave the account without exceeding its balance"""
        return amount <= self.balance

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return cls(
            id=data["id"],
            account_number=str(data["accountNumber"]),
            customer_id=data["customerId"],
            type=AccountType(data["type"]),
            balance=to_amount(data.get("balance", 0), "balance"),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data.get("updatedAt", data["createdAt"]))
        )


@dataclass
class Transaction(StorageRecord):
    """
    Append-only record of one money movement.

    ``account_id`` is the depositing/withdrawing account or the transfer
    source; ``to_account_id`` is set only for transfers.
    """
    account_id: str
    type: TransactionType
    amount: Decimal
    description: str
    timestamp: datetime
    to_account_id: Optional[str] = None

    def involves(self, account_id: str) -> bool:
        """Check whether either side of the movement is account_id"""
        return self.account_id == account_id or self.to_account_id == account_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            type=TransactionType(data["type"]),
            amount=to_amount(data["amount"]),
            description=data.get("description", ""),
            timestamp=parse_timestamp(data["timestamp"]),
            to_account_id=data.get("toAccountId")
        )
