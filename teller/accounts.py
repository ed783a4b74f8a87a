"""
Account Management Module

Manages account lifecycle: opening an account for an existing customer (with
an optional opening deposit), account-number generation, and closing an
account once its balance is exactly zero.
"""

from decimal import Decimal
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple
import random

from .errors import ConflictError, InvalidArgumentError, NotFoundError
from .logging_config import get_logger, log_action
from .models import Account, AccountType, Transaction, TransactionType, new_id, utc_now
from .money import ZERO, to_amount
from .storage import ACCOUNTS, CUSTOMERS, TRANSACTIONS, DocumentStore


ACCOUNT_NUMBER_MIN = 10000000
ACCOUNT_NUMBER_MAX = 99999999

INITIAL_DEPOSIT_DESCRIPTION = "Initial deposit"


def parse_account_type(value: Any) -> AccountType:
    """Resolve an account type from its value ('checking', 'savings', 'creditCard')"""
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise InvalidArgumentError(f"Account type must be one of: {allowed}")


def total_balance(accounts: List[Account]) -> Decimal:
    """Sum of account balances"""
    return sum((account.balance for account in accounts), ZERO)


class AccountManager:
    """
    Manages accounts and their running balances
    """

    def __init__(
        self,
        storage: DocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        rng: Optional[random.Random] = None,
        account_number_attempts: int = 20
    ):
        self.storage = storage
        self.clock = clock or utc_now
        self.id_factory = id_factory or new_id
        self.rng = rng or random.Random()
        self.account_number_attempts = account_number_attempts
        self.logger = get_logger("teller.accounts")

    def create_account(
        self,
        customer_id: str,
        account_type: Any,
        initial_balance: Any = 0
    ) -> Tuple[Account, Optional[Transaction]]:
        """
        Open a new account

        Args:
            customer_id: ID of account owner
            account_type: AccountType or its string value
            initial_balance: Opening balance, zero or positive

        Returns:
            The created Account, and the synthesized "Initial deposit"
            Transaction when initial_balance is positive (else None)

        Raises:
            InvalidArgumentError: Missing customer/type, unknown type, or
                negative/non-numeric initial balance
            NotFoundError: If the customer does not exist
        """
        if not customer_id or not account_type:
            raise InvalidArgumentError("Customer ID and account type are required")

        kind = parse_account_type(account_type)
        opening = to_amount(initial_balance if initial_balance is not None else 0, "initial balance")
        if opening < ZERO:
            raise InvalidArgumentError("Initial balance cannot be negative")

        with self.storage.atomic():
            customers = self.storage.load_set(CUSTOMERS)
            if not any(c.get("id") == customer_id for c in customers):
                raise NotFoundError("Customer not found")

            accounts = self.storage.load_set(ACCOUNTS)
            now = self.clock()
            account = Account(
                id=self.id_factory(),
                account_number=self._generate_account_number(accounts),
                customer_id=customer_id,
                type=kind,
                balance=opening,
                created_at=now,
                updated_at=now
            )
            accounts.append(account.to_dict())
            self.storage.save_set(ACCOUNTS, accounts)

            deposit = None
            if opening > ZERO:
                deposit = Transaction(
                    id=self.id_factory(),
                    account_id=account.id,
                    type=TransactionType.DEPOSIT,
                    amount=opening,
                    description=INITIAL_DEPOSIT_DESCRIPTION,
                    timestamp=now
                )
                transactions = self.storage.load_set(TRANSACTIONS)
                transactions.append(deposit.to_dict())
                self.storage.save_set(TRANSACTIONS, transactions)

        log_action(
            self.logger, "info", f"Account opened: {kind.value}",
            action="create_account", resource=f"account:{account.id}",
            extra={
                "account_number": account.account_number,
                "customer_id": customer_id,
                "initial_balance": str(opening)
            }
        )
        return account, deposit

    def find_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID, or None"""
        for data in self.storage.load_set(ACCOUNTS):
            if data.get("id") == account_id:
                return Account.from_dict(data)
        return None

    def get_account(self, account_id: str) -> Account:
        """Get account by ID"""
        account = self.find_account(account_id)
        if not account:
            raise NotFoundError("Account not found")
        return account

    def list_accounts(self) -> List[Account]:
        """Get all accounts in insertion order"""
        return [Account.from_dict(data) for data in self.storage.load_set(ACCOUNTS)]

    def get_customer_accounts(self, customer_id: str) -> List[Account]:
        """Get all accounts for a customer"""
        return [
            Account.from_dict(data)
            for data in self.storage.load_set(ACCOUNTS)
            if data.get("customerId") == customer_id
        ]

    def get_total_balance(self) -> Decimal:
        """Sum of every account balance"""
        return total_balance(self.list_accounts())

    def delete_account(self, account_id: str) -> None:
        """
        Delete an account whose balance is exactly zero.

        Debt (negative) balances block deletion as well as positive ones.
        The account's transactions are kept.
        """
        with self.storage.atomic():
            accounts = self.storage.load_set(ACCOUNTS)
            match = next((a for a in accounts if a.get("id") == account_id), None)
            if match is None:
                raise NotFoundError("Account not found")

            account = Account.from_dict(match)
            if account.balance != ZERO:
                raise ConflictError("Cannot delete account with non-zero balance")

            self.storage.save_set(ACCOUNTS, [a for a in accounts if a.get("id") != account_id])

        log_action(
            self.logger, "info", "Account deleted",
            action="delete_account", resource=f"account:{account_id}",
            extra={"account_number": account.account_number}
        )

    def _generate_account_number(self, accounts: List[dict]) -> str:
        """Draw an 8-digit number not used by any existing account"""
        taken = {str(a.get("accountNumber")) for a in accounts}
        for _ in range(self.account_number_attempts):
            candidate = str(self.rng.randint(ACCOUNT_NUMBER_MIN, ACCOUNT_NUMBER_MAX))
            if candidate not in taken:
                return candidate
            self.logger.warning(f"Account number collision on {candidate}, retrying")
        raise ConflictError("Could not generate a unique account number")
