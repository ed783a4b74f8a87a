"""
Transaction Processing Module

Handles the three money movements: deposits, withdrawals and transfers.
Each movement updates account balances and appends exactly one Transaction
in the same unit of work, so balances and history never disagree.
"""

from decimal import Decimal, Inexact, localcontext
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import InsufficientFundsError, InvalidArgumentError, NotFoundError
from .logging_config import get_logger, log_action
from .models import Account, Transaction, TransactionType, new_id, utc_now
from .money import to_amount, to_positive_amount
from .storage import ACCOUNTS, TRANSACTIONS, DocumentStore


DEFAULT_DESCRIPTIONS = {
    TransactionType.DEPOSIT: "Deposit",
    TransactionType.WITHDRAWAL: "Withdrawal",
    TransactionType.TRANSFER: "Transfer",
}


def newest_first(transactions: List[Transaction], limit: int) -> List[Transaction]:
    """The most recent transactions by timestamp"""
    return sorted(transactions, key=lambda t: t.timestamp, reverse=True)[:limit]


@dataclass
class MovementResult:
    """Outcome of a deposit or withdrawal"""
    transaction: Transaction
    new_balance: Decimal


@dataclass
class TransferResult:
    """Outcome of a transfer: the record plus both resulting balances"""
    transaction: Transaction
    from_balance: Decimal
    to_balance: Decimal


class TransactionProcessor:
    """
    Applies money movements to account balances and records them
    """

    def __init__(
        self,
        storage: DocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None
    ):
        self.storage = storage
        self.clock = clock or utc_now
        self.id_factory = id_factory or new_id
        self.logger = get_logger("teller.transactions")

    def deposit(
        self,
        account_id: str,
        amount: Any,
        description: Optional[str] = None
    ) -> MovementResult:
        """
        Credit an account

        Raises:
            InvalidArgumentError: If amount is missing, non-numeric or not positive,
                or the new balance no longer fits at cent precision
            NotFoundError: If the account does not exist
        """
        value = to_positive_amount(amount)

        with self.storage.atomic():
            accounts = self.storage.load_set(ACCOUNTS)
            index, account = self._locate(accounts, account_id)
            credited = self._credited(account, value)

            now = self.clock()
            account.balance = credited
            account.updated_at = now
            accounts[index] = account.to_dict()

            transaction = self._record(
                TransactionType.DEPOSIT, account_id, value, description, now
            )
            self.storage.save_set(ACCOUNTS, accounts)

        self._log(transaction, {"new_balance": str(account.balance)})
        return MovementResult(transaction=transaction, new_balance=account.balance)

    def withdraw(
        self,
        account_id: str,
        amount: Any,
        description: Optional[str] = None
    ) -> MovementResult:
        """
        Debit an account, never past its current balance

        Raises:
            InvalidArgumentError: If amount is missing, non-numeric or not positive
            NotFoundError: If the account does not exist
            InsufficientFundsError: If amount exceeds the balance
        """
        value = to_positive_amount(amount)

        with self.storage.atomic():
            accounts = self.storage.load_set(ACCOUNTS)
            index, account = self._locate(accounts, account_id)
            self._require_funds(account, value)

            now = self.clock()
            account.balance -= value
            account.updated_at = now
            accounts[index] = account.to_dict()

            transaction = self._record(
                TransactionType.WITHDRAWAL, account_id, value, description, now
            )
            self.storage.save_set(ACCOUNTS, accounts)

        self._log(transaction, {"new_balance": str(account.balance)})
        return MovementResult(transaction=transaction, new_balance=account.balance)

    def transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Any,
        description: Optional[str] = None
    ) -> TransferResult:
        """
        Move funds between two different accounts

        Args:
            from_account_id: Account debited
            to_account_id: Account credited
            amount: Positive amount to move
            description: Optional note, defaults to "Transfer"

        Returns:
            TransferResult with the transfer record and both new balances

        Raises:
            InvalidArgumentError: Missing ids or amount, non-positive amount,
                or source and destination are the same account
            NotFoundError: If either account does not exist
            InsufficientFundsError: If amount exceeds the source balance
        """
        if not from_account_id or not to_account_id:
            raise InvalidArgumentError("From account, to account, and valid amount are required")
        value = to_positive_amount(amount)
        if from_account_id == to_account_id:
            raise InvalidArgumentError("Cannot transfer to the same account")

        with self.storage.atomic():
            accounts = self.storage.load_set(ACCOUNTS)
            try:
                from_index, source = self._locate(accounts, from_account_id)
                to_index, destination = self._locate(accounts, to_account_id)
            except NotFoundError:
                raise NotFoundError("One or both accounts not found")
            self._require_funds(source, value)

            credited = self._credited(destination, value)

            now = self.clock()
            source.balance -= value
            source.updated_at = now
            destination.balance = credited
            destination.updated_at = now
            accounts[from_index] = source.to_dict()
            accounts[to_index] = destination.to_dict()

            transaction = self._record(
                TransactionType.TRANSFER, from_account_id, value, description, now,
                to_account_id=to_account_id
            )
            self.storage.save_set(ACCOUNTS, accounts)

        self._log(transaction, {
            "from_balance": str(source.balance),
            "to_balance": str(destination.balance)
        })
        return TransferResult(
            transaction=transaction,
            from_balance=source.balance,
            to_balance=destination.balance
        )

    def list_transactions(self) -> List[Transaction]:
        """Get every transaction in the order recorded"""
        return [Transaction.from_dict(data) for data in self.storage.load_set(TRANSACTIONS)]

    def get_account_transactions(self, account_id: str) -> List[Transaction]:
        """Get transactions where the account is either side of the movement"""
        return [t for t in self.list_transactions() if t.involves(account_id)]

    def get_recent_transactions(self, limit: int = 5) -> List[Transaction]:
        """Most recent transactions by timestamp, newest first"""
        return newest_first(self.list_transactions(), limit)

    def _locate(self, accounts: List[Dict[str, Any]], account_id: str) -> Tuple[int, Account]:
        for index, data in enumerate(accounts):
            if data.get("id") == account_id:
                return index, Account.from_dict(data)
        raise NotFoundError("Account not found")

    def _require_funds(self, account: Account, amount: Decimal) -> None:
        if not account.can_debit(amount):
            log_action(
                self.logger, "warning", "Insufficient funds",
                action="reject_debit", resource=f"account:{account.id}",
                extra={"balance": str(account.balance), "requested": str(amount)}
            )
            raise InsufficientFundsError("Insufficient funds")

    def _credited(self, account: Account, amount: Decimal) -> Decimal:
        """New balance after a credit; must still fit at cent precision"""
        with localcontext() as ctx:
            ctx.traps[Inexact] = True
            try:
                balance = account.balance + amount
            except Inexact:
                raise InvalidArgumentError("Balance is out of range")
        return to_amount(balance, "balance")

    def _record(
        self,
        transaction_type: TransactionType,
        account_id: str,
        amount: Decimal,
        description: Optional[str],
        timestamp: datetime,
        to_account_id: Optional[str] = None
    ) -> Transaction:
        """Append a transaction to the staged transactions set"""
        transaction = Transaction(
            id=self.id_factory(),
            account_id=account_id,
            type=transaction_type,
            amount=amount,
            description=description or DEFAULT_DESCRIPTIONS[transaction_type],
            timestamp=timestamp,
            to_account_id=to_account_id
        )
        transactions = self.storage.load_set(TRANSACTIONS)
        transactions.append(transaction.to_dict())
        self.storage.save_set(TRANSACTIONS, transactions)
        return transaction

    def _log(self, transaction: Transaction, balances: Dict[str, str]) -> None:
        log_action(
            self.logger, "info", f"Transaction recorded: {transaction.type.value}",
            action=transaction.type.value, resource=f"transaction:{transaction.id}",
            extra={
                "account_id": transaction.account_id,
                "to_account_id": transaction.to_account_id,
                "amount": str(transaction.amount),
                **balances
            }
        )
