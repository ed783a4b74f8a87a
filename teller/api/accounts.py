"""
Account management and money movement endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_banking_system
from .schemas import CreateAccountRequest, MovementRequest, envelope
from ..system import BankingSystem
from ..transactions import MovementResult


router = APIRouter()


def _movement_payload(result: MovementResult) -> dict:
    return {
        "transaction": result.transaction.to_dict(),
        "newBalance": str(result.new_balance)
    }


@router.get("")
def list_accounts(system: BankingSystem = Depends(get_banking_system)):
    """Get all accounts"""
    return envelope([a.to_dict() for a in system.account_manager.list_accounts()])


@router.get("/{account_id}")
def get_account(account_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Get account details"""
    return envelope(system.account_manager.get_account(account_id).to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
def create_account(
    request: CreateAccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Open a new account, seeding a deposit when initialBalance is positive"""
    account, _ = system.account_manager.create_account(
        customer_id=request.customer_id,
        account_type=request.type,
        initial_balance=request.initial_balance
    )
    return envelope(account.to_dict())


@router.delete("/{account_id}")
def delete_account(account_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Delete an account with zero balance"""
    system.account_manager.delete_account(account_id)
    return envelope({"message": "Account deleted successfully"})


@router.get("/{account_id}/transactions")
def get_account_transactions(account_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Get transaction history for account, both sides of transfers included"""
    transactions = system.transaction_processor.get_account_transactions(account_id)
    return envelope([t.to_dict() for t in transactions])


@router.post("/{account_id}/deposit", status_code=status.HTTP_201_CREATED)
def deposit(
    account_id: str,
    request: MovementRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Make a deposit"""
    result = system.transaction_processor.deposit(
        account_id=account_id,
        amount=request.amount,
        description=request.description
    )
    return envelope(_movement_payload(result))


@router.post("/{account_id}/withdraw", status_code=status.HTTP_201_CREATED)
def withdraw(
    account_id: str,
    request: MovementRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Make a withdrawal"""
    result = system.transaction_processor.withdraw(
        account_id=account_id,
        amount=request.amount,
        description=request.description
    )
    return envelope(_movement_payload(result))
