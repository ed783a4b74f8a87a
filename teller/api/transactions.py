"""
Transaction endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_banking_system
from .schemas import TransferRequest, envelope
from ..system import BankingSystem


router = APIRouter()


@router.get("/transactions")
def list_transactions(system: BankingSystem = Depends(get_banking_system)):
    """Get every recorded transaction"""
    return envelope([t.to_dict() for t in system.transaction_processor.list_transactions()])


@router.post("/transfer", status_code=status.HTTP_201_CREATED)
def transfer(
    request: TransferRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Make a transfer between accounts"""
    result = system.transaction_processor.transfer(
        from_account_id=request.from_account_id,
        to_account_id=request.to_account_id,
        amount=request.amount,
        description=request.description
    )
    return envelope({
        "transaction": result.transaction.to_dict(),
        "fromAccount": {
            "id": request.from_account_id,
            "newBalance": str(result.from_balance)
        },
        "toAccount": {
            "id": request.to_account_id,
            "newBalance": str(result.to_balance)
        }
    })
