"""
Customer management endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_banking_system
from .schemas import CreateCustomerRequest, UpdateCustomerRequest, envelope
from ..system import BankingSystem


router = APIRouter()


@router.get("")
def list_customers(system: BankingSystem = Depends(get_banking_system)):
    """Get all customers"""
    customers = system.customer_manager.list_customers()
    return envelope([c.to_dict() for c in customers])


@router.get("/{customer_id}")
def get_customer(customer_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Get customer by ID"""
    return envelope(system.customer_manager.get_customer(customer_id).to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
def create_customer(
    request: CreateCustomerRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a new customer"""
    customer = system.customer_manager.create_customer(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone=request.phone,
        address=request.address
    )
    return envelope(customer.to_dict())


@router.put("/{customer_id}")
def update_customer(
    customer_id: str,
    request: UpdateCustomerRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Update customer information"""
    customer = system.customer_manager.update_customer(
        customer_id, **request.model_dump(exclude_unset=True)
    )
    return envelope(customer.to_dict())


@router.delete("/{customer_id}")
def delete_customer(customer_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Delete a customer without accounts"""
    system.customer_manager.delete_customer(customer_id)
    return envelope({"message": "Customer deleted successfully"})


@router.get("/{customer_id}/accounts")
def get_customer_accounts(customer_id: str, system: BankingSystem = Depends(get_banking_system)):
    """Get all accounts for a customer"""
    accounts = system.account_manager.get_customer_accounts(customer_id)
    return envelope([a.to_dict() for a in accounts])
