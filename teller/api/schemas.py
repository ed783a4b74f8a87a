"""
Pydantic schemas for API requests and the response envelope
"""

from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel


# JSON number or numeric string; parsed to Decimal by the ledger
AmountValue = Optional[Union[StrictInt, StrictFloat, StrictStr]]


class CamelModel(BaseModel):
    """Accepts the frontend's camelCase keys (snake_case also works)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Customer schemas
class CreateCustomerRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UpdateCustomerRequest(CamelModel):
    """Partial update; id and createdAt in the body are ignored"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


# Account schemas
class CreateAccountRequest(CamelModel):
    customer_id: Optional[str] = None
    type: Optional[str] = None
    initial_balance: AmountValue = 0


# Transaction schemas
class MovementRequest(CamelModel):
    amount: AmountValue = None
    description: Optional[str] = None


class TransferRequest(CamelModel):
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    amount: AmountValue = None
    description: Optional[str] = None


def envelope(data: Any) -> dict:
    """Successful response body"""
    return {"success": True, "data": data}


def error_envelope(message: str) -> dict:
    """Failed response body"""
    return {"success": False, "error": message}
