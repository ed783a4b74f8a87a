"""
Customer Management Module

Manages customer profiles: creation with required-field validation, in-place
profile updates, and deletion guarded by account ownership.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import re

from .errors import ConflictError, InvalidArgumentError, NotFoundError
from .logging_config import get_logger, log_action
from .models import Customer, new_id, utc_now
from .storage import ACCOUNTS, CUSTOMERS, DocumentStore


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

PROFILE_FIELDS = ("first_name", "last_name", "email", "phone", "address")


def _validate_profile(values: Dict[str, Any]) -> Dict[str, str]:
    """Check and normalize profile fields; raises before anything is changed"""
    cleaned = {}
    for name, value in values.items():
        if value is None or not isinstance(value, str) or not value.strip():
            label = name.replace('_', ' ')
            raise InvalidArgumentError(f"{label.capitalize()} is required")
        cleaned[name] = value.strip()

    if "email" in cleaned and not EMAIL_PATTERN.match(cleaned["email"]):
        raise InvalidArgumentError("Invalid email format")

    return cleaned


class CustomerManager:
    """
    Manages the customer lifecycle against the customers entity set
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
        self.logger = get_logger("teller.customers")

    def create_customer(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        address: str
    ) -> Customer:
        """
        Create a new customer

        Args:
            first_name: Customer's first name
            last_name: Customer's last name
            email: Customer's email address
            phone: Phone number
            address: Postal address as a single line

        Returns:
            Created Customer object

        Raises:
            InvalidArgumentError: If a field is blank or the email is malformed
        """
        profile = _validate_profile({
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": phone,
            "address": address
        })

        with self.storage.atomic():
            customer = Customer(
                id=self.id_factory(),
                created_at=self.clock(),
                **profile
            )
            customers = self.storage.load_set(CUSTOMERS)
            customers.append(customer.to_dict())
            self.storage.save_set(CUSTOMERS, customers)

        log_action(
            self.logger, "info", "Customer created",
            action="create_customer", resource=f"customer:{customer.id}",
            extra={"full_name": customer.full_name}
        )
        return customer

    def find_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID, or None"""
        for data in self.storage.load_set(CUSTOMERS):
            if data.get("id") == customer_id:
                return Customer.from_dict(data)
        return None

    def get_customer(self, customer_id: str) -> Customer:
        """Get customer by ID"""
        customer = self.find_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    def list_customers(self) -> List[Customer]:
        """Get all customers in insertion order"""
        return [Customer.from_dict(data) for data in self.storage.load_set(CUSTOMERS)]

    def update_customer(self, customer_id: str, **changes: Any) -> Customer:
        """
        Replace profile fields of an existing customer.

        ``None`` values are treated as "not provided". ``id`` and
        ``created_at`` are never changed.
        """
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise InvalidArgumentError(f"Unknown customer fields: {', '.join(sorted(unknown))}")

        provided = {k: v for k, v in changes.items() if v is not None}
        cleaned = _validate_profile(provided)

        with self.storage.atomic():
            customers = self.storage.load_set(CUSTOMERS)
            for index, data in enumerate(customers):
                if data.get("id") == customer_id:
                    break
            else:
                raise NotFoundError("Customer not found")

            customer = Customer.from_dict(data)
            for name, value in cleaned.items():
                setattr(customer, name, value)

            customers[index] = customer.to_dict()
            self.storage.save_set(CUSTOMERS, customers)

        log_action(
            self.logger, "info", "Customer updated",
            action="update_customer", resource=f"customer:{customer_id}",
            extra={"fields": sorted(cleaned)}
        )
        return customer

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer that owns no accounts"""
        with self.storage.atomic():
            accounts = self.storage.load_set(ACCOUNTS)
            if any(a.get("customerId") == customer_id for a in accounts):
                raise ConflictError("Cannot delete customer with active accounts")

            customers = self.storage.load_set(CUSTOMERS)
            remaining = [c for c in customers if c.get("id") != customer_id]
            if len(remaining) == len(customers):
                raise NotFoundError("Customer not found")

            self.storage.save_set(CUSTOMERS, remaining)

        log_action(
            self.logger, "info", "Customer deleted",
            action="delete_customer", resource=f"customer:{customer_id}"
        )
