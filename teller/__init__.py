"""
Teller Banking Demo

A small banking backend: customers, accounts and an append-only transaction
list persisted as JSON documents, with serialized money movement and
Decimal arithmetic for every balance.
"""

__version__ = "1.0.0"
