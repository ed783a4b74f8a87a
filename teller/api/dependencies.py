"""
Request dependencies
"""

from fastapi import Request

from ..system import BankingSystem


def get_banking_system(request: Request) -> BankingSystem:
    """Banking system attached to the running application"""
    return request.app.state.banking_system
