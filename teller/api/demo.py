"""
Demo data and dashboard endpoints
"""

from fastapi import APIRouter, Depends, Query

from .dependencies import get_banking_system
from .schemas import envelope
from ..system import BankingSystem


router = APIRouter()


@router.post("/demo/load")
def load_demo_data(system: BankingSystem = Depends(get_banking_system)):
    """Replace all data with the demo fixture"""
    stats = system.load_demo_data()
    return envelope({
        "message": "Demo data loaded successfully",
        "stats": {
            "customers": stats.customers,
            "accounts": stats.accounts,
            "transactions": stats.transactions
        }
    })


@router.get("/dashboard/overview")
def get_dashboard_overview(
    recent: int = Query(5, ge=0, le=100),
    system: BankingSystem = Depends(get_banking_system)
):
    """Get dashboard totals and recent activity"""
    overview = system.overview(recent=recent)
    return envelope({
        "totalCustomers": overview.total_customers,
        "totalAccounts": overview.total_accounts,
        "totalBalance": str(overview.total_balance),
        "recentTransactions": [t.to_dict() for t in overview.recent_transactions]
    })
