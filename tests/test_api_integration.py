"""
Integration tests for the Teller Banking API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from teller.api import create_app
from teller.config import TellerConfig
from teller.errors import StorageError
from teller.storage import InMemoryDocumentStore
from teller.system import BankingSystem


@pytest.fixture
def client():
    """Create a test client backed by an in-memory banking system"""
    config = TellerConfig(storage_backend="memory")
    system = BankingSystem(storage=InMemoryDocumentStore(), config=config)
    with TestClient(create_app(system=system)) as test_client:
        yield test_client


def create_customer(client, **overrides):
    body = {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john.doe@example.com",
        "phone": "412-555-1234",
        "address": "123 Main St"
    }
    body.update(overrides)
    r = client.post("/api/customers", json=body)
    assert r.status_code == 201
    return r.json()["data"]


def open_account(client, customer_id, account_type="checking", initial_balance=0):
    r = client.post("/api/accounts", json={
        "customerId": customer_id,
        "type": account_type,
        "initialBalance": initial_balance
    })
    assert r.status_code == 201
    return r.json()["data"]


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["endpoints"]["customers"] == "/api/customers"

    def test_unknown_route_uses_error_envelope(self, client):
        r = client.get("/api/nothing-here")
        assert r.status_code == 404
        assert r.json()["success"] is False
        assert "error" in r.json()


class TestCustomerFlow:
    """End-to-end customer management tests"""

    def test_create_and_get_customer(self, client):
        customer = create_customer(client)

        assert customer["firstName"] == "John"
        assert "id" in customer
        assert "createdAt" in customer

        r = client.get(f"/api/customers/{customer['id']}")
        assert r.status_code == 200
        assert r.json() == {"success": True, "data": customer}

    def test_list_customers(self, client):
        create_customer(client)
        create_customer(client, firstName="Jane", email="jane@example.com")

        r = client.get("/api/customers")
        assert r.status_code == 200
        assert [c["firstName"] for c in r.json()["data"]] == ["John", "Jane"]

    def test_create_customer_missing_field(self, client):
        r = client.post("/api/customers", json={"firstName": "John"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Last name is required"}

    def test_create_customer_invalid_email(self, client):
        r = client.post("/api/customers", json={
            "firstName": "John", "lastName": "Doe", "email": "nope",
            "phone": "1", "address": "1 St"
        })
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid email format"

    def test_update_customer_ignores_identity_fields(self, client):
        customer = create_customer(client)

        r = client.put(f"/api/customers/{customer['id']}", json={
            "id": "hijacked",
            "createdAt": "1999-01-01T00:00:00Z",
            "phone": "412-555-0000"
        })

        assert r.status_code == 200
        updated = r.json()["data"]
        assert updated["id"] == customer["id"]
        assert updated["createdAt"] == customer["createdAt"]
        assert updated["phone"] == "412-555-0000"
        assert updated["email"] == customer["email"]

    def test_get_unknown_customer(self, client):
        r = client.get("/api/customers/missing")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Customer not found"}

    def test_delete_customer_with_accounts(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"])

        r = client.delete(f"/api/customers/{customer['id']}")
        assert r.status_code == 400
        assert r.json()["error"] == "Cannot delete customer with active accounts"

        assert client.delete(f"/api/accounts/{account['id']}").status_code == 200
        r = client.delete(f"/api/customers/{customer['id']}")
        assert r.status_code == 200
        assert r.json()["data"]["message"] == "Customer deleted successfully"

    def test_customer_accounts(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"], "savings")

        r = client.get(f"/api/customers/{customer['id']}/accounts")
        assert r.status_code == 200
        assert [a["id"] for a in r.json()["data"]] == [account["id"]]


class TestAccountFlow:
    """End-to-end account and money movement tests"""

    def test_open_account_with_initial_balance(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"], "checking", 100)

        assert account["balance"] == "100.00"
        assert account["type"] == "checking"
        assert len(account["accountNumber"]) == 8

        r = client.get(f"/api/accounts/{account['id']}/transactions")
        history = r.json()["data"]
        assert len(history) == 1
        assert history[0]["description"] == "Initial deposit"
        assert history[0]["amount"] == "100.00"

    def test_open_account_for_unknown_customer(self, client):
        r = client.post("/api/accounts", json={"customerId": "ghost", "type": "savings"})
        assert r.status_code == 404

    def test_open_account_with_unknown_type(self, client):
        customer = create_customer(client)
        r = client.post("/api/accounts", json={"customerId": customer["id"], "type": "brokerage"})
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_deposit_and_withdraw(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"], "checking", 100)

        r = client.post(f"/api/accounts/{account['id']}/deposit", json={"amount": 50})
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["newBalance"] == "150.00"
        assert data["transaction"]["type"] == "deposit"
        assert data["transaction"]["description"] == "Deposit"

        r = client.post(f"/api/accounts/{account['id']}/withdraw", json={
            "amount": "30.5", "description": "ATM"
        })
        assert r.status_code == 201
        assert r.json()["data"]["newBalance"] == "119.50"
        assert r.json()["data"]["transaction"]["description"] == "ATM"

    def test_withdraw_insufficient_funds(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"], "checking", 10)

        r = client.post(f"/api/accounts/{account['id']}/withdraw", json={"amount": 11})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Insufficient funds"}

        r = client.get(f"/api/accounts/{account['id']}")
        assert r.json()["data"]["balance"] == "10.00"

    @pytest.mark.parametrize("amount", [0, -1, "abc", True, None])
    def test_deposit_rejects_invalid_amounts(self, client, amount):
        customer = create_customer(client)
        account = open_account(client, customer["id"])

        r = client.post(f"/api/accounts/{account['id']}/deposit", json={"amount": amount})
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_deposit_to_unknown_account(self, client):
        r = client.post("/api/accounts/missing/deposit", json={"amount": 5})
        assert r.status_code == 404
        assert r.json()["error"] == "Account not found"

    def test_delete_account_with_balance(self, client):
        customer = create_customer(client)
        account = open_account(client, customer["id"], "checking", 1)

        r = client.delete(f"/api/accounts/{account['id']}")
        assert r.status_code == 400
        assert r.json()["error"] == "Cannot delete account with non-zero balance"


class TestTransferFlow:
    """End-to-end transfer tests"""

    def test_transfer(self, client):
        customer = create_customer(client)
        source = open_account(client, customer["id"], "checking", 100)
        target = open_account(client, customer["id"], "savings")

        r = client.post("/api/transfer", json={
            "fromAccountId": source["id"],
            "toAccountId": target["id"],
            "amount": 40
        })

        assert r.status_code == 201
        data = r.json()["data"]
        assert data["fromAccount"] == {"id": source["id"], "newBalance": "60.00"}
        assert data["toAccount"] == {"id": target["id"], "newBalance": "40.00"}
        assert data["transaction"]["toAccountId"] == target["id"]
        assert data["transaction"]["description"] == "Transfer"

        r = client.get(f"/api/accounts/{target['id']}/transactions")
        assert [t["type"] for t in r.json()["data"]] == ["transfer"]

        r = client.get("/api/transactions")
        assert len(r.json()["data"]) == 2

    def test_transfer_to_same_account(self, client):
        customer = create_customer(client)
        source = open_account(client, customer["id"], "checking", 100)

        r = client.post("/api/transfer", json={
            "fromAccountId": source["id"], "toAccountId": source["id"], "amount": 1
        })
        assert r.status_code == 400
        assert r.json()["error"] == "Cannot transfer to the same account"

    def test_transfer_with_unknown_account(self, client):
        customer = create_customer(client)
        source = open_account(client, customer["id"], "checking", 100)

        r = client.post("/api/transfer", json={
            "fromAccountId": source["id"], "toAccountId": "missing", "amount": 1
        })
        assert r.status_code == 404
        assert r.json()["error"] == "One or both accounts not found"

    def test_failed_transfer_changes_nothing(self, client):
        customer = create_customer(client)
        source = open_account(client, customer["id"], "checking", 100)
        target = open_account(client, customer["id"], "savings")

        r = client.post("/api/transfer", json={
            "fromAccountId": source["id"], "toAccountId": target["id"], "amount": 200
        })
        assert r.status_code == 400

        balances = [a["balance"] for a in client.get("/api/accounts").json()["data"]]
        assert balances == ["100.00", "0.00"]
        assert len(client.get("/api/transactions").json()["data"]) == 1


class TestDemoAndDashboard:
    """Demo fixture and dashboard overview"""

    def test_load_demo_data(self, client):
        create_customer(client, firstName="Temporary")

        for _ in range(2):
            r = client.post("/api/demo/load")
            assert r.status_code == 200
            assert r.json()["data"] == {
                "message": "Demo data loaded successfully",
                "stats": {"customers": 3, "accounts": 5, "transactions": 7}
            }

        names = [c["firstName"] for c in client.get("/api/customers").json()["data"]]
        assert names == ["John", "Jane", "Robert"]

    def test_dashboard_overview(self, client):
        client.post("/api/demo/load")

        r = client.get("/api/dashboard/overview", params={"recent": 3})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["totalCustomers"] == 3
        assert data["totalAccounts"] == 5
        assert data["totalBalance"] == "31000.00"
        assert [t["description"] for t in data["recentTransactions"]] == [
            "Credit card purchase", "Transfer to savings", "Initial deposit"
        ]

    def test_dashboard_overview_rejects_bad_limit(self, client):
        r = client.get("/api/dashboard/overview", params={"recent": -1})
        assert r.status_code == 400


class UnreadableStore(InMemoryDocumentStore):
    """Store whose documents cannot be read"""

    def __init__(self, error):
        super().__init__()
        self.error = error

    def _read(self, name):
        raise self.error


class TestServerErrors:
    """Infrastructure failures map to 500 with the error envelope"""

    def _client(self, store):
        system = BankingSystem(storage=store, config=TellerConfig(storage_backend="memory"))
        return TestClient(create_app(system=system), raise_server_exceptions=False)

    def test_storage_error_is_500(self):
        store = UnreadableStore(StorageError("Cannot read customers: disk gone"))
        with self._client(store) as client:
            r = client.get("/api/customers")

        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Cannot read customers: disk gone"}

    def test_unhandled_error_is_500(self):
        with self._client(UnreadableStore(RuntimeError("boom"))) as client:
            r = client.get("/api/accounts")

        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Internal server error"}
