"""
Tests for the JSON API (transactions, subscriptions, budgets, reports)
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finwallet.api.deps import get_db, get_current_user_id
from finwallet.application.users import RegisterUserUseCase
from finwallet.infrastructure.db.session import Base
from finwallet.main import app


@pytest.fixture
def session_factory():
    """Одна in-memory БД на тест, общая для всех потоков TestClient"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def users(session_factory):
    db = session_factory()
    try:
        alice = RegisterUserUseCase(db).execute("alice").id
        bob = RegisterUserUseCase(db).execute("bob").id
    finally:
        db.close()
    return {"alice": alice, "bob": bob}


@pytest.fixture
def current_user(users):
    return {"id": users["alice"]}


@pytest.fixture
def client(session_factory, current_user):
    """Test client для FastAPI с подменой БД и текущего пользователя"""
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user_id] = lambda: current_user["id"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def _expense(client, amount, category="FOOD", date="2026-03-05T12:00:00"):
    return client.post("/api/v1/transactions/", json={
        "amount": amount, "type": "EXPENSE", "category": category, "date": date,
    })


def test_health(client):
    assert client.get("/health").text == "ok"


def test_unauthenticated_request_rejected(client):
    """Без user_id в session - 401"""
    del app.dependency_overrides[get_current_user_id]
    response = client.get("/api/v1/transactions/wallet")
    assert response.status_code == 401


def test_create_transaction_and_wallet(client):
    response = _expense(client, "25,50")
    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == "25.50"
    assert body["category"] == "FOOD"
    assert body["type"] == "EXPENSE"

    wallet = client.get("/api/v1/transactions/wallet").json()
    assert wallet["balance"] == "74.50"
    assert wallet["expense"] == "25.50"


def test_insufficient_funds_maps_to_409(client):
    response = _expense(client, "100.01")
    assert response.status_code == 409
    assert response.json()["error"] == "INSUFFICIENT_FUNDS"


def test_invalid_amount_maps_to_422(client):
    assert _expense(client, "12.345").status_code == 422
    assert _expense(client, "0").status_code == 422


def test_list_month_transactions(client):
    _expense(client, "10", date="2026-03-05T12:00:00")
    _expense(client, "20", date="2026-04-01T00:00:00")

    march = client.get("/api/v1/transactions/", params={"month": 3, "year": 2026}).json()
    assert [t["amount"] for t in march] == ["10.00"]


def test_delete_foreign_transaction_maps_to_403(client, users, current_user):
    tx_id = _expense(client, "10").json()["transaction_id"]

    current_user["id"] = users["bob"]
    response = client.delete(f"/api/v1/transactions/{tx_id}")
    assert response.status_code == 403
    assert response.json()["error"] == "UNAUTHORIZED"

    current_user["id"] = users["alice"]
    assert client.delete(f"/api/v1/transactions/{tx_id}").status_code == 204
    assert client.delete(f"/api/v1/transactions/{tx_id}").status_code == 404


def test_subscription_pay_flow(client):
    created = client.post("/api/v1/subscriptions/", json={
        "name": "Netflix", "price": "15.99", "period": "MONTHLY", "type": "PREMIUM",
        "expiry_on": "2026-03-20",
    })
    assert created.status_code == 200
    sub_id = created.json()["id"]
    assert [s["name"] for s in client.get("/api/v1/subscriptions/").json()] == ["Netflix"]

    paid = client.post(f"/api/v1/subscriptions/{sub_id}/pay")
    assert paid.status_code == 200
    assert paid.json()["paid_date"] is not None
    assert client.get("/api/v1/transactions/wallet").json()["balance"] == "84.01"

    again = client.post(f"/api/v1/subscriptions/{sub_id}/pay")
    assert again.status_code == 409
    assert again.json()["error"] == "ALREADY_PAID"
    assert client.get("/api/v1/subscriptions/").json() == []
    everything = client.get("/api/v1/subscriptions/", params={"include_paid": "true"}).json()
    assert [s["name"] for s in everything] == ["Netflix"]


def test_budget_page(client):
    saved = client.post("/api/v1/budgets/", json={
        "category": "FOOD", "amount": "50", "month": 3, "year": 2026,
    })
    assert saved.status_code == 200
    _expense(client, "60")

    page = client.get("/api/v1/budgets/", params={"month": 3, "year": 2026}).json()
    assert page["month"] == "2026-03"
    assert page["previous_month"] == "2026-02"
    assert page["total_spent"] == "60.00"
    food = page["budgets"][0]
    assert food["remaining"] == "-10.00"
    assert food["percentage"] == "120.00"
    assert food["is_over_budget"] is True


def test_budget_amount_must_be_positive(client):
    response = client.post("/api/v1/budgets/", json={
        "category": "FOOD", "amount": "0", "month": 3, "year": 2026,
    })
    assert response.status_code == 422


def test_monthly_report(client):
    _expense(client, "30", "FOOD")
    _expense(client, "10", "TRANSPORT")

    report = client.get("/api/v1/reports/monthly", params={"month": 3, "year": 2026}).json()
    assert report["category_names"] == ["FOOD", "TRANSPORT"]
    assert report["category_percents"] == [75, 25]
    assert report["biggest_expense_name"] == "Food"
    assert report["current_month_expenses"] == "40.00"
    assert report["expense_history"]["05 Mar"] == "40.00"
