from dataclasses import replace
from datetime import datetime, timezone
import itertools
import threading
import time
import uuid

import pytest
from fastapi.testclient import TestClient

import app.api.dependencies as dependencies
import app.api.routes.auth as auth_routes
import app.core.security as security
import app.cqrs.commands.dollar as dollar_commands
import app.cqrs.commands.raffles as raffles_commands
import app.cqrs.commands.tickets as tickets_commands
from app.core.config import settings
from app.services import notifications

ADMIN_SECRET = "test-admin-secret"


class FakeConn:
    def __init__(self):
        self.held_locks = []


class FakeRecords:
    """In-memory stand-in for app.db.records.

    lock_code_pool takes a real lock that is only released when the fake
    transaction ends, like pg_advisory_xact_lock.
    """

    def __init__(self):
        self.raffle = None
        self.tickets = {}
        self.issued = {}
        self.dollar = None
        self.pool_lock = threading.Lock()
        self.issued_read_delay = 0.0
        self._ids = itertools.count(1)

    def run_transaction(self, handler):
        conn = FakeConn()
        try:
            return handler(conn)
        finally:
            for lock in conn.held_locks:
                lock.release()

    def lock_code_pool(self, conn):
        self.pool_lock.acquire()
        conn.held_locks.append(self.pool_lock)

    def get_raffle(self, conn):
        return None if self.raffle is None else dict(self.raffle)

    def insert_raffle(self, conn, data):
        if self.raffle is not None:
            return None
        self.raffle = {
            "id": uuid.uuid4(),
            "name": data["name"],
            "description": data.get("description"),
            "ticket_price": data["ticket_price"],
            "images": list(data.get("images") or []),
            "visible": True,
            "min_value": data.get("min_value", 1),
            "created_at": datetime.now(timezone.utc),
        }
        return dict(self.raffle)

    def delete_raffle(self, conn):
        if self.raffle is None:
            return False
        self.tickets.clear()
        self.issued.clear()
        self.raffle = None
        return True

    def toggle_raffle_visibility(self, conn):
        if self.raffle is None:
            return None
        self.raffle["visible"] = not self.raffle["visible"]
        return self.raffle["visible"]

    def get_ticket(self, conn, ticket_id, for_update=False):
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return None
        return {**ticket, "approval_codes": list(ticket["approval_codes"])}

    def insert_ticket(self, conn, data):
        ticket_id = next(self._ids)
        self.tickets[ticket_id] = {
            "id": ticket_id,
            "number_tickets": data["number_tickets"],
            "full_name": data["full_name"],
            "email": data["email"],
            "phone": data.get("phone"),
            "reference": data.get("reference"),
            "payment_method": data.get("payment_method"),
            "amount_paid": data.get("amount_paid"),
            "voucher": data.get("voucher"),
            "created_at": datetime.now(timezone.utc),
            "approved": False,
            "approval_codes": [],
        }
        return self.get_ticket(conn, ticket_id)

    def delete_ticket(self, conn, ticket_id):
        if self.tickets.pop(ticket_id, None) is None:
            return False
        for code in [code for code, owner in self.issued.items() if owner == ticket_id]:
            del self.issued[code]
        return True

    def update_ticket_contact(self, conn, ticket_id, email, phone):
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return None
        if email:
            ticket["email"] = email
        if phone:
            ticket["phone"] = phone
        return self.get_ticket(conn, ticket_id)

    def issued_codes(self, conn):
        snapshot = set(self.issued)
        if self.issued_read_delay:
            time.sleep(self.issued_read_delay)
        return snapshot

    def save_approval(self, conn, ticket_id, codes):
        for code in codes:
            if code in self.issued:
                raise RuntimeError(f"duplicate key value violates unique constraint: {code}")
            self.issued[code] = ticket_id
        ticket = self.tickets[ticket_id]
        ticket["approved"] = True
        ticket["approval_codes"] = list(codes)
        return self.get_ticket(conn, ticket_id)

    def upsert_dollar_price(self, conn, price):
        if self.dollar is None:
            self.dollar = {"id": uuid.uuid4()}
        self.dollar.update({"price_vez": price, "updated_at": datetime.now(timezone.utc)})
        return dict(self.dollar)

    def sold_code_rows(self, sql, params=()):
        """issued_codes joined to approved tickets, ordered by ticket id then position."""
        rows = []
        for ticket_id in sorted(self.tickets):
            ticket = self.tickets[ticket_id]
            if not ticket["approved"]:
                continue
            rows.extend(
                {"code": code}
                for code in ticket["approval_codes"]
                if self.issued.get(code) == ticket_id
            )
        return rows

    def seed_issued(self, count, owner=0):
        for number in range(count):
            self.issued[f"{number:04d}"] = owner


@pytest.fixture
def store(monkeypatch):
    fake = FakeRecords()
    for module in (tickets_commands, raffles_commands, dollar_commands):
        monkeypatch.setattr(module, "records", fake)
        monkeypatch.setattr(module, "run_transaction", fake.run_transaction)
    monkeypatch.setattr(dependencies, "db_configured", lambda: True)
    return fake


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_dispatch(ticket, raffle, codes):
        sent.append({"ticket": ticket, "raffle": raffle, "codes": list(codes)})

    monkeypatch.setattr(notifications, "dispatch_approval_email", fake_dispatch)
    return sent


@pytest.fixture
def max_codes(monkeypatch):
    def _set(value):
        monkeypatch.setattr(tickets_commands, "settings", replace(settings, max_codes=value))

    return _set


@pytest.fixture
def admin_settings(monkeypatch):
    configured = replace(settings, admin_secret=ADMIN_SECRET)
    for module in (dependencies, auth_routes, security):
        monkeypatch.setattr(module, "settings", configured)
    return configured


@pytest.fixture
def admin_headers(admin_settings):
    token, _ = security.issue_admin_token(secret=ADMIN_SECRET)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def raffle(store):
    store.insert_raffle(
        None, {"name": "Car Raffle", "ticket_price": 10, "min_value": 1, "images": ["a.png"]}
    )
    return store.raffle


@pytest.fixture
def make_ticket(store):
    def _make(number_tickets=1, email="ana@x.com", **extra):
        data = {"number_tickets": number_tickets, "full_name": "Ana", "email": email, **extra}
        return store.insert_ticket(None, data)

    return _make
