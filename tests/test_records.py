import app.cqrs.queries.tickets as tickets_queries
from app.db import records


class RecordingCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = [(name,) for name in conn.columns]
        self.rowcount = len(conn.rows)

    def execute(self, sql, params=()):
        self.conn.statements.append((" ".join(sql.split()), params))

    def fetchall(self):
        return list(self.conn.rows)

    def close(self):
        pass


class RecordingConn:
    def __init__(self, columns=(), rows=()):
        self.columns = columns
        self.rows = rows
        self.statements = []

    def cursor(self):
        return RecordingCursor(self)


def test_get_raffle_reads_singleton_row():
    conn = RecordingConn(columns=("id", "name"), rows=[("r1", "Car Raffle")])

    raffle = records.get_raffle(conn)

    assert raffle == {"id": "r1", "name": "Car Raffle"}
    sql, params = conn.statements[0]
    assert sql.endswith("FROM raffles WHERE slot = 1")
    assert "FOR UPDATE" not in sql


def test_get_ticket_for_update_locks_row():
    conn = RecordingConn(columns=("id", "approval_codes"), rows=[(5, None)])

    ticket = records.get_ticket(conn, 5, for_update=True)

    assert ticket == {"id": 5, "approval_codes": []}
    assert conn.statements[0] == (
        f"SELECT {records.TICKET_COLUMNS} FROM tickets WHERE id = %s FOR UPDATE",
        (5,),
    )


def test_ticket_row_normalizes_codes():
    assert records.ticket_row(None) is None
    assert records.ticket_row({"id": 1, "approval_codes": None})["approval_codes"] == []
    assert records.ticket_row({"id": 1, "approval_codes": ("0042",)})["approval_codes"] == ["0042"]


def test_queries_share_ticket_row_helper():
    assert tickets_queries.ticket_row is records.ticket_row


def test_lock_code_pool_takes_transaction_lock():
    conn = RecordingConn()

    records.lock_code_pool(conn)

    assert conn.statements == [
        (f"SELECT pg_advisory_xact_lock({records.CODE_POOL_LOCK_KEY})", ())
    ]
