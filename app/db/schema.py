from __future__ import annotations


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS raffles (
            id uuid PRIMARY KEY,
            slot smallint NOT NULL DEFAULT 1 UNIQUE CHECK (slot = 1),
            name text NOT NULL,
            description text,
            ticket_price numeric(12,2) NOT NULL CHECK (ticket_price > 0),
            images text[] NOT NULL DEFAULT '{}',
            visible boolean NOT NULL DEFAULT true,
            min_value int NOT NULL DEFAULT 1,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tickets (
            id bigserial PRIMARY KEY,
            number_tickets int NOT NULL CHECK (number_tickets > 0),
            full_name text NOT NULL,
            email text NOT NULL,
            phone text,
            reference text,
            payment_method text,
            amount_paid text,
            voucher text,
            created_at timestamptz NOT NULL DEFAULT now(),
            approved boolean NOT NULL DEFAULT false,
            approval_codes text[] NOT NULL DEFAULT '{}'
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS tickets_email_lower_idx ON tickets (lower(email));"
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS tickets_payment_method_idx ON tickets (payment_method);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS issued_codes (
            code char(4) PRIMARY KEY CHECK (code ~ '^[0-9]{4}$'),
            ticket_id bigint NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
            position int NOT NULL,
            issued_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS issued_codes_ticket_id_idx ON issued_codes (ticket_id);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS dollar_prices (
            id uuid PRIMARY KEY,
            slot smallint NOT NULL DEFAULT 1 UNIQUE CHECK (slot = 1),
            price_vez text NOT NULL,
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    conn.commit()
    cur.close()
