from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create the people table and indexes (idempotent)."""
    cur = conn.cursor()
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS people (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  external_id TEXT UNIQUE,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  email TEXT,\n"
            "  phone TEXT,\n"
            "  birth_date TEXT,\n"
            "  mailing_street TEXT,\n"
            "  mailing_city TEXT,\n"
            "  mailing_postal_code TEXT,\n"
            "  mailing_state TEXT,\n"
            "  mailing_country TEXT,\n"
            "  last_synced_at TEXT,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_people_last_first ON people(last_name, first_name);")
    conn.commit()
