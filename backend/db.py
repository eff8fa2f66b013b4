import sqlite3
from datetime import datetime, timezone
from typing import Optional


def get_db(path: str):
    return sqlite3.connect(path)


def init_db(path: str):
    """Initialize the database with required tables"""
    conn = get_db(path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS summary_counts (
            account_id TEXT PRIMARY KEY,
            count INTEGER NOT NULL DEFAULT 0 CHECK (count >= 0),
            last_reset TIMESTAMP
        )
    """)

    conn.commit()
    conn.close()


def get_summary_count(path: str, account_id: str) -> Optional[int]:
    """Return the stored count for an account, or None when it has no record"""
    conn = get_db(path)
    try:
        cur = conn.execute(
            "SELECT count FROM summary_counts WHERE account_id = ?",
            (account_id,)
        )
        row = cur.fetchone()
    finally:
        conn.close()
    return row[0] if row else None


def increment_summary_count(path: str, account_id: str, limit: int) -> bool:
    """
    Create the record with count 1, or add one to it while it is below limit.

    Returns False when the account is already at the limit. The check and the
    write happen in one statement, so concurrent callers cannot push the
    stored count past the limit.
    """
    now = datetime.now(timezone.utc).isoformat()
    conn = get_db(path)
    try:
        cur = conn.execute("""
            INSERT INTO summary_counts (account_id, count, last_reset)
            VALUES (?, 1, ?)
            ON CONFLICT (account_id) DO UPDATE
            SET count = summary_counts.count + 1
            WHERE summary_counts.count < ?
        """, (account_id, now, limit))
        conn.commit()
        changed = cur.rowcount
    finally:
        conn.close()
    return changed > 0
