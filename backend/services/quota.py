# services/quota.py
import logging
import sqlite3
from enum import Enum
from typing import Optional

from fastapi import Response

from db import get_summary_count, increment_summary_count, init_db

LOGGER = logging.getLogger(__name__)

GUEST_COOKIE = "guest_summary_used"
GUEST_COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # 1 year

LIMIT_REACHED_MESSAGE = "Free limit reached ({limit} summaries max for logged-in users)."
GUEST_USED_MESSAGE = "Guest users can only summarize once. Please log in for more free summaries."
LEDGER_UNAVAILABLE_MESSAGE = "Usage tracking is unavailable. Please try again later."


class QuotaDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"


class QuotaLedger:
    """Per-account lifetime counter of free summaries, stored in sqlite."""

    def __init__(self, db_path: str, limit: int = 5, strict: bool = False):
        self.db_path = db_path
        self.limit = limit
        self.strict = strict
        init_db(db_path)

    @property
    def denied_message(self) -> str:
        return LIMIT_REACHED_MESSAGE.format(limit=self.limit)

    def _on_error(self, action: str, account_id: str, exc: Exception) -> QuotaDecision:
        LOGGER.error("Ledger %s failed for %s: %s", action, account_id, exc)
        if self.strict:
            return QuotaDecision.UNAVAILABLE
        return QuotaDecision.ALLOWED

    def usage(self, account_id: str) -> int:
        return get_summary_count(self.db_path, account_id) or 0

    def check(self, account_id: str) -> QuotaDecision:
        """Read-only admission check; nothing is written."""
        try:
            count = get_summary_count(self.db_path, account_id)
        except sqlite3.Error as exc:
            return self._on_error("lookup", account_id, exc)

        if (count or 0) >= self.limit:
            return QuotaDecision.DENIED
        return QuotaDecision.ALLOWED

    def consume(self, account_id: str) -> QuotaDecision:
        if self.limit <= 0:
            return QuotaDecision.DENIED
        try:
            consumed = increment_summary_count(self.db_path, account_id, self.limit)
        except sqlite3.Error as exc:
            return self._on_error("update", account_id, exc)

        if not consumed:
            return QuotaDecision.DENIED
        return QuotaDecision.ALLOWED

    def check_and_consume(self, account_id: str) -> QuotaDecision:
        decision = self.check(account_id)
        if decision != QuotaDecision.ALLOWED:
            return decision
        return self.consume(account_id)


class GuestGate:
    """One free summary per browser, remembered only by a cookie."""

    cookie_name = GUEST_COOKIE
    denied_message = GUEST_USED_MESSAGE

    def check(self, cookie_value: Optional[str]) -> QuotaDecision:
        if cookie_value == "true":
            return QuotaDecision.DENIED
        return QuotaDecision.ALLOWED

    def mark_used(self, response: Response) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value="true",
            max_age=GUEST_COOKIE_MAX_AGE,
            path="/",
        )
