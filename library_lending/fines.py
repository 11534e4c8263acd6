import logging
import sqlite3
from typing import List, Optional, Union

from .database import Database
from .models import Fine, FineView
from .validators import AmountValidator

logger = logging.getLogger(__name__)

DEFAULT_FINE_REASON = "Damaged book"


class FineLedger:
    """Fines issued on damaged returns. Immutable once written."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def record_fine(self, loan_id: int, amount: Union[int, float], reason: Optional[str] = None,
                    conn: Optional[sqlite3.Connection] = None) -> int:
        amount = AmountValidator.positive(amount)
        reason = (reason or "").strip() or DEFAULT_FINE_REASON
        with self.db.session(conn) as c:
            cursor = c.execute(
                "INSERT INTO fines (loan_id, amount, reason) VALUES (?, ?, ?)",
                (loan_id, amount, reason),
            )
            fine_id = cursor.lastrowid
        logger.info("Fine %s of %.2f recorded on loan %s: %s", fine_id, amount, loan_id, reason)
        return fine_id

    def list_fines(self) -> List[FineView]:
        with self.db.reading() as conn:
            rows = conn.execute("""
                SELECT f.id AS fine_id,
                       f.loan_id AS loan_id,
                       m.name AS member_name,
                       b.title AS book_title,
                       f.amount AS amount,
                       f.reason AS reason,
                       f.created_at AS created_at
                FROM fines f
                JOIN loans l ON f.loan_id = l.id
                JOIN members m ON l.member_id = m.id
                JOIN books b ON l.book_id = b.id
                ORDER BY f.id
            """).fetchall()
        return [FineView.from_dict(row) for row in rows]

    def list_fines_for_loan(self, loan_id: int) -> List[Fine]:
        with self.db.reading() as conn:
            rows = conn.execute(
                "SELECT id, loan_id, amount, reason, created_at FROM fines WHERE loan_id = ? ORDER BY id",
                (loan_id,),
            ).fetchall()
        return [Fine.from_dict(row) for row in rows]
