import sqlite3
from typing import List, Optional

from .database import Database
from .errors import LoanNotFound
from .models import ActiveLoan, Loan


class LoanLedger:
    """Owns loan records and their open/closed state.

    The ledger records what it is told. Availability and double-return checks
    live in ``LendingService`` so the workflow rules stay in one place.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def create_loan(self, member_id: int, book_id: int, start_date: str,
                    conn: Optional[sqlite3.Connection] = None) -> int:
        with self.db.session(conn) as c:
            cursor = c.execute(
                "INSERT INTO loans (member_id, book_id, start_date, return_date) VALUES (?, ?, ?, NULL)",
                (member_id, book_id, start_date),
            )
            return cursor.lastrowid

    def complete_loan(self, loan_id: int, return_date: str,
                      conn: Optional[sqlite3.Connection] = None) -> None:
        with self.db.session(conn) as c:
            cursor = c.execute(
                "UPDATE loans SET return_date = ? WHERE id = ?",
                (return_date, loan_id),
            )
            if cursor.rowcount == 0:
                raise LoanNotFound(loan_id)

    def get_loan(self, loan_id: int, conn: Optional[sqlite3.Connection] = None) -> Loan:
        with self.db.session(conn, write=False) as c:
            row = c.execute(
                "SELECT id, member_id, book_id, start_date, return_date FROM loans WHERE id = ?",
                (loan_id,),
            ).fetchone()
        if row is None:
            raise LoanNotFound(loan_id)
        return Loan.from_dict(row)

    def list_loans(self) -> List[Loan]:
        """Every loan, open and closed, oldest first."""
        with self.db.reading() as conn:
            rows = conn.execute(
                "SELECT id, member_id, book_id, start_date, return_date FROM loans ORDER BY id"
            ).fetchall()
        return [Loan.from_dict(row) for row in rows]

    def list_active_loans(self) -> List[ActiveLoan]:
        with self.db.reading() as conn:
            rows = conn.execute("""
                SELECT l.id AS loan_id,
                       m.name AS member_name,
                       m.member_number AS member_number,
                       b.title AS book_title,
                       b.author AS author,
                       l.start_date AS start_date
                FROM loans l
                JOIN members m ON l.member_id = m.id
                JOIN books b ON l.book_id = b.id
                WHERE l.return_date IS NULL
                ORDER BY l.id
            """).fetchall()
        return [ActiveLoan.from_dict(row) for row in rows]
