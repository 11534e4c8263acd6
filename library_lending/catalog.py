import logging
import sqlite3
from typing import List, Optional

from .database import Database
from .errors import BookNotFound
from .models import Book, BookStatus
from .validators import TextValidator

logger = logging.getLogger(__name__)


class BookCatalog:
    """Owns book records and their availability status."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def add_book(self, title: str, author: str, isbn: str) -> int:
        """Catalogue a new book as available. ISBNs are not checked for duplicates."""
        title = TextValidator.require(title, "Title")
        author = TextValidator.require(author, "Author")
        isbn = TextValidator.require(isbn, "ISBN")

        with self.db.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO books (title, author, isbn, status) VALUES (?, ?, ?, ?)",
                (title, author, isbn, BookStatus.AVAILABLE.value),
            )
            book_id = cursor.lastrowid
        logger.info("Catalogued book %s: %r by %r", book_id, title, author)
        return book_id

    def list_books(self) -> List[Book]:
        with self.db.reading() as conn:
            rows = conn.execute(
                "SELECT id, title, author, isbn, status FROM books ORDER BY id"
            ).fetchall()
        return [Book.from_dict(row) for row in rows]

    def get_book(self, book_id: int, conn: Optional[sqlite3.Connection] = None) -> Book:
        with self.db.session(conn, write=False) as c:
            row = c.execute(
                "SELECT id, title, author, isbn, status FROM books WHERE id = ?",
                (book_id,),
            ).fetchone()
        if row is None:
            raise BookNotFound(book_id)
        return Book.from_dict(row)

    # Status changes belong to LendingService only.
    def set_status(self, book_id: int, status: BookStatus, conn: Optional[sqlite3.Connection] = None) -> None:
        with self.db.session(conn) as c:
            cursor = c.execute(
                "UPDATE books SET status = ? WHERE id = ?",
                (BookStatus(status).value, book_id),
            )
            if cursor.rowcount == 0:
                raise BookNotFound(book_id)

    def mark_loaned(self, book_id: int, conn: sqlite3.Connection) -> bool:
        """Flip the book to loaned only if it is currently available.

        Returns False when nothing changed: the id is unknown or the book is
        already out. The check and the write are one statement.
        """
        cursor = conn.execute(
            "UPDATE books SET status = ? WHERE id = ? AND status = ?",
            (BookStatus.LOANED.value, book_id, BookStatus.AVAILABLE.value),
        )
        return cursor.rowcount == 1

    def exists(self, book_id: int, conn: Optional[sqlite3.Connection] = None) -> bool:
        with self.db.session(conn, write=False) as c:
            row = c.execute("SELECT 1 FROM books WHERE id = ?", (book_id,)).fetchone()
        return row is not None
