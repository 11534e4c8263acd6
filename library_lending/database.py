import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import settings
from .errors import StorageError

logger = logging.getLogger(__name__)


class Database:
    """Explicit handle on the SQLite store shared by the lending components.

    Every component receives the same ``Database`` at construction. Each call
    opens its own connection, so concurrent requests never share one.
    """

    def __init__(self, path: str, timeout: Optional[float] = None) -> None:
        self.path = path
        self.timeout = settings.database_timeout if timeout is None else timeout

    def connect(self) -> sqlite3.Connection:
        """Open a connection in autocommit mode; transactions are explicit."""
        try:
            conn = sqlite3.connect(
                self.path,
                timeout=self.timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON;")
            conn.execute("PRAGMA synchronous=NORMAL;")
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database {self.path}: {e}") from e
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the block as one write transaction, rolled back on any error.

        ``BEGIN IMMEDIATE`` takes the write lock up front, so two workflows
        touching the same rows are serialized by SQLite itself.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except BaseException as exc:
            if conn.in_transaction:
                conn.rollback()
            if isinstance(exc, sqlite3.Error):
                logger.error("Transaction aborted on %s: %s", self.path, exc)
                raise StorageError(f"Database error: {exc}") from exc
            raise
        finally:
            conn.close()

    @contextmanager
    def reading(self) -> Iterator[sqlite3.Connection]:
        """Connection for reads outside any transaction."""
        conn = self.connect()
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.error("Read failed on %s: %s", self.path, exc)
            raise StorageError(f"Database error: {exc}") from exc
        finally:
            conn.close()

    @contextmanager
    def session(self, conn: Optional[sqlite3.Connection] = None, *, write: bool = True) -> Iterator[sqlite3.Connection]:
        """Join the caller's transaction when ``conn`` is given, else open our own."""
        if conn is not None:
            yield conn
        elif write:
            with self.transaction() as own:
                yield own
        else:
            with self.reading() as own:
                yield own

    def ping(self) -> bool:
        try:
            with self.reading() as conn:
                conn.execute("SELECT 1")
            return True
        except StorageError:
            return False

    def create_tables(self) -> None:
        """Create the schema if it does not exist yet."""
        with self.reading() as conn:
            # WAL lets listings read while a workflow holds the write lock
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS books (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    author TEXT NOT NULL,
                    isbn TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'available'
                        CHECK(status IN ('available', 'loaned'))
                );

                CREATE TABLE IF NOT EXISTS members (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    member_number TEXT NOT NULL,
                    phone TEXT
                );

                CREATE TABLE IF NOT EXISTS loans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    member_id INTEGER NOT NULL,
                    book_id INTEGER NOT NULL,
                    start_date TEXT NOT NULL,
                    return_date TEXT,
                    FOREIGN KEY (member_id) REFERENCES members(id),
                    FOREIGN KEY (book_id) REFERENCES books(id)
                );

                CREATE TABLE IF NOT EXISTS fines (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    loan_id INTEGER NOT NULL,
                    amount REAL NOT NULL CHECK(amount > 0),
                    reason TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (loan_id) REFERENCES loans(id)
                );

                -- at most one open loan per book, enforced by the store as well
                CREATE UNIQUE INDEX IF NOT EXISTS idx_loans_open_book
                    ON loans(book_id) WHERE return_date IS NULL;
                CREATE INDEX IF NOT EXISTS idx_loans_member_id ON loans(member_id);
                CREATE INDEX IF NOT EXISTS idx_fines_loan_id ON fines(loan_id);
            """)


def initialize_database(path: str, timeout: Optional[float] = None) -> Database:
    """Open the store at ``path`` and make sure its tables exist."""
    db = Database(path, timeout=timeout)
    db.create_tables()
    logger.debug("Database ready at %s", path)
    return db
