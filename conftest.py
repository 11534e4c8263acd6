import pytest

from library_lending.library import Library
from library_lending.models import BookStatus


@pytest.fixture
def db_file(tmp_path, monkeypatch):
    # A fresh database per test; the CLI and API resolve it from the environment.
    path = str(tmp_path / "library_test.db")
    monkeypatch.setenv("LIBRARY_DB_FILE", path)
    return path


@pytest.fixture
def lib(db_file):
    lib = Library(db_file=db_file)
    yield lib
    lib.close()


@pytest.fixture
def stocked(lib):
    """One book and two members, the starting point of most lending tests."""
    book_id = lib.add_book("Dune", "Herbert", "123")
    alice = lib.add_member("Alice", "M-001", "555-0100")
    bob = lib.add_member("Bob", "M-002")
    return {"book": book_id, "alice": alice, "bob": bob}


@pytest.fixture
def check_invariant(lib):
    """A book is loaned iff exactly one open loan references it."""
    def check():
        open_by_book = {}
        for loan in lib.list_loans():
            if loan.is_open:
                open_by_book[loan.book_id] = open_by_book.get(loan.book_id, 0) + 1
        for book in lib.list_books():
            count = open_by_book.get(book.id, 0)
            assert count <= 1
            assert (book.status == BookStatus.LOANED) == (count == 1)
    return check
