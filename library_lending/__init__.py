"""Library Lending - core package

Modules:
- Lending workflow (lending.py)
- Stores: books (catalog.py), members (members.py), loans (loans.py), fines (fines.py)
- Facade wiring the stores together (library.py)
- Database layer (database.py) and settings (config.py)
- HTTP API (api.py) and CLI (cli.py)
"""

from .errors import (
    BookNotFound,
    BookUnavailable,
    Conflict,
    LendingError,
    LoanAlreadyClosed,
    LoanNotFound,
    MemberNotFound,
    NotFound,
    StorageError,
    ValidationError,
)
from .library import Library
from .models import ActiveLoan, Book, BookStatus, Fine, FineView, Loan, Member

__all__ = [
    "Library",
    # models
    "Book",
    "BookStatus",
    "Member",
    "Loan",
    "ActiveLoan",
    "Fine",
    "FineView",
    # errors
    "LendingError",
    "ValidationError",
    "NotFound",
    "BookNotFound",
    "MemberNotFound",
    "LoanNotFound",
    "Conflict",
    "BookUnavailable",
    "LoanAlreadyClosed",
    "StorageError",
]
