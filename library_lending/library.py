from typing import List, Optional, Union

from .catalog import BookCatalog
from .config import database_file_from_env
from .database import Database, initialize_database
from .fines import FineLedger
from .lending import LendingService
from .loans import LoanLedger
from .members import MembershipRegistry
from .models import ActiveLoan, Book, FineView, Loan, Member
from .validators import DateLike


class Library:
    """Wires one database handle into every component and exposes the service surface."""

    def __init__(self, db_file: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.db_file = db_file or database_file_from_env()
        self.db: Database = initialize_database(self.db_file, timeout=timeout)

        self.catalog = BookCatalog(self.db)
        self.members = MembershipRegistry(self.db)
        self.loans = LoanLedger(self.db)
        self.fines = FineLedger(self.db)
        self.lending = LendingService(self.db, self.catalog, self.members, self.loans, self.fines)

    # ------------------------- Catalog ------------------------- #
    def add_book(self, title: str, author: str, isbn: str) -> int:
        return self.catalog.add_book(title, author, isbn)

    def list_books(self) -> List[Book]:
        return self.catalog.list_books()

    def get_book(self, book_id: int) -> Book:
        return self.catalog.get_book(book_id)

    # ------------------------- Members ------------------------- #
    def add_member(self, name: str, member_number: str, phone: Optional[str] = None) -> int:
        return self.members.add_member(name, member_number, phone)

    def list_members(self) -> List[Member]:
        return self.members.list_members()

    def get_member(self, member_id: int) -> Member:
        return self.members.get_member(member_id)

    # ------------------------- Lending ------------------------- #
    def create_loan(self, member_id: int, book_id: int, start_date: DateLike) -> int:
        return self.lending.create_loan(member_id, book_id, start_date)

    def complete_loan(self, loan_id: int, return_date: DateLike, damaged: bool = False,
                      fine_amount: Union[int, float, str, None] = 0, reason: Optional[str] = None) -> Optional[int]:
        return self.lending.complete_loan(loan_id, return_date, damaged, fine_amount, reason)

    def get_loan(self, loan_id: int) -> Loan:
        return self.loans.get_loan(loan_id)

    def list_loans(self) -> List[Loan]:
        return self.loans.list_loans()

    def list_active_loans(self) -> List[ActiveLoan]:
        return self.loans.list_active_loans()

    def list_fines(self) -> List[FineView]:
        return self.fines.list_fines()

    # ------------------------- Utilities ------------------------- #
    def is_healthy(self) -> bool:
        return self.db.ping()

    def close(self) -> None:
        """Connections are opened per operation, so there is nothing to release."""
        return None
