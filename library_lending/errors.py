"""Errors raised by the lending core.

Everything derives from ``LendingError`` so the API and CLI can map the whole
family in one place. ``ValidationError``, ``NotFound`` and ``Conflict`` are
declined operations; ``StorageError`` means the store itself failed.
"""


class LendingError(Exception):
    """Base exception for the lending system."""


class ValidationError(LendingError):
    """A required field is missing or malformed."""


class NotFound(LendingError):
    """A referenced record does not exist."""


class BookNotFound(NotFound):
    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book {book_id} not found.")
        self.book_id = book_id


class MemberNotFound(NotFound):
    def __init__(self, member_id: int) -> None:
        super().__init__(f"Member {member_id} not found.")
        self.member_id = member_id


class LoanNotFound(NotFound):
    def __init__(self, loan_id: int) -> None:
        super().__init__(f"Loan {loan_id} not found.")
        self.loan_id = loan_id


class Conflict(LendingError):
    """The operation is not allowed in the record's current state."""


class BookUnavailable(Conflict):
    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book {book_id} is already on loan.")
        self.book_id = book_id


class LoanAlreadyClosed(Conflict):
    def __init__(self, loan_id: int) -> None:
        super().__init__(f"Loan {loan_id} has already been returned.")
        self.loan_id = loan_id


class StorageError(LendingError):
    """The underlying database failed, including aborted transactions."""
