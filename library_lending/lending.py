import logging
from typing import Optional, Union

from .catalog import BookCatalog
from .database import Database
from .errors import BookNotFound, BookUnavailable, LoanAlreadyClosed, MemberNotFound, ValidationError
from .fines import FineLedger
from .loans import LoanLedger
from .members import MembershipRegistry
from .models import BookStatus
from .validators import AmountValidator, DateLike, DateValidator

logger = logging.getLogger(__name__)


class LendingService:
    """Issues loans and processes returns.

    A book moves ``available -> loaned`` on ``create_loan`` and back on
    ``complete_loan``; there is no other state. Each operation runs in a single
    transaction on ``db``, so the book status, the loan row and any fine are
    either all written or none of them are.
    """

    def __init__(self, db: Database, catalog: BookCatalog, members: MembershipRegistry,
                 loans: LoanLedger, fines: FineLedger) -> None:
        self.db = db
        self.catalog = catalog
        self.members = members
        self.loans = loans
        self.fines = fines

    def create_loan(self, member_id: int, book_id: int, start_date: DateLike) -> int:
        """Lend ``book_id`` to ``member_id`` and return the new loan id.

        Raises MemberNotFound, BookNotFound or BookUnavailable without
        writing anything.
        """
        start = DateValidator.to_iso(start_date, "Start date")

        with self.db.transaction() as conn:
            if not self.members.exists(member_id, conn=conn):
                logger.warning("Loan declined: member %s does not exist", member_id)
                raise MemberNotFound(member_id)

            if not self.catalog.mark_loaned(book_id, conn):
                if not self.catalog.exists(book_id, conn=conn):
                    logger.warning("Loan declined: book %s does not exist", book_id)
                    raise BookNotFound(book_id)
                logger.warning("Loan declined: book %s is already on loan", book_id)
                raise BookUnavailable(book_id)

            loan_id = self.loans.create_loan(member_id, book_id, start, conn=conn)

        logger.info("Loan %s opened: book %s to member %s on %s", loan_id, book_id, member_id, start)
        return loan_id

    def complete_loan(self, loan_id: int, return_date: DateLike, damaged: bool = False,
                      fine_amount: Union[int, float, str, None] = 0, reason: Optional[str] = None) -> Optional[int]:
        """Close ``loan_id``, make its book available again and fine damage.

        A fine is recorded only when ``damaged`` is true and ``fine_amount`` is
        positive. Returns the fine id, or None when no fine was issued.
        """
        returned = DateValidator.to_iso(return_date, "Return date")
        amount = None
        if damaged and fine_amount is not None:
            amount = AmountValidator.number(fine_amount)
        fine_id = None

        with self.db.transaction() as conn:
            loan = self.loans.get_loan(loan_id, conn=conn)
            if not loan.is_open:
                logger.warning("Return declined: loan %s was already returned on %s", loan_id, loan.return_date)
                raise LoanAlreadyClosed(loan_id)
            if returned < loan.start_date:
                raise ValidationError(
                    f"Return date {returned} is before the loan start date {loan.start_date}."
                )

            self.loans.complete_loan(loan_id, returned, conn=conn)

            try:
                self.catalog.set_status(loan.book_id, BookStatus.AVAILABLE, conn=conn)
            except BookNotFound:
                # The loan still closes when its book record is gone.
                logger.warning("Loan %s closed but its book %s no longer exists", loan_id, loan.book_id)

            if amount is not None and amount > 0:
                fine_id = self.fines.record_fine(loan_id, amount, reason, conn=conn)

        logger.info("Loan %s returned on %s%s", loan_id, returned, " with a fine" if fine_id else "")
        return fine_id
