from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class BookStatus(str, Enum):
    AVAILABLE = "available"
    LOANED = "loaned"


@dataclass
class Book:
    """A single catalogued title; one physical copy per record."""

    id: int
    title: str
    author: str
    isbn: str
    status: BookStatus = BookStatus.AVAILABLE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Book":
        return Book(
            id=data["id"],
            title=data["title"],
            author=data["author"],
            isbn=data["isbn"],
            status=BookStatus(data["status"]),
        )


@dataclass
class Member:
    id: int
    name: str
    member_number: str
    phone: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Member":
        return Member(
            id=data["id"],
            name=data["name"],
            member_number=data["member_number"],
            phone=data["phone"],
        )


@dataclass
class Loan:
    """A member holding a book. ``return_date`` stays None while the loan is open."""

    id: int
    member_id: int
    book_id: int
    start_date: str
    return_date: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Loan":
        return Loan(
            id=data["id"],
            member_id=data["member_id"],
            book_id=data["book_id"],
            start_date=data["start_date"],
            return_date=data["return_date"],
        )


@dataclass
class ActiveLoan:
    """Open loan joined with the display fields of its member and book."""

    loan_id: int
    member_name: str
    member_number: str
    book_title: str
    author: str
    start_date: str

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ActiveLoan":
        return ActiveLoan(
            loan_id=data["loan_id"],
            member_name=data["member_name"],
            member_number=data["member_number"],
            book_title=data["book_title"],
            author=data["author"],
            start_date=data["start_date"],
        )


@dataclass
class Fine:
    id: int
    loan_id: int
    amount: float
    reason: str
    created_at: Optional[str] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Fine":
        return Fine(
            id=data["id"],
            loan_id=data["loan_id"],
            amount=data["amount"],
            reason=data["reason"],
            created_at=data["created_at"],
        )


@dataclass
class FineView:
    """Fine joined with the member and book of the loan it was issued on."""

    fine_id: int
    loan_id: int
    member_name: str
    book_title: str
    amount: float
    reason: str
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "FineView":
        return FineView(
            fine_id=data["fine_id"],
            loan_id=data["loan_id"],
            member_name=data["member_name"],
            book_title=data["book_title"],
            amount=data["amount"],
            reason=data["reason"],
            created_at=data["created_at"],
        )
