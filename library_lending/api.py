"""HTTP API for the lending service.

Resources are ``/books``, ``/members`` and ``/loans`` (with
``/loans/{id}/return`` and ``/loans/fines``). Request bodies
are validated by pydantic before they reach the core; domain errors are mapped
to status codes in one exception handler.
"""

import logging
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import configure_logging, settings
from .errors import Conflict, LendingError, NotFound, StorageError, ValidationError
from .library import Library

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_library() -> Library:
    """Process-wide facade; tests override this dependency."""
    return Library()


# --- Errors ---
def _status_for(exc: LendingError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, Conflict):
        return 409
    return 500


@app.exception_handler(LendingError)
async def lending_error_handler(request: Request, exc: LendingError):
    status = _status_for(exc)
    if isinstance(exc, StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# --- Models ---
class BookModel(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    status: str


class BookCreateModel(BaseModel):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    isbn: str = Field(min_length=1)


class MemberModel(BaseModel):
    id: int
    name: str
    member_number: str
    phone: str | None = None


class MemberCreateModel(BaseModel):
    name: str = Field(min_length=1)
    member_number: str = Field(min_length=1)
    phone: str | None = None


class LoanModel(BaseModel):
    id: int
    member_id: int
    book_id: int
    start_date: str
    return_date: str | None = None


class LoanCreateModel(BaseModel):
    member_id: int
    book_id: int
    start_date: date


class LoanReturnModel(BaseModel):
    return_date: date
    damaged: bool = False
    fine_amount: float = Field(default=0, ge=0)
    reason: str | None = None


class LoanReturnResponse(BaseModel):
    loan: LoanModel
    fine_id: int | None = None


class ActiveLoanModel(BaseModel):
    loan_id: int
    member_name: str
    member_number: str
    book_title: str
    author: str
    start_date: str


class FineModel(BaseModel):
    fine_id: int
    loan_id: int
    member_name: str
    book_title: str
    amount: float
    reason: str
    created_at: str | None = None


# --- Health ---
@app.get("/health")
def health(library: Library = Depends(get_library)):
    """Quick store probe for container health checks."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "db": library.is_healthy(),
        "version": settings.app_version,
    }


# --- Books ---
@app.get("/books", response_model=List[BookModel])
def list_books(library: Library = Depends(get_library)):
    return [BookModel(**b.to_dict()) for b in library.list_books()]


@app.post("/books", response_model=BookModel, status_code=201)
def add_book(payload: BookCreateModel, library: Library = Depends(get_library)):
    book_id = library.add_book(payload.title, payload.author, payload.isbn)
    return BookModel(**library.get_book(book_id).to_dict())


@app.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: int, library: Library = Depends(get_library)):
    return BookModel(**library.get_book(book_id).to_dict())


# --- Members ---
@app.get("/members", response_model=List[MemberModel])
def list_members(library: Library = Depends(get_library)):
    return [MemberModel(**m.to_dict()) for m in library.list_members()]


@app.post("/members", response_model=MemberModel, status_code=201)
def add_member(payload: MemberCreateModel, library: Library = Depends(get_library)):
    member_id = library.add_member(payload.name, payload.member_number, payload.phone)
    return MemberModel(**library.get_member(member_id).to_dict())


# --- Loans ---
@app.get("/loans", response_model=List[ActiveLoanModel])
def list_active_loans(library: Library = Depends(get_library)):
    """Loans that have not been returned yet."""
    return [ActiveLoanModel(**loan.to_dict()) for loan in library.list_active_loans()]


@app.post("/loans", response_model=LoanModel, status_code=201)
def create_loan(payload: LoanCreateModel, library: Library = Depends(get_library)):
    loan_id = library.create_loan(payload.member_id, payload.book_id, payload.start_date)
    return LoanModel(**library.get_loan(loan_id).to_dict())


# Declared before /loans/{loan_id} so "fines" is not parsed as an id.
@app.get("/loans/fines", response_model=List[FineModel])
def list_fines(library: Library = Depends(get_library)):
    return [FineModel(**f.to_dict()) for f in library.list_fines()]


@app.get("/loans/{loan_id}", response_model=LoanModel)
def get_loan(loan_id: int, library: Library = Depends(get_library)):
    return LoanModel(**library.get_loan(loan_id).to_dict())


@app.put("/loans/{loan_id}/return", response_model=LoanReturnResponse)
def return_loan(loan_id: int, payload: LoanReturnModel, library: Library = Depends(get_library)):
    """Record a return, fining the member when the book came back damaged."""
    fine_id = library.complete_loan(
        loan_id,
        payload.return_date,
        damaged=payload.damaged,
        fine_amount=payload.fine_amount,
        reason=payload.reason,
    )
    loan = library.get_loan(loan_id)
    return LoanReturnResponse(loan=LoanModel(**loan.to_dict()), fine_id=fine_id)
