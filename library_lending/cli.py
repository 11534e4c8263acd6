import os
import subprocess
import sys
from typing import Optional

import typer
from rich.console import Console

from .config import configure_logging, settings
from .errors import LendingError
from .library import Library
from .ui_helpers import print_records, set_output_mode

APP_NAME = "Library Lending CLI"

console = Console(stderr=True)

app = typer.Typer(help=APP_NAME)

BOOK_COLUMNS = [("id", "ID"), ("title", "Title"), ("author", "Author"), ("isbn", "ISBN"), ("status", "Status")]
MEMBER_COLUMNS = [("id", "ID"), ("name", "Name"), ("member_number", "Member #"), ("phone", "Phone")]
ACTIVE_LOAN_COLUMNS = [
    ("loan_id", "Loan"),
    ("member_name", "Member"),
    ("member_number", "Member #"),
    ("book_title", "Title"),
    ("author", "Author"),
    ("start_date", "Since"),
]
FINE_COLUMNS = [
    ("fine_id", "Fine"),
    ("loan_id", "Loan"),
    ("member_name", "Member"),
    ("book_title", "Title"),
    ("amount", "Amount"),
    ("reason", "Reason"),
    ("created_at", "Date"),
]


def _get_library() -> Library:
    # Built per command so LIBRARY_DB_FILE is honoured at call time.
    return Library()


def _declined(exc: LendingError) -> typer.Exit:
    print(f"Error: {exc}")
    return typer.Exit(code=1)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options."""
    configure_logging()
    if output:
        set_output_mode(output)


# ------------------------- Books ------------------------- #
@app.command("books")
def cli_books():
    """List every catalogued book with its status."""
    try:
        books = _get_library().list_books()
    except LendingError as e:
        raise _declined(e)
    print_records(books, BOOK_COLUMNS, title="Books", empty_message="No books in library.")


@app.command("add-book")
def cli_add_book(title: str, author: str, isbn: str):
    """Catalogue a new book."""
    try:
        book_id = _get_library().add_book(title, author, isbn)
    except LendingError as e:
        raise _declined(e)
    print(f"Added book #{book_id}: {title.strip()} by {author.strip()}")


# ------------------------- Members ------------------------- #
@app.command("members")
def cli_members():
    """List registered members."""
    try:
        members = _get_library().list_members()
    except LendingError as e:
        raise _declined(e)
    print_records(members, MEMBER_COLUMNS, title="Members", empty_message="No members registered.")


@app.command("add-member")
def cli_add_member(
    name: str,
    member_number: str,
    phone: Optional[str] = typer.Option(None, "--phone", help="Contact phone number"),
):
    """Register a new member."""
    try:
        member_id = _get_library().add_member(name, member_number, phone)
    except LendingError as e:
        raise _declined(e)
    print(f"Registered member #{member_id}: {name.strip()}")


# ------------------------- Lending ------------------------- #
@app.command("lend")
def cli_lend(
    member_id: int,
    book_id: int,
    start_date: str = typer.Option(..., "--date", "-d", help="Loan start date (YYYY-MM-DD)"),
):
    """Lend a book to a member."""
    try:
        loan_id = _get_library().create_loan(member_id, book_id, start_date)
    except LendingError as e:
        raise _declined(e)
    print(f"Loan #{loan_id} created: book #{book_id} to member #{member_id}")


@app.command("return")
def cli_return(
    loan_id: int,
    return_date: str = typer.Option(..., "--date", "-d", help="Return date (YYYY-MM-DD)"),
    damaged: bool = typer.Option(False, "--damaged", help="The book came back damaged"),
    fine: float = typer.Option(0.0, "--fine", help="Fine amount for a damaged book"),
    reason: Optional[str] = typer.Option(None, "--reason", help="Why the fine was issued"),
):
    """Record the return of a loan."""
    try:
        fine_id = _get_library().complete_loan(loan_id, return_date, damaged, fine, reason)
    except LendingError as e:
        raise _declined(e)
    if fine_id:
        print(f"Loan #{loan_id} returned. Fine #{fine_id} issued: {fine:.2f}")
    else:
        print(f"Loan #{loan_id} returned.")


@app.command("loans")
def cli_loans():
    """List loans that are still open."""
    try:
        loans = _get_library().list_active_loans()
    except LendingError as e:
        raise _declined(e)
    print_records(loans, ACTIVE_LOAN_COLUMNS, title="Active loans",
                  empty_message="No active loans.")


@app.command("fines")
def cli_fines():
    """List every fine issued."""
    try:
        fines = _get_library().list_fines()
    except LendingError as e:
        raise _declined(e)
    print_records(fines, FINE_COLUMNS, title="Fines", empty_message="No fines.")


# ------------------------- Server ------------------------- #
@app.command("serve")
def cli_serve(reload: bool = typer.Option(False, "--reload", help="Restart on code changes")):
    """Run the HTTP API with uvicorn."""
    host = settings.api_host
    port = int(settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "library_lending.api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args, env=os.environ.copy(), check=False)
    except FileNotFoundError:
        console.print("[bold red]Error:[/] could not start uvicorn. Make sure it is installed.")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
