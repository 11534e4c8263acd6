import math
from datetime import date, datetime
from typing import Optional, Union

from .errors import ValidationError

DateLike = Union[date, str]


class TextValidator:
    """Checks for the free-text fields of books and members."""

    @staticmethod
    def require(value: Optional[str], field: str) -> str:
        if value is None or not str(value).strip():
            raise ValidationError(f"{field} is required.")
        return str(value).strip()

    @staticmethod
    def optional(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class DateValidator:
    """Loan dates are calendar dates persisted as ISO ``YYYY-MM-DD`` text."""

    @staticmethod
    def to_iso(value: Optional[DateLike], field: str) -> str:
        if value is None or value == "":
            raise ValidationError(f"{field} is required.")
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value).strip()).isoformat()
        except ValueError as e:
            raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD).") from e


class AmountValidator:
    @staticmethod
    def number(amount: Union[int, float, str], field: str = "Fine amount") -> float:
        """Convert to a finite float. Zero and negatives pass through."""
        try:
            value = float(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"{field} must be a number.") from e
        if not math.isfinite(value):
            raise ValidationError(f"{field} must be a finite number.")
        return value

    @staticmethod
    def positive(amount: Union[int, float, str], field: str = "Fine amount") -> float:
        value = AmountValidator.number(amount, field)
        if value <= 0:
            raise ValidationError(f"{field} must be greater than zero.")
        return value
