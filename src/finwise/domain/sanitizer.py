"""Validation boundary between untrusted candidates and storage.

Every transaction, whether decoded from a bank export or returned by an
extraction service, passes through :class:`Sanitizer` before it may be
persisted. Candidates are plain mappings shaped like::

    {"date": "2024-01-15", "description": "Albert Heijn", "amount": 25.5,
     "type": "expense", "category": "groceries"}

Nothing about their shape or types is trusted.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Union

from finwise.domain.categorizer import CATEGORIES, OTHER
from finwise.domain.entities import CanonicalTransaction, Rejected, TransactionType
from finwise.domain.errors import InvalidAmount, InvalidDate, MalformedCandidate
from finwise.utils.amount_parser import CENTS, parse_amount
from finwise.utils.date_parser import DateFormat, parse_date

DIRECTION_ALIASES = {
    "income": TransactionType.INCOME,
    "credit": TransactionType.INCOME,
    "bij": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "debit": TransactionType.EXPENSE,
    "af": TransactionType.EXPENSE,
    "variable": TransactionType.EXPENSE,
    "fixed": TransactionType.EXPENSE,
}

SanitizeOutcome = Union[CanonicalTransaction, Rejected]


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(f"Date must be a string, got {type(value).__name__}")
    return parse_date(value, DateFormat.YYYY_MM_DD)


def _coerce_amount(value: Any) -> Decimal:
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool):
        raise InvalidAmount("Amount must be a number, got bool")
    if isinstance(value, str):
        return parse_amount(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmount(f"Amount {value!r} is not a finite number")
        value = Decimal(repr(value))
    elif isinstance(value, int):
        value = Decimal(value)
    elif not isinstance(value, Decimal):
        raise InvalidAmount(f"Amount must be a number, got {type(value).__name__}")

    if not value.is_finite():
        raise InvalidAmount(f"Amount {value} is not a finite number")
    try:
        amount = abs(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Amount {value} is out of range")
    if amount == 0:
        raise InvalidAmount("Amount is zero")
    return amount


class Sanitizer:
    """Validate and coerce transaction candidates."""

    def __init__(self, description_max_length: int = 100, default_category: str = OTHER):
        """Initialize sanitizer.

        Args:
            description_max_length: Descriptions are truncated to this length
            default_category: Category used when a candidate has none or an
                unknown one
        """
        self.description_max_length = description_max_length
        self.default_category = default_category

    def sanitize(self, candidate: Any, source: str) -> SanitizeOutcome:
        """Validate one candidate.

        Args:
            candidate: Untrusted candidate mapping, or an already canonical
                transaction
            source: Provenance tag stamped on the result

        Returns:
            CanonicalTransaction on acceptance, Rejected with a reason otherwise
        """
        try:
            return self.sanitize_or_raise(candidate, source)
        except MalformedCandidate as e:
            return Rejected(reason=str(e))

    def sanitize_or_raise(self, candidate: Any, source: str) -> CanonicalTransaction:
        """Validate one candidate.

        Raises:
            MalformedCandidate: If the candidate is rejected
        """
        if isinstance(candidate, CanonicalTransaction):
            source = candidate.source or source
            candidate = {
                "date": candidate.date,
                "description": candidate.description,
                "amount": candidate.amount,
                "type": candidate.type.value,
                "category": candidate.category,
            }
        if not isinstance(candidate, Mapping):
            raise MalformedCandidate(
                f"Candidate must be a mapping, got {type(candidate).__name__}"
            )

        raw_date = candidate.get("date")
        if raw_date is None or raw_date == "":
            raise MalformedCandidate("Missing date")
        try:
            txn_date = _coerce_date(raw_date)
        except InvalidDate as e:
            raise MalformedCandidate(str(e))

        description = candidate.get("description")
        if not isinstance(description, str):
            raise MalformedCandidate("Missing description")
        description = re.sub(r"\s+", " ", description).strip()
        if not description:
            raise MalformedCandidate("Empty description")

        raw_amount = candidate.get("amount")
        if raw_amount is None:
            raise MalformedCandidate("Missing amount")
        try:
            amount = _coerce_amount(raw_amount)
        except InvalidAmount as e:
            raise MalformedCandidate(str(e))

        raw_type = candidate.get("type")
        direction = None
        if isinstance(raw_type, str):
            direction = DIRECTION_ALIASES.get(raw_type.strip().lower())
        if direction is None:
            raise MalformedCandidate(f"Unknown transaction type {raw_type!r}")

        return CanonicalTransaction(
            date=txn_date,
            description=description[: self.description_max_length],
            amount=amount,
            type=direction,
            category=self._category(candidate.get("category")),
            source=source,
        )

    def _category(self, value: Any) -> str:
        if isinstance(value, str):
            tag = value.strip().lower()
            if tag in CATEGORIES:
                return tag
        return self.default_category


_default_sanitizer = Sanitizer()


def sanitize(candidate: Any, source: str) -> SanitizeOutcome:
    """Validate one candidate with default limits."""
    return _default_sanitizer.sanitize(candidate, source)
