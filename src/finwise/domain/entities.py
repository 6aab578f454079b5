"""Domain model entities for finwise.

These are pure data classes representing business concepts, independent of
database schema. Parsers and the sanitizer produce them, the import service
persists them and the database layer maps its rows back into them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class BankFormat(str, Enum):
    """Column layout of a bank export."""

    ING = "ing"
    REVOLUT = "revolut"
    UNKNOWN = "unknown"


class TransactionType(str, Enum):
    """Direction of a canonical transaction."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class User:
    """User domain entity."""

    id: int
    email: str
    created_at: datetime


@dataclass(frozen=True)
class CanonicalTransaction:
    """Validated, storage-ready transaction."""

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": float(self.amount),
            "type": self.type.value,
            "category": self.category,
            "source": self.source,
        }


@dataclass(frozen=True)
class Rejected:
    """Sanitizer rejection with a human-readable reason."""

    reason: str


@dataclass(frozen=True)
class StoredTransaction:
    """Persisted transaction domain entity."""

    id: int
    user_id: int
    date: date
    description: str
    amount: Decimal
    type: str
    category: str
    source: str
    created_at: datetime


@dataclass
class ParseResult:
    """Outcome of parsing one bank export document."""

    bank_format: BankFormat
    format_detected: bool = True
    candidates: list[dict[str, Any]] = field(default_factory=list)
    lines: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Counts reported by an import run.

    ``imported + duplicates + failed`` always equals ``total``.
    """

    imported: int = 0
    duplicates: int = 0
    failed: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)

    def to_response(self) -> dict[str, int]:
        return {
            "success": self.imported,
            "duplicates": self.duplicates,
            "failed": self.failed,
            "total": self.total,
        }


@dataclass
class ExtractionResult:
    """Transactions found by the text extraction service."""

    transactions: list[dict[str, Any]]
    bank_detected: str = "Unknown Bank"
    summary: Optional[str] = None
