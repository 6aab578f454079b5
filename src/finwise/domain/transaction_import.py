"""Transaction import and duplicate detection service."""

from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from finwise.database.base import Database
from finwise.domain.entities import (
    BankFormat,
    CanonicalTransaction,
    ImportResult,
    ParseResult,
    Rejected,
    TransactionType,
)
from finwise.domain.sanitizer import Sanitizer
from finwise.domain.statement_parser import StatementParser
from finwise.domain.user import UserService
from finwise.logging_setup import get_logger
from finwise.settings import ImportSettings

logger = get_logger(__name__)


def bank_import_source(bank_type: str) -> str:
    """Return the provenance tag for a bank export import."""
    return f"bank_import_{bank_type}"


AI_PDF_SOURCE = "ai_pdf_import"


def storage_type(transaction_type: TransactionType) -> str:
    """Map a canonical direction onto the stored type.

    Storage distinguishes income, fixed and variable; imported spending is
    always variable.
    """
    if transaction_type == TransactionType.INCOME:
        return "income"
    return "variable"


class TransactionImportService:
    """Service for importing canonical transactions for a user."""

    def __init__(self, db: Database, settings: Optional[ImportSettings] = None):
        """Initialize transaction import service.

        Args:
            db: Database instance
            settings: Import limits; defaults to ImportSettings()
        """
        self.db = db
        self.settings = settings or ImportSettings()
        self.user_service = UserService(db)
        self.sanitizer = Sanitizer(
            description_max_length=self.settings.description_max_length,
            default_category=self.settings.default_category,
        )

    def find_duplicate(self, user_id: int, txn: CanonicalTransaction):
        """Return a stored transaction that ``txn`` likely duplicates, or None.

        Same user, same date, same amount, and a stored description containing
        the first ``duplicate_match_length`` characters of the candidate's.
        """
        fragment = txn.description[: self.settings.duplicate_match_length]
        return self.db.find_duplicate(user_id, txn.date, txn.amount, fragment)

    def import_transactions(
        self, user_id: int, candidates: Iterable[Any], source: str
    ) -> ImportResult:
        """Import transactions for a user.

        Candidates are handled one at a time. Each write is committed before
        the next duplicate check, so a transaction repeated within one batch
        is imported once and then counted as a duplicate.

        Args:
            user_id: Owner of the imported transactions
            candidates: Candidate mappings or canonical transactions
            source: Provenance tag stored with each transaction

        Returns:
            ImportResult where imported + duplicates + failed == total

        Raises:
            Unauthorized: If the user does not exist
        """
        user = self.user_service.require_user(user_id)
        candidates = list(candidates)
        result = ImportResult(total=len(candidates))

        for position, candidate in enumerate(candidates, start=1):
            outcome = self.sanitizer.sanitize(candidate, source)
            if isinstance(outcome, Rejected):
                result.failed += 1
                result.errors.append(f"Transaction {position}: {outcome.reason}")
                logger.debug("Rejected transaction %d: %s", position, outcome.reason)
                continue

            try:
                if self.find_duplicate(user.id, outcome) is not None:
                    result.duplicates += 1
                    continue

                self.db.create_transaction(
                    user_id=user.id,
                    date=outcome.date,
                    description=outcome.description,
                    amount=outcome.amount,
                    type=storage_type(outcome.type),
                    category=outcome.category,
                    source=outcome.source,
                )
                result.imported += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                result.failed += 1
                result.errors.append(f"Transaction {position}: storage error: {e}")
                logger.error("Failed to store transaction %d: %s", position, e)

        logger.info(
            "Import completed: %d imported, %d duplicates, %d failed",
            result.imported,
            result.duplicates,
            result.failed,
        )
        return result

    def import_statement(
        self, user_id: int, content: str, bank_format: Optional[BankFormat] = None
    ) -> tuple[ParseResult, ImportResult]:
        """Parse a bank export and import its transactions.

        Args:
            user_id: Owner of the imported transactions
            content: Full export text
            bank_format: Format to use; detected from content when None

        Returns:
            Tuple of (parse result, import result)

        Raises:
            Unauthorized: If the user does not exist
            ValidationError: If the upload is rejected before import
        """
        self.user_service.require_user(user_id)
        parsed = StatementParser(self.settings).parse(content, bank_format=bank_format)
        imported = self.import_transactions(
            user_id, parsed.candidates, bank_import_source(parsed.bank_format.value)
        )
        return parsed, imported
