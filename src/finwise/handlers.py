"""Request handlers for the import and extraction entry points.

Handlers take a decoded JSON payload and return ``(status, body)`` pairs so a
web framework only has to serialize them. Per-transaction problems never
change the status; they are folded into the reported counts.
"""

from typing import Any, Optional

from finwise.database.base import Database
from finwise.domain.entities import Rejected
from finwise.domain.errors import Unauthorized, UpstreamExtractionFailure, too_many_transactions
from finwise.domain.extraction import ExtractionService
from finwise.domain.sanitizer import Sanitizer
from finwise.domain.transaction_import import (
    AI_PDF_SOURCE,
    TransactionImportService,
    bank_import_source,
)
from finwise.domain.user import UserService
from finwise.logging_setup import get_logger
from finwise.settings import ImportSettings

logger = get_logger(__name__)

Response = tuple[int, dict[str, Any]]

OK = 200
BAD_REQUEST = 400
UNAUTHORIZED = 401
BAD_GATEWAY = 502


def _error(status: int, message: str, details: Optional[str] = None) -> Response:
    body = {"error": message}
    if details:
        body["details"] = details
    return status, body


def handle_import_request(
    db: Database, payload: Any, settings: Optional[ImportSettings] = None
) -> Response:
    """Import a batch of transaction candidates for a user.

    Payload keys: ``transactions`` (list), ``bankType`` (str), ``userId``.

    Returns:
        200 with ``{success, duplicates, failed, total}``, 400 for a malformed
        batch, 401 for a missing or unknown user
    """
    settings = settings or ImportSettings()
    if not isinstance(payload, dict):
        return _error(BAD_REQUEST, "Invalid request body")

    transactions = payload.get("transactions")
    if not isinstance(transactions, list):
        return _error(BAD_REQUEST, "Invalid transactions data")
    if len(transactions) > settings.max_transactions:
        return _error(
            BAD_REQUEST,
            "Invalid transactions data",
            too_many_transactions(len(transactions), settings.max_transactions),
        )

    bank_type = payload.get("bankType")
    if not isinstance(bank_type, str) or not bank_type.strip():
        return _error(BAD_REQUEST, "Missing bankType")

    logger.info("Processing %d transactions from %s", len(transactions), bank_type)
    service = TransactionImportService(db, settings)
    try:
        result = service.import_transactions(
            payload.get("userId"), transactions, bank_import_source(bank_type.strip().lower())
        )
    except Unauthorized as e:
        logger.warning("Import rejected: %s", e)
        return _error(UNAUTHORIZED, "Authentication required")

    return OK, result.to_response()


def handle_extraction_request(
    db: Database,
    payload: Any,
    extraction_service: ExtractionService,
    settings: Optional[ImportSettings] = None,
) -> Response:
    """Extract transactions from statement text and optionally import them.

    Payload keys: ``text`` (str) or ``pages`` (list of str), ``fileName``,
    ``userId`` and ``import`` (bool). A user is only required when importing.

    Returns:
        200 with ``{transactions, rejected, bankDetected, summary}`` plus
        ``imported`` counts when importing, 400 without text, 401 for an
        unknown user, 502 when the extraction service fails
    """
    settings = settings or ImportSettings()
    if not isinstance(payload, dict):
        return _error(BAD_REQUEST, "Invalid request body")

    text = payload.get("text")
    pages = payload.get("pages")
    if not (isinstance(text, str) and text.strip()) and not isinstance(pages, list):
        return _error(BAD_REQUEST, "Missing statement text")

    file_name = payload.get("fileName") or "statement"
    do_import = bool(payload.get("import"))

    user = None
    if do_import:
        try:
            user = UserService(db).require_user(payload.get("userId"))
        except Unauthorized as e:
            logger.warning("Extraction import rejected: %s", e)
            return _error(UNAUTHORIZED, "Authentication required")

    try:
        if isinstance(text, str) and text.strip():
            extracted = extraction_service.extract(text, file_name=file_name)
        else:
            extracted = extraction_service.extract_pages(
                [page for page in pages if isinstance(page, str)], file_name=file_name
            )
    except UpstreamExtractionFailure as e:
        logger.error("AI analysis failed: %s", e)
        return _error(BAD_GATEWAY, "AI analysis failed", str(e))
    except ValueError as e:
        return _error(BAD_REQUEST, str(e))

    sanitizer = Sanitizer(
        description_max_length=settings.description_max_length,
        default_category=settings.default_category,
    )
    accepted = []
    rejected = 0
    for candidate in extracted.transactions:
        outcome = sanitizer.sanitize(candidate, AI_PDF_SOURCE)
        if isinstance(outcome, Rejected):
            rejected += 1
        else:
            accepted.append(outcome)

    body: dict[str, Any] = {
        "transactions": [txn.to_dict() for txn in accepted],
        "rejected": rejected,
        "bankDetected": extracted.bank_detected,
        "summary": extracted.summary or f"Found {len(accepted)} transactions",
    }

    if user is not None:
        result = TransactionImportService(db, settings).import_transactions(
            user.id, extracted.transactions, AI_PDF_SOURCE
        )
        body["imported"] = result.to_response()

    return OK, body
