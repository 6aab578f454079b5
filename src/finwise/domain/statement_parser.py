"""Bank statement parsing service."""

from itertools import islice
from typing import Iterable, Iterator, Optional, TypeVar

from finwise.domain.bank_formats import (
    decode_line,
    detect_format,
    get_format_spec,
    is_skipped_line,
)
from finwise.domain.entities import BankFormat, ParseResult
from finwise.domain.errors import (
    UnparseableLine,
    ValidationError,
    file_too_large,
    too_many_transactions,
)
from finwise.logging_setup import get_logger
from finwise.settings import ImportSettings
from finwise.utils.field_parser import parse_delimited_line

logger = get_logger(__name__)


T = TypeVar("T")


def iter_batches(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most ``size`` items.

    The parser feeds it ``(line_number, line)`` pairs. Batching groups lines
    for processing; it does not bound memory, since every candidate is kept
    on the ParseResult.
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class StatementParser:
    """Service turning bank export text into transaction candidates."""

    def __init__(self, settings: Optional[ImportSettings] = None):
        """Initialize statement parser.

        Args:
            settings: Import limits; defaults to ImportSettings()
        """
        self.settings = settings or ImportSettings()

    def check_upload(self, content: str) -> None:
        """Reject uploads that are empty or over the size ceiling.

        Raises:
            ValidationError: If content is empty or too large
        """
        size = len(content.encode("utf-8"))
        if size > self.settings.max_file_bytes:
            raise ValidationError(file_too_large(size, self.settings.max_file_bytes))
        if not content.strip():
            raise ValidationError("File is empty")

    def bind_format(self, content: str, bank_format: Optional[BankFormat] = None) -> tuple[BankFormat, bool]:
        """Choose the format for a document.

        Returns:
            Tuple of (format, detected). ``detected`` is False when the
            fallback format was bound because no fingerprint matched.
        """
        if bank_format is not None and BankFormat(bank_format) != BankFormat.UNKNOWN:
            bank_format = BankFormat(bank_format)
            get_format_spec(bank_format)
            return bank_format, True

        detected = detect_format(content)
        if detected != BankFormat.UNKNOWN:
            logger.info("Detected bank format: %s", detected.value)
            return detected, True

        fallback = self.settings.fallback_format
        logger.warning(
            "No bank format fingerprint matched; falling back to %s", fallback.value
        )
        return fallback, False

    def parse(self, content: str, bank_format: Optional[BankFormat] = None) -> ParseResult:
        """Parse a bank export document.

        The first non-blank line is the header and is skipped. Data lines are
        handled in batches of ``settings.chunk_size``; a line that cannot be
        decoded is counted in ``failed`` and never aborts the document.

        Args:
            content: Full export text
            bank_format: Format to use; detected from content when None

        Returns:
            ParseResult with candidates and counters

        Raises:
            ValidationError: If the upload is empty, too large, has no data
                rows or yields more candidates than allowed
        """
        self.check_upload(content)
        bound, detected = self.bind_format(content, bank_format)
        result = ParseResult(bank_format=bound, format_detected=detected)

        lines = (line.strip() for line in content.splitlines())
        numbered = ((num, line) for num, line in enumerate(lines, start=1) if line)

        header = next(numbered, None)
        if header is None:
            raise ValidationError("File is empty")

        for batch in iter_batches(numbered, self.settings.chunk_size):
            self._parse_batch(batch, result)

        if result.lines == 0:
            raise ValidationError("CSV file must have at least a header and one data row")

        if len(result.candidates) > self.settings.max_transactions:
            raise ValidationError(
                too_many_transactions(len(result.candidates), self.settings.max_transactions)
            )

        logger.info(
            "Parsed %d transactions from %d lines (%d failed, %d skipped)",
            len(result.candidates),
            result.lines,
            result.failed,
            result.skipped,
        )
        return result

    def decode(self, line: str, bank_format: BankFormat) -> Optional[dict]:
        """Decode one data line.

        Returns:
            Candidate mapping, or None for a line the format skips on purpose

        Raises:
            UnparseableLine: If the line cannot be decoded
        """
        fields = parse_delimited_line(line)
        if is_skipped_line(bank_format, fields):
            return None
        candidate = decode_line(bank_format, fields)
        if candidate is None:
            raise UnparseableLine(f"could not parse '{line[:50]}'")
        return candidate

    def _parse_batch(self, batch: list[tuple[int, str]], result: ParseResult) -> None:
        for line_num, line in batch:
            result.lines += 1
            try:
                candidate = self.decode(line, result.bank_format)
            except UnparseableLine as e:
                result.failed += 1
                result.errors.append(f"Line {line_num}: {e}")
                logger.warning("Failed to parse line %d: %r", line_num, line[:50])
                continue

            if candidate is None:
                result.skipped += 1
                continue
            result.candidates.append(candidate)
