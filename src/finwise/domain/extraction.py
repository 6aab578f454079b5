"""Boundary to the external text extraction service.

The service is an opaque callable taking an instruction prompt and returning
whatever text it likes. Its output is re-parsed defensively here; any
transaction it reports is still only a candidate and goes through the
sanitizer before import.
"""

import json
import re
from itertools import islice
from typing import Any, Callable, Iterable, Optional

from finwise.domain.entities import ExtractionResult
from finwise.domain.errors import UpstreamExtractionFailure
from finwise.logging_setup import get_logger

logger = get_logger(__name__)

# Callable(prompt) -> raw response text
Extractor = Callable[[str], Optional[str]]

MAX_PROMPT_TEXT = 8000
MAX_PAGES = 20

PROMPT_TEMPLATE = """
You are an expert at reading Dutch bank statements from all major banks (ING, Revolut, ABN AMRO, Rabobank, etc.).

Analyze this bank statement text and extract ALL transactions. The text comes from a file named: {file_name}

Statement text:
{text}

Instructions:
1. Find and extract EVERY transaction (money movement) in the document
2. Skip account summaries, headers, footers, and balance information
3. Look for patterns like: dates, descriptions, amounts with +/- or Af/Bij
4. Convert Dutch date formats (DD-MM-YYYY) to YYYY-MM-DD
5. Determine if transaction is income (Bij, +, salary, etc.) or expense (Af, -, payments, etc.)
6. Categorize based on merchant/description
7. Clean up descriptions (remove extra codes, spaces)

Return ONLY this JSON structure:
{{
  "transactions": [
    {{
      "date": "2024-01-15",
      "description": "Albert Heijn Amsterdam",
      "amount": 25.50,
      "category": "groceries",
      "type": "expense"
    }}
  ],
  "bankDetected": "ING Bank",
  "summary": "Found X transactions from date Y to date Z"
}}

Categories to use: groceries, transport, salary, dining, shopping, entertainment, utilities, healthcare, education, travel, other
"""

UNPARSEABLE_SUMMARY = (
    "AI response could not be parsed properly. "
    "Please try again with clearer transaction data."
)


def assemble_page_text(pages: Iterable[str], max_pages: int = MAX_PAGES) -> str:
    """Join page texts into one document with page markers.

    At most ``max_pages`` pages are consumed from ``pages``, which may be a
    lazy iterator.
    """
    sections = []
    for page_num, page_text in enumerate(islice(pages, max_pages), start=1):
        page_text = (page_text or "").strip()
        if not page_text:
            sections.append(f"=== Page {page_num} (Empty) ===")
            continue
        sections.append(f"=== Page {page_num} ===\n{page_text}")
    return "\n".join(sections)


def build_prompt(text: str, file_name: str = "statement") -> str:
    """Build the extraction instruction for a statement text."""
    return PROMPT_TEMPLATE.format(file_name=file_name, text=text[:MAX_PROMPT_TEXT])


def extract_json_object(response: str) -> Optional[dict[str, Any]]:
    """Recover a JSON object from a response that may be wrapped in prose.

    Markdown code fences are removed and the text between the first ``{``
    and the last ``}`` is decoded.

    Returns:
        Decoded object, or None if no JSON object can be recovered
    """
    if not response:
        return None

    cleaned = re.sub(r"```(?:json)?", "", response, flags=re.IGNORECASE).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Extraction response is not valid JSON: %s", e)
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_extraction_response(response: Optional[str]) -> ExtractionResult:
    """Turn a raw service response into an ExtractionResult.

    Never raises: unusable output yields an empty transaction list with a
    diagnostic summary. Entries that are not objects are dropped here; field
    validation is left to the sanitizer.
    """
    parsed = extract_json_object(response or "")
    if parsed is None:
        logger.warning("Could not parse extraction response (%d chars)", len(response or ""))
        return ExtractionResult(transactions=[], summary=UNPARSEABLE_SUMMARY)

    transactions = parsed.get("transactions")
    if not isinstance(transactions, list):
        logger.warning("Extraction response missing transactions array")
        return ExtractionResult(
            transactions=[],
            summary="AI response missing transactions array.",
        )

    candidates = [t for t in transactions if isinstance(t, dict)]
    bank_detected = parsed.get("bankDetected")
    summary = parsed.get("summary")
    return ExtractionResult(
        transactions=candidates,
        bank_detected=bank_detected if isinstance(bank_detected, str) else "Unknown Bank",
        summary=summary if isinstance(summary, str) else f"Found {len(candidates)} transactions",
    )


class ExtractionService:
    """Service extracting transaction candidates from free-form text."""

    def __init__(self, extractor: Extractor):
        """Initialize extraction service.

        Args:
            extractor: Callable sending a prompt to the text extraction
                service and returning its raw text response
        """
        self.extractor = extractor

    def extract(self, text: str, file_name: str = "statement") -> ExtractionResult:
        """Extract transaction candidates from statement text.

        Raises:
            ValueError: If text is empty
            UpstreamExtractionFailure: If the service call fails
        """
        if not text or not text.strip():
            raise ValueError("Missing statement text")

        prompt = build_prompt(text, file_name=file_name)
        logger.info("Requesting extraction for %s (%d chars)", file_name, len(text))
        try:
            response = self.extractor(prompt)
        except UpstreamExtractionFailure:
            raise
        except Exception as e:
            raise UpstreamExtractionFailure(f"Extraction service failed: {e}") from e

        result = parse_extraction_response(response)
        logger.info("Extraction found %d transactions", len(result.transactions))
        return result

    def extract_pages(self, pages: Iterable[str], file_name: str = "statement") -> ExtractionResult:
        """Extract transaction candidates from a sequence of page texts."""
        return self.extract(assemble_page_text(pages), file_name=file_name)
