"""Tests for the extraction service boundary."""

import json
import pytest

from finwise.domain.errors import UpstreamExtractionFailure
from finwise.domain.extraction import (
    MAX_PROMPT_TEXT,
    UNPARSEABLE_SUMMARY,
    ExtractionService,
    assemble_page_text,
    build_prompt,
    extract_json_object,
    parse_extraction_response,
)


RESPONSE = {
    "transactions": [
        {
            "date": "2024-01-15",
            "description": "Albert Heijn Amsterdam",
            "amount": 25.5,
            "category": "groceries",
            "type": "expense",
        }
    ],
    "bankDetected": "ING Bank",
    "summary": "Found 1 transactions",
}


class RecordingExtractor:
    """Stub extractor returning a fixed response and recording prompts."""

    def __init__(self, response):
        self.response = response
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.response


def test_extract_json_object_plain():
    """Test decoding a bare JSON object."""
    assert extract_json_object(json.dumps(RESPONSE)) == RESPONSE


def test_extract_json_object_with_fences_and_prose():
    """Test recovering JSON wrapped in markdown and prose."""
    wrapped = "Here are the results:\n```json\n" + json.dumps(RESPONSE) + "\n```\nHope this helps."
    assert extract_json_object(wrapped) == RESPONSE


@pytest.mark.parametrize(
    "response",
    ["", "no json here", "{not valid json}", "} backwards {", "[1, 2, 3]"],
)
def test_extract_json_object_unrecoverable(response):
    """Test that unusable text yields None."""
    assert extract_json_object(response) is None


def test_parse_extraction_response():
    """Test a well-formed response."""
    result = parse_extraction_response(json.dumps(RESPONSE))
    assert len(result.transactions) == 1
    assert result.bank_detected == "ING Bank"
    assert result.summary == "Found 1 transactions"


def test_parse_extraction_response_unparseable():
    """Test that garbage never raises."""
    result = parse_extraction_response("Sorry, I cannot read this statement.")
    assert result.transactions == []
    assert result.summary == UNPARSEABLE_SUMMARY
    assert result.bank_detected == "Unknown Bank"

    assert parse_extraction_response(None).transactions == []


def test_parse_extraction_response_missing_array():
    """Test a JSON object without a transactions list."""
    result = parse_extraction_response('{"transactions": "none", "bankDetected": "ING"}')
    assert result.transactions == []
    assert "missing transactions" in result.summary


def test_parse_extraction_response_drops_non_objects():
    """Test that non-object entries are dropped."""
    payload = {"transactions": [RESPONSE["transactions"][0], "junk", 42, None]}
    result = parse_extraction_response(json.dumps(payload))
    assert len(result.transactions) == 1
    assert result.bank_detected == "Unknown Bank"
    assert result.summary == "Found 1 transactions"


def test_assemble_page_text():
    """Test page markers and empty pages."""
    text = assemble_page_text(["first page", "   ", "third page"])
    assert text == (
        "=== Page 1 ===\nfirst page\n"
        "=== Page 2 (Empty) ===\n"
        "=== Page 3 ===\nthird page"
    )


def test_assemble_page_text_stops_at_max_pages():
    """Test that a lazy page source is not read past the page limit."""
    consumed = []

    def pages():
        for num in range(1, 100):
            consumed.append(num)
            yield f"page {num}"

    text = assemble_page_text(pages(), max_pages=3)
    assert "=== Page 3 ===" in text
    assert "=== Page 4" not in text
    assert consumed == [1, 2, 3]


def test_build_prompt_truncates_text():
    """Test the prompt text ceiling."""
    prompt = build_prompt("x" * (MAX_PROMPT_TEXT + 500), file_name="jan.pdf")
    assert "jan.pdf" in prompt
    assert "x" * MAX_PROMPT_TEXT in prompt
    assert "x" * (MAX_PROMPT_TEXT + 1) not in prompt


def test_service_extract():
    """Test a successful extraction call."""
    extractor = RecordingExtractor("```json\n" + json.dumps(RESPONSE) + "\n```")
    service = ExtractionService(extractor)

    result = service.extract("01-01-2024 Albert Heijn Af 25,50", file_name="jan.pdf")

    assert len(result.transactions) == 1
    assert len(extractor.prompts) == 1
    assert "Albert Heijn Af 25,50" in extractor.prompts[0]


def test_service_extract_pages():
    """Test extraction from page texts."""
    extractor = RecordingExtractor(json.dumps(RESPONSE))
    service = ExtractionService(extractor)

    service.extract_pages(["page one", "page two"])

    assert "=== Page 2 ===\npage two" in extractor.prompts[0]


def test_service_rejects_empty_text():
    """Test that empty text never reaches the extractor."""
    extractor = RecordingExtractor("{}")
    service = ExtractionService(extractor)

    with pytest.raises(ValueError, match="Missing statement text"):
        service.extract("   ")
    assert extractor.prompts == []


def test_service_wraps_extractor_errors():
    """Test that extractor failures become UpstreamExtractionFailure."""

    def failing(prompt):
        raise ConnectionError("connection reset")

    service = ExtractionService(failing)
    with pytest.raises(UpstreamExtractionFailure, match="connection reset"):
        service.extract("some text")


def test_service_unparseable_response_is_not_an_error():
    """Test that unusable output yields an empty result."""
    service = ExtractionService(RecordingExtractor("I could not find any transactions."))
    result = service.extract("some text")
    assert result.transactions == []
    assert result.summary == UNPARSEABLE_SUMMARY
