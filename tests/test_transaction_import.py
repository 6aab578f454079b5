"""Tests for the transaction import and duplicate detection service."""

import pytest
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from finwise.domain.errors import Unauthorized, ValidationError
from finwise.domain.transaction_import import (
    TransactionImportService,
    bank_import_source,
    storage_type,
)
from finwise.domain.entities import TransactionType


def _candidate(**overrides):
    candidate = {
        "date": "2024-01-15",
        "description": "Albert Heijn Amsterdam",
        "amount": 25.5,
        "type": "expense",
        "category": "groceries",
    }
    candidate.update(overrides)
    return candidate


def _assert_counts_sum(result):
    assert result.imported + result.duplicates + result.failed == result.total


def test_import_persists_transactions(import_service, sample_user, temp_db):
    """Test a clean import."""
    result = import_service.import_transactions(
        sample_user.id,
        [_candidate(), _candidate(description="Salary", amount=2500, type="income", category="salary")],
        "bank_import_ing",
    )

    assert (result.imported, result.duplicates, result.failed, result.total) == (2, 0, 0, 2)
    stored = temp_db.list_transactions(sample_user.id)
    assert len(stored) == 2
    by_description = {txn.description: txn for txn in stored}
    assert by_description["Salary"].type == "income"
    assert by_description["Albert Heijn Amsterdam"].type == "variable"
    assert by_description["Albert Heijn Amsterdam"].amount == Decimal("25.50")
    assert by_description["Albert Heijn Amsterdam"].source == "bank_import_ing"
    assert all(txn.user_id == sample_user.id for txn in stored)


def test_reimport_is_idempotent(import_service, sample_user):
    """Test that importing the same batch twice only imports once."""
    batch = [
        _candidate(),
        _candidate(date="2024-01-16", description="Netflix", amount=13.99, category="entertainment"),
        _candidate(date="2024-01-17", description="Salary", amount=2500, type="income"),
    ]
    first = import_service.import_transactions(sample_user.id, batch, "bank_import_ing")
    second = import_service.import_transactions(sample_user.id, batch, "bank_import_ing")

    assert first.imported == 3
    assert second.imported == 0
    assert second.duplicates == second.total == 3


def test_identical_candidates_in_one_batch(import_service, sample_user):
    """Test order sensitivity within a single batch."""
    result = import_service.import_transactions(
        sample_user.id, [_candidate(), _candidate()], "bank_import_ing"
    )
    assert result.imported == 1
    assert result.duplicates == 1
    _assert_counts_sum(result)


def test_duplicate_tolerates_description_drift(import_service, sample_user):
    """Test the prefix-based fuzzy match."""
    import_service.import_transactions(
        sample_user.id, [_candidate(description="Albert Heijn 1234 Amsterdam NLD")], "x"
    )
    result = import_service.import_transactions(
        sample_user.id, [_candidate(description="ALBERT HEIJN 1234 AMS")], "x"
    )
    assert result.duplicates == 1


def test_different_amount_or_date_is_not_duplicate(import_service, sample_user):
    """Test that date and amount must match exactly."""
    import_service.import_transactions(sample_user.id, [_candidate()], "x")
    result = import_service.import_transactions(
        sample_user.id,
        [_candidate(amount=25.51), _candidate(date="2024-01-16")],
        "x",
    )
    assert result.imported == 2
    assert result.duplicates == 0


def test_duplicates_are_per_user(import_service, sample_user, user_service):
    """Test that another user's records never count as duplicates."""
    other_id = user_service.create_user(email="sam@example.com")
    import_service.import_transactions(sample_user.id, [_candidate()], "x")
    result = import_service.import_transactions(other_id, [_candidate()], "x")
    assert result.imported == 1


def test_reimport_with_non_ascii_capitals_is_idempotent(import_service, sample_user):
    """Test that accented uppercase descriptions still match on re-import."""
    candidate = _candidate(description="ÖBB TICKETSHOP WIEN", amount=42.0)
    first = import_service.import_transactions(sample_user.id, [candidate], "x")
    second = import_service.import_transactions(sample_user.id, [candidate], "x")

    assert first.imported == 1
    assert second.imported == 0
    assert second.duplicates == 1


def test_non_ascii_case_difference_is_duplicate(import_service, sample_user):
    """Test that case folding covers non-ASCII letters."""
    import_service.import_transactions(
        sample_user.id, [_candidate(description="ÉNERGIE ÉLECTRIQUE PARIS")], "x"
    )
    result = import_service.import_transactions(
        sample_user.id, [_candidate(description="énergie électrique paris")], "x"
    )
    assert result.duplicates == 1


def test_like_wildcards_in_description_are_literal(import_service, sample_user):
    """Test that % and _ in descriptions do not act as wildcards."""
    import_service.import_transactions(sample_user.id, [_candidate(description="Shop ABC")], "x")
    result = import_service.import_transactions(sample_user.id, [_candidate(description="Shop %")], "x")
    assert result.imported == 1


def test_malformed_candidates_counted_as_failed(import_service, sample_user, temp_db):
    """Test that rejected candidates are never persisted."""
    result = import_service.import_transactions(
        sample_user.id,
        [_candidate(amount="abc"), _candidate(date=""), _candidate()],
        "ai_pdf_import",
    )
    assert result.failed == 2
    assert result.imported == 1
    assert result.total == 3
    assert len(result.errors) == 2
    assert result.errors[0].startswith("Transaction 1:")
    assert len(temp_db.list_transactions(sample_user.id)) == 1


def test_long_description_truncated_before_storage(import_service, sample_user, temp_db):
    """Test the bounded description length."""
    import_service.import_transactions(sample_user.id, [_candidate(description="y" * 300)], "x")
    stored = temp_db.list_transactions(sample_user.id)
    assert len(stored[0].description) == 100


def test_storage_error_counted_and_batch_continues(import_service, sample_user, temp_db, monkeypatch):
    """Test that a failed write only fails its own candidate."""
    original = temp_db.create_transaction
    calls = {"count": 0}

    def flaky_create(**kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        return original(**kwargs)

    monkeypatch.setattr(temp_db, "create_transaction", flaky_create)
    result = import_service.import_transactions(
        sample_user.id,
        [_candidate(), _candidate(date="2024-01-16")],
        "x",
    )
    assert result.failed == 1
    assert result.imported == 1
    assert "storage error" in result.errors[0]
    _assert_counts_sum(result)


def test_unknown_user_rejected(import_service):
    """Test that imports need a known user."""
    with pytest.raises(Unauthorized):
        import_service.import_transactions(999, [_candidate()], "x")
    with pytest.raises(Unauthorized):
        import_service.import_transactions(None, [_candidate()], "x")


def test_empty_batch(import_service, sample_user):
    """Test an empty candidate list."""
    result = import_service.import_transactions(sample_user.id, [], "x")
    assert (result.imported, result.duplicates, result.failed, result.total) == (0, 0, 0, 0)


def test_import_statement_end_to_end(import_service, sample_user, temp_db, fixtures_dir):
    """Test parsing and importing an ING export."""
    content = (fixtures_dir / "ing_export.csv").read_text(encoding="utf-8")
    parsed, result = import_service.import_statement(sample_user.id, content)

    assert parsed.failed == 1
    assert result.imported == 3
    stored = sorted(temp_db.list_transactions(sample_user.id), key=lambda t: t.date)
    assert [(t.date, t.amount, t.type, t.category) for t in stored[:2]] == [
        (date(2024, 1, 1), Decimal("25.50"), "variable", "groceries"),
        (date(2024, 1, 2), Decimal("2500.00"), "income", "salary"),
    ]
    assert {t.source for t in stored} == {"bank_import_ing"}

    _, again = import_service.import_statement(sample_user.id, content)
    assert again.imported == 0
    assert again.duplicates == again.total == 3


def test_import_statement_rejects_unknown_user_before_parsing(import_service):
    """Test that an unknown user fails before any parsing."""
    with pytest.raises(Unauthorized):
        import_service.import_statement(999, "")


def test_import_statement_rejects_empty_upload(import_service, sample_user):
    """Test upload validation."""
    with pytest.raises(ValidationError):
        import_service.import_statement(sample_user.id, "")


def test_helpers():
    """Test provenance and storage type helpers."""
    assert bank_import_source("revolut") == "bank_import_revolut"
    assert storage_type(TransactionType.INCOME) == "income"
    assert storage_type(TransactionType.EXPENSE) == "variable"
