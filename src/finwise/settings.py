"""Import limits and tunables."""

import os
from dataclasses import dataclass

from finwise.domain.entities import BankFormat


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{value}'")


@dataclass(frozen=True)
class ImportSettings:
    """Limits applied to uploads and import batches.

    Attributes:
        max_file_bytes: Upload size ceiling, checked before parsing
        max_transactions: Candidate ceiling for one import batch
        chunk_size: Lines handled per parsing batch
        description_max_length: Stored description length
        duplicate_match_length: Description prefix length used for duplicate checks
        fallback_format: Format bound when no fingerprint matches
        default_category: Category for candidates without a known category
    """

    max_file_bytes: int = 10 * 1024 * 1024
    max_transactions: int = 1000
    chunk_size: int = 100
    description_max_length: int = 100
    duplicate_match_length: int = 20
    fallback_format: BankFormat = BankFormat.ING
    default_category: str = "other"

    @classmethod
    def from_env(cls) -> "ImportSettings":
        """Build settings, overriding limits from FINWISE_* environment variables."""
        defaults = cls()
        return cls(
            max_file_bytes=_env_int("FINWISE_MAX_FILE_BYTES", defaults.max_file_bytes),
            max_transactions=_env_int("FINWISE_MAX_TRANSACTIONS", defaults.max_transactions),
            chunk_size=_env_int("FINWISE_CHUNK_SIZE", defaults.chunk_size),
        )
