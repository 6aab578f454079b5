"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finwise.domain.entities import (
    User,
    StoredTransaction,
)


class Database(ABC):
    """Abstract database interface for finwise."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, email: str) -> int:
        """Create a new user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: int,
        date: date,
        description: str,
        amount: Decimal,
        type: str,
        category: str,
        source: Optional[str] = None,
    ) -> int:
        """Create a stored transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Get stored transaction by ID."""
        pass

    @abstractmethod
    def find_duplicate(
        self, user_id: int, date: date, amount: Decimal, description_fragment: str
    ) -> Optional[StoredTransaction]:
        """Find a stored transaction of the user with the same date and amount
        whose description contains ``description_fragment`` (case-insensitive).
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[StoredTransaction]:
        """List a user's stored transactions, newest first."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes after a failed write."""
        pass
