"""User domain service."""

from typing import Optional
from finwise.database.base import Database
from finwise.domain.entities import User as UserEntity
from finwise.domain.errors import NotFoundError, Unauthorized, ValidationError, user_not_found


class UserService:
    """Service for managing users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, email: str) -> int:
        """Create a new user.

        Args:
            email: User email address

        Returns:
            User ID

        Raises:
            ValidationError: If email is empty or already registered
        """
        email = email.strip().lower() if email else ""
        if not email:
            raise ValidationError("Email is required")
        if self.db.get_user_by_email(email) is not None:
            raise ValidationError(f"User with email '{email}' already exists")
        return self.db.create_user(email=email)

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity or None if not found
        """
        return self.db.get_user(user_id)

    def get_user_or_raise(self, user_id: int) -> UserEntity:
        """Get user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def list_users(self) -> list[UserEntity]:
        """List all users."""
        return self.db.list_users()

    def require_user(self, user_id) -> UserEntity:
        """Resolve the user a request acts for.

        Args:
            user_id: User ID as int or numeric string

        Returns:
            User entity

        Raises:
            Unauthorized: If the ID is missing, malformed or unknown
        """
        if user_id is None or isinstance(user_id, bool) or user_id == "":
            raise Unauthorized("Authentication required")
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            raise Unauthorized("Authentication required")

        user = self.db.get_user(user_id)
        if user is None:
            raise Unauthorized(user_not_found(user_id))
        return user
