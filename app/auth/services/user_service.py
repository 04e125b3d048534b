import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser
from app.auth.models.user_profile import UserProfile, UserRole
from app.auth.repository import ProfileRepository
from app.auth.services.identity_provider import IdentityProvider
from app.core.constants import MIN_PASSWORD_LENGTH
from app.core.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    async def create_user(
        db: Session,
        provider: IdentityProvider,
        email: str,
        password: str,
        full_name: str,
        role: UserRole,
    ) -> UserProfile:
        """Create a provider account and its profile.

        The provider account is deleted again when the profile insert fails.
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                field="password",
            )

        profiles = ProfileRepository(db)
        if profiles.find_by_email(email):
            raise ConflictError("Email is already registered", resource="user")

        account = await provider.admin_create_user(email, password)

        try:
            profile = profiles.create(
                id=account.id,
                email=email,
                full_name=full_name,
                role=role,
                active=True,
            )
        except SQLAlchemyError as e:
            logger.error("Profile insert failed for %s, removing provider account: %s", email, e)
            try:
                await provider.admin_delete_user(account.id)
            except AppError as cleanup_error:
                logger.error(
                    "Could not remove orphaned provider account %s: %s",
                    account.id,
                    cleanup_error.message,
                )
            raise StoreError("Could not create user profile", operation="create_profile") from e

        logger.info("Created %s account %s", role.value, profile.id)
        return profile

    @staticmethod
    async def delete_user(
        db: Session,
        provider: IdentityProvider,
        user_id: UUID,
        current_user: CurrentUser,
        delete_profile: bool = False,
    ) -> None:
        """Delete the provider account, and the profile row when asked to."""
        if user_id == current_user.id:
            raise ValidationError("You cannot delete your own account", field="userId")

        await provider.admin_delete_user(user_id)

        if delete_profile:
            profiles = ProfileRepository(db)
            profile = profiles.get_by_id(user_id)
            if profile is not None:
                try:
                    profiles.delete(profile)
                except SQLAlchemyError as e:
                    logger.error("Provider account %s deleted but profile remains: %s", user_id, e)
                    raise StoreError(
                        "Could not delete user profile", operation="delete_profile"
                    ) from e

        logger.info("Deleted account %s (profile removed: %s)", user_id, delete_profile)

    @staticmethod
    def update_user(
        db: Session,
        user_id: UUID,
        full_name: str | None = None,
        active: bool | None = None,
    ) -> UserProfile:
        profiles = ProfileRepository(db)
        profile = profiles.get_by_id(user_id)
        if profile is None:
            raise NotFoundError("User not found", resource="user")

        changes: dict[str, object] = {}
        if full_name is not None:
            changes["full_name"] = full_name
        if active is not None:
            changes["active"] = active
        return profiles.update(profile, **changes)
