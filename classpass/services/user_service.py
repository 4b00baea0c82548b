"""User Service - Business Logic Layer"""

from typing import Optional, List, Dict
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.core.exceptions import (
    AuthenticationError, ConflictError, ValidationError
)
from classpass.core.logging import get_logger
from classpass.core.security import get_password_hash, verify_password
from classpass.models.user import User
from classpass.models.enums import UserRole
from classpass.schemas.user import UserUpdate, ProfileUpdate, STAFF_ROLES
from classpass.utils.time import get_utc_now

logger = get_logger(__name__)


class UserService:
    """Service layer for staff accounts and authentication"""

    @staticmethod
    def build_display_name(first_name: str, last_name: str) -> str:
        return f"{first_name} {last_name}".strip()

    @staticmethod
    def validate_password(password: str) -> None:
        """Raise WEAK_PASSWORD when the password is shorter than the configured minimum."""
        if len(password or "") < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
                code="WEAK_PASSWORD",
            )

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def check_email_exists(db: AsyncSession, email: str) -> bool:
        return await UserService.get_user_by_email(db, email) is not None

    @staticmethod
    async def get_school_user(db: AsyncSession, school_id: UUID, user_id: UUID) -> Optional[User]:
        result = await db.execute(
            select(User).where(
                User.id == user_id,
                User.school_id == school_id,
                User.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        school_id: Optional[UUID] = None,
        phone: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> User:
        """
        Create a user account.

        Raises:
            ConflictError: EMAIL_ALREADY_IN_USE when the email is taken
            ValidationError: WEAK_PASSWORD
        """
        UserService.validate_password(password)
        if await UserService.check_email_exists(db, email):
            raise ConflictError("Email is already in use", code="EMAIL_ALREADY_IN_USE")

        user = User(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            display_name=UserService.build_display_name(first_name, last_name),
            phone=phone,
            role=role,
            school_id=school_id,
            is_active=True,
            created_by=created_by,
        )
        db.add(user)
        await db.flush()
        logger.info("User created", extra={"user_id": str(user.id), "role": role.value})
        return user

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
        """
        Verify credentials and stamp last_login.

        Each failure has its own code so the client can tell the user what went wrong.
        """
        user = await UserService.get_user_by_email(db, email)
        if not user:
            raise AuthenticationError("No account found for this email", code="USER_NOT_FOUND")
        if not verify_password(password, user.hashed_password):
            raise AuthenticationError("Incorrect password", code="WRONG_PASSWORD")
        if not user.is_active or user.is_deleted:
            raise AuthenticationError("This account has been disabled", code="ACCOUNT_DISABLED")

        user.last_login = get_utc_now()
        await db.commit()
        return user

    @staticmethod
    async def list_school_users(db: AsyncSession, school_id: UUID) -> List[User]:
        result = await db.execute(
            select(User)
            .where(User.school_id == school_id, User.is_deleted.is_(False))
            .order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_staff(db: AsyncSession, school_id: UUID) -> int:
        """Admins and teachers; both count against the plan's max_teachers"""
        count = await db.scalar(
            select(func.count(User.id)).where(
                User.school_id == school_id,
                User.role.in_(STAFF_ROLES),
                User.is_deleted.is_(False),
            )
        )
        return count or 0

    @staticmethod
    def _apply_names(user: User, data: dict) -> None:
        for field, value in data.items():
            setattr(user, field, value)
        if "first_name" in data or "last_name" in data:
            user.display_name = UserService.build_display_name(user.first_name, user.last_name)

    @staticmethod
    async def update_user(
        db: AsyncSession, school_id: UUID, user_id: UUID, user_update: UserUpdate
    ) -> Optional[User]:
        user = await UserService.get_school_user(db, school_id, user_id)
        if not user:
            return None
        if user.role == UserRole.OWNER and user_update.role is not None:
            raise ValidationError("The owner's role cannot be changed")
        UserService._apply_names(user, User.writable_changes(user_update.model_dump(exclude_unset=True)))
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, profile: ProfileUpdate) -> User:
        UserService._apply_names(user, User.writable_changes(profile.model_dump(exclude_unset=True)))
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def toggle_user_status(db: AsyncSession, school_id: UUID, user_id: UUID) -> Optional[User]:
        """Flip is_active. The owner cannot be disabled."""
        user = await UserService.get_school_user(db, school_id, user_id)
        if not user:
            return None
        if user.role == UserRole.OWNER:
            raise ValidationError("The school owner cannot be disabled")
        user.is_active = not user.is_active
        await db.commit()
        await db.refresh(user)
        logger.info("User status toggled", extra={"user_id": str(user_id), "is_active": user.is_active})
        return user

    @staticmethod
    async def delete_user(db: AsyncSession, school_id: UUID, user_id: UUID) -> bool:
        """Soft delete a staff account"""
        user = await UserService.get_school_user(db, school_id, user_id)
        if not user:
            return False
        if user.role == UserRole.OWNER:
            raise ValidationError("The school owner cannot be deleted")
        user.soft_delete()
        user.is_active = False
        await db.commit()
        return True

    @staticmethod
    def summarize_users(users: List[User]) -> Dict:
        """Counts by active flag and role for the staff page header"""
        by_role = {role.value: 0 for role in (UserRole.OWNER, UserRole.ADMIN, UserRole.TEACHER)}
        active = 0
        for user in users:
            if user.is_active:
                active += 1
            role = user.role.value if isinstance(user.role, UserRole) else user.role
            if role in by_role:
                by_role[role] += 1
        return {
            "total": len(users),
            "active": active,
            "inactive": len(users) - active,
            "by_role": by_role,
        }

    @staticmethod
    async def get_user_stats(db: AsyncSession, school_id: UUID) -> Dict:
        users = await UserService.list_school_users(db, school_id)
        return UserService.summarize_users(users)

    @staticmethod
    async def update_password(db: AsyncSession, user_id: UUID, new_password: str) -> bool:
        UserService.validate_password(new_password)
        user = await UserService.get_user_by_id(db, user_id)
        if not user:
            return False
        user.hashed_password = get_password_hash(new_password)
        await db.commit()
        return True

    @staticmethod
    async def change_password(
        db: AsyncSession, user: User, current_password: str, new_password: str
    ) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Incorrect password", code="WRONG_PASSWORD")
        UserService.validate_password(new_password)
        user.hashed_password = get_password_hash(new_password)
        await db.commit()
