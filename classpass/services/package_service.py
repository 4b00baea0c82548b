"""Credit Package Service"""

import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Dict, Any, Iterable
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.core.exceptions import NotFoundError, ValidationError
from classpass.core.logging import get_logger
from classpass.models.package import CreditPackage
from classpass.models.credit import StudentCredit
from classpass.models.enums import ValidityType, PackageStatus
from classpass.schemas.package import PackageCreate, PackageUpdate, PackageOrderItem

logger = get_logger(__name__)

CENT = Decimal("0.01")


class PackageService:
    """Service layer for credit packages"""

    @staticmethod
    def validity_description(validity_type: ValidityType, validity_value: Optional[int]) -> str:
        if validity_type == ValidityType.UNLIMITED:
            return "No expiry"
        unit = "month" if validity_type == ValidityType.MONTHS else "day"
        return f"{validity_value} {unit}{'' if validity_value == 1 else 's'}"

    @staticmethod
    def calculate_derived_fields(
        credits: int,
        bonus_credits: int,
        price: Decimal,
        validity_type: ValidityType,
        validity_value: Optional[int],
    ) -> Dict[str, Any]:
        """
        total = credits + bonus; price per credit is spread over the bonus too.

        Returns:
            dict with total_credits_with_bonus, price_per_credit, validity_description
        """
        total = credits + (bonus_credits or 0)
        price_per_credit = (
            (Decimal(price) / total).quantize(CENT, rounding=ROUND_HALF_UP) if total > 0 else Decimal("0")
        )
        return {
            "total_credits_with_bonus": total,
            "price_per_credit": price_per_credit,
            "validity_description": PackageService.validity_description(validity_type, validity_value),
        }

    @staticmethod
    def is_usable_for_course(item, course_id: UUID) -> bool:
        """
        Whether a package (or a credit that copied its targeting) can pay for course_id.

        A universal item fits every course. Otherwise a non-empty applicable list
        decides, and items created before multi-course support fall back to their
        single course_id.
        """
        if item.is_universal:
            return True
        if item.applicable_course_ids:
            return course_id in item.applicable_course_ids
        return item.course_id is not None and item.course_id == course_id

    @staticmethod
    def check_package_rules(package) -> None:
        """
        Rules a saved package must keep after any partial update.

        Raises:
            ValidationError: no course targeting, or a months/days validity without a value
        """
        if not package.is_universal and not package.applicable_course_ids and not package.course_id:
            raise ValidationError(
                "Select at least one course or mark the package universal",
                code="PACKAGE_TARGET_REQUIRED",
            )
        if package.validity_type != ValidityType.UNLIMITED and not package.validity_value:
            raise ValidationError(
                "validity_value is required for months/days validity",
                code="VALIDITY_VALUE_REQUIRED",
            )

    @staticmethod
    def generate_package_code() -> str:
        """PKG + last six digits of the epoch millisecond clock"""
        return f"PKG{str(int(time.time() * 1000))[-6:]}"

    @staticmethod
    async def get_package(db: AsyncSession, school_id: UUID, package_id: UUID) -> Optional[CreditPackage]:
        result = await db.execute(
            select(CreditPackage).where(
                CreditPackage.id == package_id,
                CreditPackage.school_id == school_id,
                CreditPackage.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_packages(
        db: AsyncSession, school_id: UUID, include_inactive: bool = False
    ) -> List[CreditPackage]:
        query = select(CreditPackage).where(
            CreditPackage.school_id == school_id, CreditPackage.is_deleted.is_(False)
        )
        if not include_inactive:
            query = query.where(CreditPackage.status == PackageStatus.ACTIVE)
        result = await db.execute(query.order_by(CreditPackage.display_order, CreditPackage.created_at))
        return list(result.scalars().all())

    @staticmethod
    async def get_packages_for_courses(
        db: AsyncSession, school_id: UUID, course_ids: Iterable[UUID]
    ) -> List[CreditPackage]:
        """Active packages usable for at least one of the given courses"""
        course_ids = list(course_ids)
        packages = await PackageService.list_packages(db, school_id)
        return [
            p for p in packages
            if any(PackageService.is_usable_for_course(p, cid) for cid in course_ids)
        ]

    @staticmethod
    async def create_package(
        db: AsyncSession, school_id: UUID, package_in: PackageCreate
    ) -> CreditPackage:
        data = package_in.model_dump()
        if package_in.validity_type == ValidityType.UNLIMITED:
            data["validity_value"] = None
        if package_in.is_universal:
            data["applicable_course_ids"] = []
        elif not data["applicable_course_ids"] and data["course_id"]:
            data["applicable_course_ids"] = [data["course_id"]]

        package = CreditPackage(
            school_id=school_id,
            code=PackageService.generate_package_code(),
            status=PackageStatus.ACTIVE,
            is_active=True,
            **PackageService.calculate_derived_fields(
                package_in.credits,
                package_in.bonus_credits,
                package_in.price,
                package_in.validity_type,
                data["validity_value"],
            ),
            **data,
        )
        db.add(package)
        await db.commit()
        await db.refresh(package)
        logger.info("Package created", extra={"school_id": str(school_id), "code": package.code})
        return package

    @staticmethod
    async def update_package(
        db: AsyncSession, school_id: UUID, package_id: UUID, package_update: PackageUpdate
    ) -> Optional[CreditPackage]:
        """Apply changes and recompute the derived pricing/validity fields"""
        package = await PackageService.get_package(db, school_id, package_id)
        if not package:
            return None

        data = CreditPackage.writable_changes(package_update.model_dump(exclude_unset=True))
        for field, value in data.items():
            setattr(package, field, value)
        if package.validity_type == ValidityType.UNLIMITED:
            package.validity_value = None
        PackageService.check_package_rules(package)
        if "status" in data:
            package.is_active = package.status == PackageStatus.ACTIVE

        for field, value in PackageService.calculate_derived_fields(
            package.credits,
            package.bonus_credits,
            package.price,
            package.validity_type,
            package.validity_value,
        ).items():
            setattr(package, field, value)

        await db.commit()
        await db.refresh(package)
        return package

    @staticmethod
    async def delete_package(db: AsyncSession, school_id: UUID, package_id: UUID) -> bool:
        """Soft delete. Credits already sold keep working."""
        package = await PackageService.get_package(db, school_id, package_id)
        if not package:
            return False
        package.status = PackageStatus.INACTIVE
        package.is_active = False
        package.soft_delete()
        await db.commit()
        logger.info("Package deleted", extra={"package_id": str(package_id)})
        return True

    @staticmethod
    async def update_package_order(
        db: AsyncSession, school_id: UUID, items: List[PackageOrderItem]
    ) -> None:
        ids = [item.id for item in items]
        result = await db.execute(
            select(CreditPackage).where(
                CreditPackage.school_id == school_id, CreditPackage.id.in_(ids)
            )
        )
        packages = {p.id: p for p in result.scalars().all()}
        missing = [str(i) for i in ids if i not in packages]
        if missing:
            raise NotFoundError(f"Packages not found: {', '.join(missing)}")
        for item in items:
            packages[item.id].display_order = item.display_order
        await db.commit()

    @staticmethod
    async def migrate_legacy_targeting(db: AsyncSession, school_id: Optional[UUID] = None) -> Dict[str, int]:
        """
        Move single-course packages to the multi-course fields.

        Packages that already have an applicable list or are universal are skipped.
        Student credits then copy targeting from their package, falling back to
        their own course_id. Commits every DELETE_BATCH_SIZE rows.
        """
        batch_size = settings.DELETE_BATCH_SIZE
        query = select(CreditPackage)
        if school_id:
            query = query.where(CreditPackage.school_id == school_id)
        packages = list((await db.execute(query)).scalars().all())

        migrated = skipped = 0
        for package in packages:
            if package.is_universal or package.applicable_course_ids or not package.course_id:
                skipped += 1
                continue
            package.applicable_course_ids = [package.course_id]
            package.is_universal = False
            migrated += 1
            if migrated % batch_size == 0:
                await db.commit()
        await db.commit()

        by_id = {p.id: p for p in packages}
        credit_query = select(StudentCredit).where(
            StudentCredit.is_universal.is_(False),
            func.coalesce(func.cardinality(StudentCredit.applicable_course_ids), 0) == 0,
        )
        if school_id:
            credit_query = credit_query.where(StudentCredit.school_id == school_id)
        credits = list((await db.execute(credit_query)).scalars().all())

        credits_migrated = 0
        for credit in credits:
            package = by_id.get(credit.package_id)
            if package and (package.is_universal or package.applicable_course_ids):
                credit.is_universal = package.is_universal
                credit.applicable_course_ids = list(package.applicable_course_ids or [])
            elif credit.course_id:
                credit.applicable_course_ids = [credit.course_id]
            else:
                continue
            credits_migrated += 1
            if credits_migrated % batch_size == 0:
                await db.commit()
        await db.commit()

        logger.info(
            "Package targeting migrated",
            extra={"packages": migrated, "skipped": skipped, "credits": credits_migrated},
        )
        return {
            "packages_migrated": migrated,
            "packages_skipped": skipped,
            "credits_migrated": credits_migrated,
        }
