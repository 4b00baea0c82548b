"""Unit tests for PackageService pricing and course targeting."""

import pytest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import ValidationError
from classpass.models.enums import PackageStatus, ValidityType
from classpass.models.credit import StudentCredit
from classpass.models.package import CreditPackage
from classpass.schemas.package import PackageUpdate
from classpass.services.package_service import PackageService


def _target(is_universal=False, applicable=None, course_id=None):
    return SimpleNamespace(
        is_universal=is_universal, applicable_course_ids=applicable, course_id=course_id
    )


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------

def test_derived_fields_spread_price_over_bonus():
    derived = PackageService.calculate_derived_fields(
        10, 2, Decimal("3000.00"), ValidityType.MONTHS, 3
    )
    assert derived["total_credits_with_bonus"] == 12
    assert derived["price_per_credit"] == Decimal("250.00")
    assert derived["validity_description"] == "3 months"


def test_derived_fields_round_half_up():
    derived = PackageService.calculate_derived_fields(
        3, 0, Decimal("100.00"), ValidityType.DAYS, 1
    )
    assert derived["price_per_credit"] == Decimal("33.33")
    assert derived["validity_description"] == "1 day"


def test_unlimited_validity_description():
    assert PackageService.validity_description(ValidityType.UNLIMITED, None) == "No expiry"
    assert PackageService.validity_description(ValidityType.DAYS, 30) == "30 days"


def test_package_code_format():
    code = PackageService.generate_package_code()
    assert code.startswith("PKG")
    assert len(code) == 9
    assert code[3:].isdigit()


# ---------------------------------------------------------------------------
# Targeting
# ---------------------------------------------------------------------------

def test_universal_package_fits_any_course():
    assert PackageService.is_usable_for_course(_target(is_universal=True), uuid4())


def test_applicable_list_decides():
    course_a, course_b = uuid4(), uuid4()
    item = _target(applicable=[course_a], course_id=course_b)
    assert PackageService.is_usable_for_course(item, course_a)
    # Non-empty list wins over the legacy column
    assert not PackageService.is_usable_for_course(item, course_b)


def test_empty_list_falls_back_to_legacy_course():
    course_id = uuid4()
    assert PackageService.is_usable_for_course(_target(applicable=[], course_id=course_id), course_id)
    assert not PackageService.is_usable_for_course(_target(applicable=[], course_id=course_id), uuid4())
    assert not PackageService.is_usable_for_course(_target(applicable=None), uuid4())


# ---------------------------------------------------------------------------
# Legacy migration
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_migrate_legacy_targeting_copies_course_id():
    db = AsyncMock(spec=AsyncSession)
    course_id = uuid4()
    legacy = CreditPackage(id=uuid4(), course_id=course_id, applicable_course_ids=[], is_universal=False)
    orphan = CreditPackage(id=uuid4(), course_id=None, applicable_course_ids=[], is_universal=False)

    credit = StudentCredit(id=uuid4(), package_id=legacy.id, course_id=course_id, is_universal=False)

    package_result = MagicMock()
    package_result.scalars.return_value.all.return_value = [legacy, orphan]
    credit_result = MagicMock()
    credit_result.scalars.return_value.all.return_value = [credit]
    db.execute.side_effect = [package_result, credit_result]

    outcome = await PackageService.migrate_legacy_targeting(db)

    assert legacy.applicable_course_ids == [course_id]
    assert orphan.applicable_course_ids == []
    assert credit.applicable_course_ids == [course_id]
    assert outcome["packages_migrated"] == 1
    assert outcome["packages_skipped"] == 1
    assert outcome["credits_migrated"] == 1
    assert db.commit.called


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------

def _saved_package(**overrides):
    fields = dict(
        id=uuid4(), school_id=uuid4(), code="PKG123456", name="Ten pack",
        is_universal=True, applicable_course_ids=[], course_id=None,
        credits=10, bonus_credits=0, total_credits_with_bonus=10,
        price=Decimal("2000.00"), price_per_credit=Decimal("200.00"),
        validity_type=ValidityType.UNLIMITED, validity_value=None,
        validity_description="No expiry", status=PackageStatus.ACTIVE, is_active=True,
    )
    fields.update(overrides)
    return CreditPackage(**fields)


async def _update(package, payload):
    db = AsyncMock(spec=AsyncSession)
    with patch(
        "classpass.services.package_service.PackageService.get_package", new_callable=AsyncMock
    ) as mock_get:
        mock_get.return_value = package
        result = await PackageService.update_package(
            db, package.school_id, package.id, PackageUpdate.model_validate(payload)
        )
    return db, result


@pytest.mark.asyncio
async def test_update_to_months_requires_validity_value():
    package = _saved_package()
    with pytest.raises(ValidationError) as exc:
        await _update(package, {"validity_type": "months"})
    assert exc.value.code == "VALIDITY_VALUE_REQUIRED"


@pytest.mark.asyncio
async def test_update_to_months_with_value_recomputes_description():
    db, package = await _update(_saved_package(), {"validity_type": "months", "validity_value": 2})
    assert package.validity_value == 2
    assert package.validity_description == "2 months"
    assert db.commit.called


@pytest.mark.asyncio
async def test_update_cannot_drop_all_targeting():
    package = _saved_package()
    with pytest.raises(ValidationError) as exc:
        await _update(package, {"is_universal": False})
    assert exc.value.code == "PACKAGE_TARGET_REQUIRED"


@pytest.mark.asyncio
async def test_update_from_universal_to_course_list():
    course_id = uuid4()
    _, package = await _update(_saved_package(), {"is_universal": False, "applicable_course_ids": [str(course_id)]})
    assert PackageService.is_usable_for_course(package, course_id)
    assert not PackageService.is_usable_for_course(package, uuid4())


@pytest.mark.asyncio
async def test_update_ignores_null_for_required_columns():
    _, package = await _update(_saved_package(), {"credits": None, "price": None, "name": None, "bonus_credits": 2})
    assert package.credits == 10
    assert package.price == Decimal("2000.00")
    assert package.name == "Ten pack"
    assert package.total_credits_with_bonus == 12
    assert package.price_per_credit == Decimal("166.67")


@pytest.mark.asyncio
async def test_update_can_clear_nullable_column():
    _, package = await _update(_saved_package(description="Old"), {"description": None})
    assert package.description is None


def test_check_package_rules_accepts_legacy_course():
    PackageService.check_package_rules(
        _saved_package(is_universal=False, course_id=uuid4(), validity_type=ValidityType.DAYS, validity_value=30)
    )
