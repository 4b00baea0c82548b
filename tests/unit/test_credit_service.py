"""Unit tests for CreditService rules: pricing, expiry, usage and adjustments."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import InsufficientCreditsError, NotFoundError, ValidationError
from classpass.models.credit import StudentCredit, CreditAdjustment
from classpass.models.enums import AdjustmentType, CreditStatus, UserRole, ValidityType
from classpass.models.user import User
from classpass.schemas.credit import AdjustmentRequest
from classpass.services.credit_service import CreditService


def _credit(total=12, used=0, status=CreditStatus.ACTIVE, expiry=None):
    return StudentCredit(
        id=uuid4(),
        school_id=uuid4(),
        student_id=uuid4(),
        total_credits=total,
        used_credits=used,
        remaining_credits=total - used,
        status=status,
        has_expiry=expiry is not None,
        expiry_date=expiry,
        student_name="Somchai Test",
        package_name="10 sessions",
    )


# ---------------------------------------------------------------------------
# Pricing and expiry
# ---------------------------------------------------------------------------

def test_final_price_applies_discount():
    assert CreditService.final_price(Decimal("3000.00"), Decimal("200.00")) == Decimal("2800.00")


def test_final_price_never_negative():
    assert CreditService.final_price(Decimal("100.00"), Decimal("150.00")) == Decimal("0")


def test_expiry_months_clamps_to_month_end():
    assert CreditService.calculate_expiry_date(date(2025, 1, 31), ValidityType.MONTHS, 1) == date(2025, 2, 28)


def test_expiry_days():
    assert CreditService.calculate_expiry_date(date(2025, 1, 1), ValidityType.DAYS, 30) == date(2025, 1, 31)


def test_unlimited_has_no_expiry():
    assert CreditService.calculate_expiry_date(date(2025, 1, 1), ValidityType.UNLIMITED, None) is None


def test_days_until_expiry():
    today = date(2025, 3, 1)
    assert CreditService.days_until_expiry(date(2025, 3, 11), today) == 10
    assert CreditService.days_until_expiry(date(2025, 2, 27), today) == -2
    assert CreditService.days_until_expiry(None, today) is None


def test_is_expired_only_after_expiry_day():
    today = date(2025, 3, 1)
    assert not CreditService.is_expired(_credit(expiry=today), today)
    assert CreditService.is_expired(_credit(expiry=date(2025, 2, 28)), today)
    assert not CreditService.is_expired(_credit(), today)


def test_receipt_number_format():
    number = CreditService.generate_receipt_number(datetime(2025, 7, 4, 10, 0))
    assert number.startswith("RCP202507")
    assert len(number) == 13
    assert number[9:].isdigit()


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------

def test_consume_deducts_and_depletes():
    credit = _credit(total=2, used=1)
    before, after = CreditService.consume(credit, 1)
    assert (before, after) == (1, 0)
    assert credit.used_credits == 2
    assert credit.status == CreditStatus.DEPLETED
    assert credit.last_used_date is not None


def test_consume_more_than_remaining_fails():
    credit = _credit(total=2, used=1)
    with pytest.raises(InsufficientCreditsError):
        CreditService.consume(credit, 2)
    assert credit.remaining_credits == 1


def test_consume_rejects_non_positive_amount():
    with pytest.raises(ValidationError):
        CreditService.consume(_credit(), 0)


def test_refund_reactivates_depleted_credit():
    credit = _credit(total=1, used=1, status=CreditStatus.DEPLETED)
    CreditService.refund(credit, 1)
    assert credit.remaining_credits == 1
    assert credit.used_credits == 0
    assert credit.status == CreditStatus.ACTIVE


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "adjustment_type, amount, expected",
    [
        (AdjustmentType.ADD, 3, 8),
        (AdjustmentType.SUBTRACT, 3, 2),
        (AdjustmentType.SUBTRACT, 9, 0),
        (AdjustmentType.SET, 0, 0),
        (AdjustmentType.SET, 20, 20),
    ],
)
def test_calculate_adjusted_credits(adjustment_type, amount, expected):
    assert CreditService.calculate_adjusted_credits(5, adjustment_type, amount) == expected


def test_adjustment_request_requires_positive_amount_except_set():
    with pytest.raises(ValueError):
        AdjustmentRequest(adjustment_type=AdjustmentType.ADD, amount=0, reason="typo")
    request = AdjustmentRequest(adjustment_type=AdjustmentType.SET, amount=0, reason="reset")
    assert request.amount == 0


def test_adjustment_request_rejects_blank_reason():
    with pytest.raises(ValueError):
        AdjustmentRequest(adjustment_type=AdjustmentType.ADD, amount=1, reason="   ")


@pytest.mark.asyncio
async def test_adjust_credits_records_audit_trail():
    db = AsyncMock(spec=AsyncSession)
    credit = _credit(total=10, used=4)
    admin = User(id=uuid4(), display_name="Olivia Owner", role=UserRole.OWNER)
    request = AdjustmentRequest(adjustment_type=AdjustmentType.SUBTRACT, amount=6, reason=" make-up class ")

    with patch(
        "classpass.services.credit_service.CreditService.get_credit", new_callable=AsyncMock
    ) as mock_get:
        mock_get.return_value = credit
        updated, adjustment = await CreditService.adjust_credits(
            db, credit.school_id, credit.id, request, admin
        )

    assert updated.remaining_credits == 0
    assert updated.used_credits == 10
    assert updated.status == CreditStatus.DEPLETED
    assert updated.last_adjusted_by == admin.id
    assert isinstance(adjustment, CreditAdjustment)
    assert adjustment.credits_before == 6
    assert adjustment.credits_after == 0
    assert adjustment.reason == "make-up class"
    assert adjustment.adjusted_by_role == UserRole.OWNER
    db.add.assert_called_once_with(adjustment)
    assert db.commit.called


@pytest.mark.asyncio
async def test_adjust_missing_credit():
    db = AsyncMock(spec=AsyncSession)
    request = AdjustmentRequest(adjustment_type=AdjustmentType.ADD, amount=1, reason="gift")
    with patch(
        "classpass.services.credit_service.CreditService.get_credit", new_callable=AsyncMock
    ) as mock_get:
        mock_get.return_value = None
        with pytest.raises(NotFoundError):
            await CreditService.adjust_credits(db, uuid4(), uuid4(), request, User(id=uuid4()))
    assert not db.commit.called
