"""Field-level validation of a locker payment before it is submitted."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from gym_locker.config import MAX_RENTAL_MONTHS, MIN_RENTAL_MONTHS
from gym_locker.services.rental_period import DateLike, parse_ymd, today_local


PAYMENT_METHODS = ("cash", "card", "transfer", "other")

VALIDATION_MESSAGES = {
    "MONTHS_MIN": f"최소 {MIN_RENTAL_MONTHS}개월 이상 선택해주세요",
    "MONTHS_MAX": f"최대 {MAX_RENTAL_MONTHS}개월까지 선택 가능합니다",
    "START_DATE_REQUIRED": "시작일을 선택해주세요",
    "START_DATE_PAST": "시작일은 오늘 이후여야 합니다",
    "PAYMENT_METHOD_REQUIRED": "결제 방법을 선택해주세요",
    "AMOUNT_MIN": "결제 금액은 0원보다 커야 합니다",
}


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    field_errors: tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.field_errors

    @property
    def errors(self) -> dict[str, str]:
        return {error.field: error.message for error in self.field_errors}


@dataclass
class PaymentValidationData:
    months: Optional[int]
    payment_method: Optional[str]
    start_date: Optional[DateLike]
    amount: Optional[int]


def validate_payment_data(data: PaymentValidationData, today: Optional[date] = None) -> ValidationResult:
    """Check every field and report all failures together.

    ``today`` is the business date the start date is compared against; it
    defaults to :func:`today_local`. A start date equal to today is allowed.
    Malformed start dates raise ``ValueError``.
    """
    if today is None:
        today = today_local()
    errors: list[FieldError] = []

    if not data.months or data.months < MIN_RENTAL_MONTHS:
        errors.append(FieldError("months", VALIDATION_MESSAGES["MONTHS_MIN"]))
    elif data.months > MAX_RENTAL_MONTHS:
        errors.append(FieldError("months", VALIDATION_MESSAGES["MONTHS_MAX"]))

    if not data.payment_method:
        errors.append(FieldError("payment_method", VALIDATION_MESSAGES["PAYMENT_METHOD_REQUIRED"]))

    if not data.start_date:
        errors.append(FieldError("start_date", VALIDATION_MESSAGES["START_DATE_REQUIRED"]))
    elif parse_ymd(data.start_date) < today:
        errors.append(FieldError("start_date", VALIDATION_MESSAGES["START_DATE_PAST"]))

    if not data.amount or data.amount <= 0:
        errors.append(FieldError("amount", VALIDATION_MESSAGES["AMOUNT_MIN"]))

    return ValidationResult(field_errors=tuple(errors))
