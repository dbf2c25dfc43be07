"""Recording locker payments: submission, history, period updates and cancellation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gym_locker.models import (
    LOCKER_AVAILABLE,
    LOCKER_OCCUPIED,
    PAYMENT_CANCELLED,
    PAYMENT_COMPLETED,
    Locker,
    LockerPayment,
    Payment,
)
from gym_locker.services.pricing import PaymentCalculation, calculate_full_payment
from gym_locker.services.rental_period import DateLike, date_to_ymd, parse_ymd
from gym_locker.services.validation import PaymentValidationData, validate_payment_data
from gym_locker.utils import ledger_description, payment_history_note


logger = logging.getLogger(__name__)

MESSAGES = {
    "MISSING_FIELDS": "필수 결제 정보가 누락되었습니다",
    "VALIDATION_ERROR": "입력 정보를 확인해주세요",
    "LOCKER_NOT_FOUND": "락커를 찾을 수 없습니다",
    "PAYMENT_NOT_FOUND": "결제 내역을 찾을 수 없습니다",
    "ALREADY_CANCELLED": "이미 취소된 결제입니다",
    "PAYMENT_ERROR": "결제 처리 중 오류가 발생했습니다",
    "PERIOD_ERROR": "사용 기간 업데이트 중 오류가 발생했습니다",
    "CANCEL_ERROR": "결제 취소 중 오류가 발생했습니다",
}


@dataclass
class LockerPaymentRecord:
    locker_id: int
    member_id: str
    member_name: str
    months: int
    start_date: str
    end_date: str
    amount: int
    original_amount: int
    discount_rate: int
    discount_amount: int
    payment_method: str
    locker_number: str = ""
    notes: Optional[str] = None
    # Start date the caller asked for; extensions store the effective start instead.
    requested_start_date: Optional[str] = None

    @classmethod
    def from_calculation(
        cls,
        calculation: PaymentCalculation,
        *,
        locker_id: int,
        member_id: str,
        member_name: str,
        months: int,
        payment_method: str,
        locker_number: str = "",
        notes: Optional[str] = None,
        requested_start_date: Optional[DateLike] = None,
    ) -> "LockerPaymentRecord":
        return cls(
            locker_id=locker_id,
            member_id=member_id,
            member_name=member_name,
            locker_number=locker_number,
            months=months,
            start_date=calculation.start_date,
            end_date=calculation.end_date,
            amount=calculation.final_amount,
            original_amount=calculation.original_amount,
            discount_rate=calculation.discount_rate,
            discount_amount=calculation.discount_amount,
            payment_method=payment_method,
            notes=notes,
            requested_start_date=(
                date_to_ymd(parse_ymd(requested_start_date)) if requested_start_date else calculation.start_date
            ),
        )


@dataclass
class PaymentOutcome:
    success: bool
    payment_id: Optional[int] = None
    locker_id: Optional[int] = None
    amount: Optional[int] = None
    new_end_date: Optional[str] = None
    refund_amount: Optional[int] = None
    cancel_date: Optional[datetime] = None
    error: Optional[str] = None
    field_errors: dict[str, str] = field(default_factory=dict)


def quote_locker_payment(
    db: Session,
    locker_id: int,
    months: int,
    start_date: DateLike,
    is_extension: bool = False,
) -> Optional[PaymentCalculation]:
    locker = db.get(Locker, locker_id)
    if locker is None:
        return None
    return calculate_full_payment(
        months,
        locker.monthly_fee,
        start_date,
        is_extension=is_extension,
        current_end_date=locker.end_date,
    )


def submit_locker_payment(
    db: Session,
    record: LockerPaymentRecord,
    *,
    today: Optional[date] = None,
) -> PaymentOutcome:
    if not record.locker_id or not record.member_id or not record.amount:
        return PaymentOutcome(success=False, error=MESSAGES["MISSING_FIELDS"])

    validation = validate_payment_data(
        PaymentValidationData(
            months=record.months,
            payment_method=record.payment_method,
            start_date=record.requested_start_date or record.start_date,
            amount=record.amount,
        ),
        today=today,
    )
    if not validation.is_valid:
        return PaymentOutcome(
            success=False,
            error=MESSAGES["VALIDATION_ERROR"],
            field_errors=validation.errors,
        )

    locker = db.get(Locker, record.locker_id)
    if locker is None:
        return PaymentOutcome(success=False, error=MESSAGES["LOCKER_NOT_FOUND"])

    locker_number = record.locker_number or locker.number
    start_date = date_to_ymd(parse_ymd(record.start_date))
    end_date = date_to_ymd(parse_ymd(record.end_date))

    try:
        payment = LockerPayment(
            locker_id=locker.id,
            member_id=record.member_id,
            member_name=record.member_name,
            amount=record.amount,
            original_amount=record.original_amount,
            discount_rate=record.discount_rate,
            discount_amount=record.discount_amount,
            payment_method=record.payment_method,
            months=record.months,
            start_date=start_date,
            end_date=end_date,
            notes=record.notes or payment_history_note(locker_number, record.months, start_date, end_date),
            status=PAYMENT_COMPLETED,
        )
        db.add(payment)

        locker.member_id = record.member_id
        locker.member_name = record.member_name
        locker.start_date = start_date
        locker.end_date = end_date
        locker.status = LOCKER_OCCUPIED

        db.add(
            Payment(
                member_id=record.member_id,
                amount=record.amount,
                payment_method=record.payment_method,
                type="locker",
                description=ledger_description(locker_number, record.months),
                status=PAYMENT_COMPLETED,
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Locker payment failed: locker=%s member=%s", record.locker_id, record.member_id)
        return PaymentOutcome(success=False, error=MESSAGES["PAYMENT_ERROR"])

    logger.info(
        "Locker payment recorded: payment=%s locker=%s months=%s amount=%s period=%s~%s",
        payment.id,
        locker.number,
        record.months,
        record.amount,
        start_date,
        end_date,
    )
    return PaymentOutcome(
        success=True,
        payment_id=payment.id,
        locker_id=locker.id,
        amount=record.amount,
        new_end_date=end_date,
    )


def get_locker_payment_history(db: Session, locker_id: int, limit: Optional[int] = None) -> list[LockerPayment]:
    query = (
        db.query(LockerPayment)
        .filter(LockerPayment.locker_id == locker_id)
        .order_by(LockerPayment.payment_date.desc(), LockerPayment.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def update_locker_usage_period(db: Session, locker_id: int, new_end_date: DateLike) -> PaymentOutcome:
    locker = db.get(Locker, locker_id)
    if locker is None:
        return PaymentOutcome(success=False, error=MESSAGES["LOCKER_NOT_FOUND"])

    end_date = date_to_ymd(parse_ymd(new_end_date))
    try:
        locker.end_date = end_date
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Usage period update failed: locker=%s", locker_id)
        return PaymentOutcome(success=False, error=MESSAGES["PERIOD_ERROR"])

    logger.info("Locker usage period updated: locker=%s end_date=%s", locker.number, end_date)
    return PaymentOutcome(success=True, locker_id=locker.id, new_end_date=end_date)


def _previous_period_payment(db: Session, payment: LockerPayment) -> Optional[LockerPayment]:
    return (
        db.query(LockerPayment)
        .filter(
            LockerPayment.locker_id == payment.locker_id,
            LockerPayment.id != payment.id,
            LockerPayment.status == PAYMENT_COMPLETED,
            LockerPayment.end_date == payment.start_date,
        )
        .order_by(LockerPayment.id.desc())
        .first()
    )


def cancel_locker_payment(
    db: Session,
    payment_id: int,
    reason: str,
    *,
    now: Optional[datetime] = None,
) -> PaymentOutcome:
    """Cancel a payment and roll the locker back.

    When the cancelled payment started where an earlier, still completed
    payment ended, the locker goes back to that payment's member and period;
    otherwise the locker is released.
    """
    payment = db.get(LockerPayment, payment_id)
    if payment is None:
        return PaymentOutcome(success=False, error=MESSAGES["PAYMENT_NOT_FOUND"])
    if payment.status == PAYMENT_CANCELLED:
        return PaymentOutcome(success=False, error=MESSAGES["ALREADY_CANCELLED"])

    cancel_date = now or datetime.now(timezone.utc)
    try:
        payment.status = PAYMENT_CANCELLED
        payment.cancel_reason = reason.strip()
        payment.cancel_date = cancel_date

        locker = payment.locker
        if locker.end_date == payment.end_date:
            previous = _previous_period_payment(db, payment)
            if previous is not None:
                locker.member_id = previous.member_id
                locker.member_name = previous.member_name
                locker.start_date = previous.start_date
                locker.end_date = previous.end_date
            else:
                locker.member_id = None
                locker.member_name = None
                locker.start_date = None
                locker.end_date = None
                locker.status = LOCKER_AVAILABLE
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Locker payment cancellation failed: payment=%s", payment_id)
        return PaymentOutcome(success=False, error=MESSAGES["CANCEL_ERROR"])

    logger.info("Locker payment cancelled: payment=%s refund=%s", payment.id, payment.amount)
    return PaymentOutcome(
        success=True,
        payment_id=payment.id,
        locker_id=payment.locker_id,
        refund_amount=payment.amount,
        cancel_date=cancel_date,
    )
