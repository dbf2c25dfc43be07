import logging
import traceback as _tb
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from gym_locker.config import DEFAULT_MONTHLY_FEE, LOG_LEVEL, MAX_RENTAL_MONTHS, MIN_RENTAL_MONTHS
from gym_locker.database import get_db, init_db
from gym_locker.display import build_month_options, display_payment_method
from gym_locker.models import Locker, LockerPayment
from gym_locker.schemas import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    DiscountPolicyResponse,
    LockerPaymentHistoryItem,
    LockerPaymentRequest,
    LockerPaymentResponse,
    PaymentCalculationResponse,
    UsagePeriodRequest,
    UsagePeriodResponse,
)
from gym_locker.services.locker_payment import (
    MESSAGES,
    LockerPaymentRecord,
    cancel_locker_payment,
    get_locker_payment_history,
    quote_locker_payment,
    submit_locker_payment,
    update_locker_usage_period,
)
from gym_locker.services.pricing import (
    DISCOUNT_POLICY,
    PaymentCalculation,
    calculate_full_payment,
    discount_description,
)
from gym_locker.services.rental_period import current_date
from gym_locker.services.validation import PAYMENT_METHODS


logger = logging.getLogger("gym-locker")

app = FastAPI(title="Gym Locker Billing")


@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s:\n%s", request.method, request.url.path, _tb.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc), "type": type(exc).__name__})


@app.on_event("startup")
def on_startup() -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_db()
    logger.info("Database ready")


def validate_months(months: int) -> None:
    if months < MIN_RENTAL_MONTHS or months > MAX_RENTAL_MONTHS:
        raise HTTPException(
            status_code=400,
            detail=f"Months must be {MIN_RENTAL_MONTHS}~{MAX_RENTAL_MONTHS}.",
        )


def calculation_to_response(calculation: PaymentCalculation, months: int) -> PaymentCalculationResponse:
    return PaymentCalculationResponse(
        original_amount=calculation.original_amount,
        discount_rate=calculation.discount_rate,
        discount_amount=calculation.discount_amount,
        final_amount=calculation.final_amount,
        start_date=calculation.start_date,
        end_date=calculation.end_date,
        discount_description=discount_description(months),
    )


def get_locker_or_404(db: Session, locker_id: int) -> Locker:
    locker = db.get(Locker, locker_id)
    if locker is None:
        raise HTTPException(status_code=404, detail="Locker not found")
    return locker


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/discount-policy", response_model=DiscountPolicyResponse)
def discount_policy() -> DiscountPolicyResponse:
    return DiscountPolicyResponse(
        tiers=[{"min_months": tier.min_months, "rate": tier.rate} for tier in DISCOUNT_POLICY],
        month_options=build_month_options(),
        default_monthly_fee=DEFAULT_MONTHLY_FEE,
    )


@app.get("/api/lockers/payment-preview", response_model=PaymentCalculationResponse)
def payment_preview(
    months: int,
    monthly_fee: int = DEFAULT_MONTHLY_FEE,
    start_date: Optional[str] = None,
    is_extension: bool = False,
    current_end_date: Optional[str] = None,
) -> PaymentCalculationResponse:
    validate_months(months)
    if monthly_fee < 0:
        raise HTTPException(status_code=400, detail="Monthly fee cannot be negative.")
    try:
        calculation = calculate_full_payment(
            months,
            monthly_fee,
            start_date or current_date(),
            is_extension=is_extension,
            current_end_date=current_end_date,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return calculation_to_response(calculation, months)


@app.get("/api/lockers/{locker_id}/quote", response_model=PaymentCalculationResponse)
def locker_quote(
    locker_id: int,
    months: int,
    start_date: Optional[str] = None,
    is_extension: bool = False,
    db: Session = Depends(get_db),
) -> PaymentCalculationResponse:
    validate_months(months)
    try:
        calculation = quote_locker_payment(db, locker_id, months, start_date or current_date(), is_extension)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if calculation is None:
        raise HTTPException(status_code=404, detail="Locker not found")
    return calculation_to_response(calculation, months)


@app.post(
    "/api/lockers/{locker_id}/payments",
    response_model=LockerPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_locker_payment(
    locker_id: int,
    payload: LockerPaymentRequest,
    db: Session = Depends(get_db),
) -> LockerPaymentResponse:
    locker = get_locker_or_404(db, locker_id)
    if payload.payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="Invalid payment method.")
    if not payload.member_id.strip() or not payload.member_name.strip():
        raise HTTPException(status_code=400, detail="Member id and name are required.")

    try:
        calculation = calculate_full_payment(
            payload.months,
            locker.monthly_fee,
            payload.start_date,
            is_extension=payload.is_extension,
            current_end_date=locker.end_date,
        )
        record = LockerPaymentRecord.from_calculation(
            calculation,
            locker_id=locker.id,
            member_id=payload.member_id.strip(),
            member_name=payload.member_name.strip(),
            months=payload.months,
            payment_method=payload.payment_method,
            locker_number=locker.number,
            notes=payload.notes,
            requested_start_date=payload.start_date,
        )
        outcome = submit_locker_payment(db, record)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if outcome.field_errors:
        raise HTTPException(
            status_code=422,
            detail={"message": outcome.error, "errors": outcome.field_errors},
        )
    if not outcome.success:
        code = 500 if outcome.error == MESSAGES["PAYMENT_ERROR"] else 400
        raise HTTPException(status_code=code, detail=outcome.error)

    return LockerPaymentResponse(
        payment_id=outcome.payment_id,
        locker_id=outcome.locker_id,
        amount=outcome.amount,
        new_end_date=outcome.new_end_date,
    )


@app.get("/api/lockers/{locker_id}/payments", response_model=list[LockerPaymentHistoryItem])
def locker_payment_history(
    locker_id: int,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[LockerPaymentHistoryItem]:
    get_locker_or_404(db, locker_id)
    items = []
    for payment in get_locker_payment_history(db, locker_id, limit=limit):
        item = LockerPaymentHistoryItem.model_validate(payment)
        item.payment_method_label = display_payment_method(payment.payment_method)
        items.append(item)
    return items


@app.post("/api/lockers/{locker_id}/usage-period", response_model=UsagePeriodResponse)
def locker_usage_period(
    locker_id: int,
    payload: UsagePeriodRequest,
    db: Session = Depends(get_db),
) -> UsagePeriodResponse:
    try:
        outcome = update_locker_usage_period(db, locker_id, payload.new_end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not outcome.success:
        code = 404 if outcome.error == MESSAGES["LOCKER_NOT_FOUND"] else 500
        raise HTTPException(status_code=code, detail=outcome.error)
    return UsagePeriodResponse(locker_id=outcome.locker_id, end_date=outcome.new_end_date)


@app.post("/api/locker-payments/{payment_id}/cancel", response_model=CancelPaymentResponse)
def locker_payment_cancel(
    payment_id: int,
    payload: Optional[CancelPaymentRequest] = None,
    db: Session = Depends(get_db),
) -> CancelPaymentResponse:
    if db.get(LockerPayment, payment_id) is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    reason = payload.reason if payload is not None else ""
    outcome = cancel_locker_payment(db, payment_id, reason)
    if not outcome.success:
        code = 409 if outcome.error == MESSAGES["ALREADY_CANCELLED"] else 500
        raise HTTPException(status_code=code, detail=outcome.error)
    return CancelPaymentResponse(
        payment_id=outcome.payment_id,
        refund_amount=outcome.refund_amount,
        cancel_date=outcome.cancel_date,
    )
