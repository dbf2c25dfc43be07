from dataclasses import dataclass
from typing import Optional

from gym_locker.services.rental_period import DateLike, add_months, date_to_ymd, parse_ymd


@dataclass(frozen=True)
class DiscountTier:
    min_months: int
    rate: int


# Highest threshold first; the first matching tier wins.
DISCOUNT_POLICY: tuple[DiscountTier, ...] = (
    DiscountTier(min_months=12, rate=15),
    DiscountTier(min_months=6, rate=10),
    DiscountTier(min_months=3, rate=5),
)


@dataclass(frozen=True)
class PaymentCalculation:
    original_amount: int
    discount_rate: int
    discount_amount: int
    final_amount: int
    start_date: str
    end_date: str


def resolve_discount_rate(months: int) -> int:
    for tier in DISCOUNT_POLICY:
        if months >= tier.min_months:
            return tier.rate
    return 0


def discount_description(months: int) -> Optional[str]:
    discount_rate = resolve_discount_rate(months)
    if discount_rate == 0:
        return None
    return f"{months}개월 이상 사용 시 {discount_rate}% 할인 혜택!"


def calculate_full_payment(
    months: int,
    monthly_fee: int,
    start_date: DateLike,
    is_extension: bool = False,
    current_end_date: Optional[DateLike] = None,
) -> PaymentCalculation:
    original_amount = months * monthly_fee
    discount_rate = resolve_discount_rate(months)
    discount_amount = original_amount * discount_rate // 100
    final_amount = original_amount - discount_amount

    # Extensions continue from the current end date, not from the requested start.
    effective_start = start_date
    if is_extension and current_end_date:
        effective_start = current_end_date
    effective_start_ymd = date_to_ymd(parse_ymd(effective_start))

    return PaymentCalculation(
        original_amount=original_amount,
        discount_rate=discount_rate,
        discount_amount=discount_amount,
        final_amount=final_amount,
        start_date=effective_start_ymd,
        end_date=add_months(effective_start_ymd, months),
    )
