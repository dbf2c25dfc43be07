from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentCalculationResponse(BaseModel):
    original_amount: int
    discount_rate: int
    discount_amount: int
    final_amount: int
    start_date: str
    end_date: str
    discount_description: Optional[str] = None


class DiscountTierResponse(BaseModel):
    min_months: int
    rate: int


class MonthOptionResponse(BaseModel):
    value: int
    label: str
    popular: bool


class DiscountPolicyResponse(BaseModel):
    tiers: list[DiscountTierResponse]
    month_options: list[MonthOptionResponse]
    default_monthly_fee: int


class LockerPaymentRequest(BaseModel):
    member_id: str
    member_name: str
    months: int
    start_date: str
    payment_method: str
    is_extension: bool = False
    notes: Optional[str] = None


class LockerPaymentResponse(BaseModel):
    payment_id: int
    locker_id: int
    amount: int
    new_end_date: str


class LockerPaymentHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    locker_id: int
    member_id: str
    amount: int
    original_amount: int
    discount_rate: int
    discount_amount: int
    payment_method: str
    payment_method_label: str = ""
    months: int
    start_date: str
    end_date: str
    notes: str
    payment_date: datetime
    status: str


class UsagePeriodRequest(BaseModel):
    new_end_date: str


class UsagePeriodResponse(BaseModel):
    locker_id: int
    end_date: str


class CancelPaymentRequest(BaseModel):
    reason: str = Field(default="", max_length=500)


class CancelPaymentResponse(BaseModel):
    payment_id: int
    refund_amount: int
    cancel_date: datetime
