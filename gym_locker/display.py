"""Display/label helper functions for UI rendering."""
from __future__ import annotations

from typing import Optional

from gym_locker.config import MONTH_OPTIONS, POPULAR_MONTH_OPTIONS


def display_payment_method(payment_method: Optional[str]) -> str:
    if not payment_method:
        return "-"
    mapping = {
        "cash": "현금",
        "card": "카드",
        "transfer": "계좌이체",
        "other": "기타",
    }
    return mapping.get(payment_method, payment_method)


def display_locker_status(status_value: str) -> str:
    mapping = {
        "AVAILABLE": "사용가능",
        "OCCUPIED": "사용중",
    }
    return mapping.get(status_value, status_value)


def display_payment_status(status_value: str) -> str:
    mapping = {
        "COMPLETED": "결제완료",
        "CANCELLED": "결제취소",
    }
    return mapping.get(status_value, status_value)


def build_month_options() -> list[dict[str, object]]:
    """Month choices for the payment form, in display order."""
    return [
        {
            "value": months,
            "label": f"{months}개월",
            "popular": months in POPULAR_MONTH_OPTIONS,
        }
        for months in MONTH_OPTIONS
    ]
