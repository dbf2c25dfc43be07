"""Formatting helpers for amounts and dates shown to staff."""
from __future__ import annotations

from gym_locker.services.rental_period import DateLike, parse_ymd


def format_number(value: object) -> str:
    try:
        amount = int(round(float(value or 0)))
    except (TypeError, ValueError):
        amount = 0
    return f"{amount:,}"


def format_won(value: object) -> str:
    return f"{format_number(value)}원"


def format_date_korean(value: DateLike) -> str:
    parsed = parse_ymd(value)
    return f"{parsed.year}년 {parsed.month}월 {parsed.day}일"


def payment_history_note(locker_number: str, months: int, start_date: DateLike, end_date: DateLike) -> str:
    return (
        f"락커 {locker_number} {months}개월 사용 "
        f"({format_date_korean(start_date)} ~ {format_date_korean(end_date)})"
    )


def ledger_description(locker_number: str, months: int) -> str:
    return f"락커 {locker_number} {months}개월 사용료"
