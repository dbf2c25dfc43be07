from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gym_locker.database import Base


LOCKER_AVAILABLE = "AVAILABLE"
LOCKER_OCCUPIED = "OCCUPIED"
PAYMENT_COMPLETED = "COMPLETED"
PAYMENT_CANCELLED = "CANCELLED"


class Locker(Base):
    __tablename__ = "lockers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(120))
    monthly_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=LOCKER_AVAILABLE, nullable=False)

    member_id: Mapped[Optional[str]] = mapped_column(String(40))
    member_name: Mapped[Optional[str]] = mapped_column(String(120))
    # YYYY-MM-DD strings, same format the pricing helpers produce.
    start_date: Mapped[Optional[str]] = mapped_column(String(10))
    end_date: Mapped[Optional[str]] = mapped_column(String(10))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    payments: Mapped[list["LockerPayment"]] = relationship(back_populates="locker")


class LockerPayment(Base):
    __tablename__ = "locker_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    locker_id: Mapped[int] = mapped_column(ForeignKey("lockers.id"), nullable=False)
    member_id: Mapped[str] = mapped_column(String(40), nullable=False)
    member_name: Mapped[Optional[str]] = mapped_column(String(120))

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    original_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_rate: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    discount_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)

    months: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    end_date: Mapped[str] = mapped_column(String(10), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default=PAYMENT_COMPLETED, nullable=False)
    cancel_reason: Mapped[Optional[str]] = mapped_column(Text)
    cancel_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    locker: Mapped[Locker] = relationship(back_populates="payments")


class Payment(Base):
    """General payment ledger shared with membership payments."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String(40), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="locker", nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default=PAYMENT_COMPLETED, nullable=False)
