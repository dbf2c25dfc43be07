import argparse

from gym_locker.config import DEFAULT_MONTHLY_FEE
from gym_locker.database import SessionLocal, init_db
from gym_locker.models import Locker
from gym_locker.utils import format_won


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update a locker.")
    parser.add_argument("--number", required=True, help="Locker number shown to members (e.g. A-12)")
    parser.add_argument("--location", default="", help="Where the locker is (e.g. 2F men's room)")
    parser.add_argument(
        "--monthly-fee",
        type=int,
        default=DEFAULT_MONTHLY_FEE,
        help=f"Monthly fee in won (default {DEFAULT_MONTHLY_FEE})",
    )
    parser.add_argument(
        "--update-existing",
        action="store_true",
        help="Update existing locker when the same number already exists",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    number = args.number.strip()
    location = args.location.strip() or None
    if not number:
        raise SystemExit("Locker number is required.")
    if args.monthly_fee <= 0:
        raise SystemExit("Monthly fee must be greater than 0.")

    init_db()
    db = SessionLocal()
    try:
        row = db.query(Locker).filter(Locker.number == number).first()
        if row is None:
            row = Locker(number=number, location=location, monthly_fee=args.monthly_fee)
            db.add(row)
            db.commit()
            print(f"[CREATED] number={number} fee={format_won(row.monthly_fee)}")
            return

        if not args.update_existing:
            raise SystemExit("Locker already exists. Use --update-existing to modify it.")

        row.location = location
        row.monthly_fee = args.monthly_fee
        db.commit()
        print(f"[UPDATED] number={number} fee={format_won(row.monthly_fee)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
